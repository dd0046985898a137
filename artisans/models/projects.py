from datetime import datetime
from typing import List, Optional
from sqlmodel import SQLModel, Field, Relationship
from .base import TimestampModel
from .types import ProjectRole
from .users import User


class Project(TimestampModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = None
    owner_id: int = Field(foreign_key="user.id")

    members: List["ProjectMember"] = Relationship(back_populates="project")
    invitations: List["TeamInvitation"] = Relationship(back_populates="project")

    def get_member_role(self, user_id: int) -> Optional[ProjectRole]:
        if user_id == self.owner_id:
            return ProjectRole.OWNER
        for member in self.members:
            if member.user_id == user_id:
                return member.role
        return None


class ProjectMember(SQLModel, table=True):
    project_id: int = Field(foreign_key="project.id", primary_key=True)
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    role: ProjectRole = Field(default=ProjectRole.CONTRACTOR)
    joined_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    project: Project = Relationship(back_populates="members")
    user: User = Relationship(back_populates="memberships")
