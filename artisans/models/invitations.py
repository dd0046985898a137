from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlmodel import Field, Relationship
from .base import TimestampModel
from .types import InvitationStatus, ProjectRole

if TYPE_CHECKING:
    from .projects import Project


class TeamInvitation(TimestampModel, table=True):
    __tablename__ = "team_invitation"

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", index=True)
    invited_by_user_id: int = Field(foreign_key="user.id")
    invite_email: str = Field(index=True)
    role: ProjectRole
    invite_token: str = Field(unique=True, index=True)
    status: InvitationStatus = Field(default=InvitationStatus.PENDING)
    expires_at: datetime
    resolved_at: Optional[datetime] = None
    resolved_by_user_id: Optional[int] = Field(default=None, foreign_key="user.id")

    project: "Project" = Relationship(back_populates="invitations")

    def is_past_lifetime(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) >= self.expires_at
