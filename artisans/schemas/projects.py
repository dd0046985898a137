from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel

from ..models.types import ProjectRole


class ProjectCreate(SQLModel):
    name: str
    description: Optional[str] = None


class ProjectRead(SQLModel):
    id: int
    name: str
    description: Optional[str]
    owner_id: int
    created_at: datetime


class ProjectMemberRead(SQLModel):
    user_id: int
    username: str
    role: ProjectRole
    joined_at: datetime
