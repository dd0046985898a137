from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel
from pydantic import EmailStr, field_validator

from ..models.types import InvitationStatus, ProjectRole
from .validators import normalize_email


class InvitationCreate(SQLModel):
    email: EmailStr
    role: ProjectRole

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class InvitationRead(SQLModel):
    id: int
    project_id: int
    project_name: str
    invite_email: str
    role: ProjectRole
    status: InvitationStatus
    expires_at: datetime
    created_at: datetime


class InvitationToken(SQLModel):
    token: str


class InvitationOutcomeRead(SQLModel):
    status: InvitationStatus
    project_id: int
    project_name: str
    role: ProjectRole
    redirect_url: Optional[str] = None
    replayed: bool = False
