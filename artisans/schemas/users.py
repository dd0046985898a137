from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel
from pydantic import EmailStr, field_validator

from ..models.types import UserRole
from .validators import normalize_email, check_password


class UserCreate(SQLModel):
    email: EmailStr
    username: str
    password: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.CLIENT

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        return check_password(value)


class UserRead(SQLModel):
    id: int
    email: EmailStr
    username: str
    full_name: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
