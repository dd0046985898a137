from datetime import datetime
from typing import Optional, List, TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from .base import TimestampModel
from .types import UserRole

if TYPE_CHECKING:
    from .projects import ProjectMember


class UserBase(SQLModel):
    email: str = Field(unique=True, index=True)
    username: str = Field(unique=True, index=True)
    full_name: Optional[str] = None
    role: UserRole = Field(default=UserRole.CLIENT)


class User(UserBase, TimestampModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str = Field(min_length=4)
    is_active: bool = Field(default=True)

    # Relationships
    memberships: List["ProjectMember"] = Relationship(back_populates="user")

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class PasswordResetToken(SQLModel, table=True):
    """A single-use reset token. Kept after use so that reuse is reported as such."""
    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(unique=True, index=True)
    user_id: int = Field(foreign_key="user.id")
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
