
from .base import TimestampModel
from .types import UserRole, ProjectRole, InvitationStatus, NotificationType
from .users import User, PasswordResetToken
from .projects import Project, ProjectMember
from .invitations import TeamInvitation
from .notifications import Notification

__all__ = [
    "TimestampModel",
    "UserRole",
    "ProjectRole",
    "InvitationStatus",
    "NotificationType",
    "User",
    "PasswordResetToken",
    "Project",
    "ProjectMember",
    "TeamInvitation",
    "Notification",
]
