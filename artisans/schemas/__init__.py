from .users import UserCreate, UserRead
from .auth import TokenResponse, LoginRequest, RegisterResponse, ForgotPassword, ResetPassword
from .projects import ProjectCreate, ProjectRead, ProjectMemberRead
from .invitations import InvitationCreate, InvitationRead, InvitationToken, InvitationOutcomeRead
from .notifications import NotificationRead, NotificationSummary, UnreadCount, SoundPreference

__all__ = [
    "UserCreate", "UserRead",
    "TokenResponse", "LoginRequest", "RegisterResponse", "ForgotPassword", "ResetPassword",
    "ProjectCreate", "ProjectRead", "ProjectMemberRead",
    "InvitationCreate", "InvitationRead", "InvitationToken", "InvitationOutcomeRead",
    "NotificationRead", "NotificationSummary", "UnreadCount", "SoundPreference",
]
