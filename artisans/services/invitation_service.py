"""
Project invitation lifecycle.

An invitation is a single-use token that grants a role on a project. It
starts `pending` and leaves that state exactly once, for `accepted`,
`declined` or `expired`. Expiry is detected lazily when the token is read
and is persisted at that point; there is no background sweeper.

Accept and decline tolerate client retries: repeating the action that
already succeeded, as the same user, returns the original outcome with
`replayed=True` instead of an error. Any other action on a resolved token
raises `AlreadyResolved`.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import Session, select

from ..core.config import get_settings
from ..core.errors import (
    AlreadyResolved,
    AuthFailure,
    ConflictError,
    Expired,
    InvalidToken,
    NotFoundError,
    ValidationError,
)
from ..models.invitations import TeamInvitation
from ..models.projects import Project, ProjectMember
from ..models.types import InvitationStatus, NotificationType, ProjectRole
from ..models.users import User
from .notification_service import create_smart_notification

logger = logging.getLogger(__name__)


@dataclass
class InvitationOutcome:
    status: InvitationStatus
    project_id: int
    project_name: str
    role: ProjectRole
    replayed: bool = False

    @property
    def redirect_url(self) -> Optional[str]:
        if self.status == InvitationStatus.ACCEPTED:
            return f"/projects/{self.project_id}"
        return None


def generate_invite_token() -> str:
    return secrets.token_urlsafe(32)


def issue_invitation(
    session: Session,
    project: Project,
    inviter: User,
    email: str,
    role: ProjectRole,
    expire_days: Optional[int] = None,
) -> TeamInvitation:
    if role == ProjectRole.OWNER:
        raise ValidationError("A project can only have one owner", field="role")

    email = email.strip().lower()
    expire_days = expire_days or get_settings().INVITATION_EXPIRE_DAYS

    invitee = session.exec(select(User).where(User.email == email)).first()
    if invitee and project.get_member_role(invitee.id) is not None:
        raise ConflictError("User is already a member of this project")

    existing = session.exec(
        select(TeamInvitation).where(
            TeamInvitation.project_id == project.id,
            TeamInvitation.invite_email == email,
            TeamInvitation.status == InvitationStatus.PENDING,
            TeamInvitation.expires_at > datetime.utcnow(),
        )
    ).first()
    if existing:
        raise ConflictError("An invitation is already pending for this email")

    invitation = TeamInvitation(
        project_id=project.id,
        invited_by_user_id=inviter.id,
        invite_email=email,
        role=role,
        invite_token=generate_invite_token(),
        expires_at=datetime.utcnow() + timedelta(days=expire_days),
    )
    session.add(invitation)
    session.flush()

    if invitee:
        create_smart_notification(
            session,
            user_id=invitee.id,
            title="Project invitation",
            message=f"{inviter.display_name} added you to {project.name} as {role.label}",
            type=NotificationType.PROJECT_TEAM.value,
            context="added",
            action_url=f"/join/{invitation.invite_token}",
            related_item_id=invitation.id,
            related_item_type="invitation",
            commit=False,
        )

    session.commit()
    session.refresh(invitation)
    logger.info("Issued invitation %s for project %s", invitation.id, project.id)
    return invitation


def _expire_if_due(session: Session, invitation: TeamInvitation) -> None:
    if invitation.status == InvitationStatus.PENDING and invitation.is_past_lifetime():
        invitation.status = InvitationStatus.EXPIRED
        invitation.resolved_at = datetime.utcnow()
        session.add(invitation)
        session.commit()
        session.refresh(invitation)
        logger.info("Invitation %s expired", invitation.id)


def get_by_token(session: Session, token: str) -> TeamInvitation:
    """Load an invitation by token, applying lazy expiry. Unknown tokens raise InvalidToken."""
    invitation = session.exec(
        select(TeamInvitation).where(TeamInvitation.invite_token == token)
    ).first()
    if invitation is None:
        raise InvalidToken("This invitation link is not valid")
    _expire_if_due(session, invitation)
    return invitation


def _outcome(invitation: TeamInvitation, replayed: bool = False) -> InvitationOutcome:
    return InvitationOutcome(
        status=invitation.status,
        project_id=invitation.project_id,
        project_name=invitation.project.name,
        role=invitation.role,
        replayed=replayed,
    )


def _resolve(session: Session, token: str, user: User, target: InvitationStatus):
    """Shared checks for accept/decline. Returns the invitation and, for a replay, its outcome."""
    invitation = get_by_token(session, token)

    if invitation.invite_email != user.email.lower():
        raise AuthFailure("This invitation was sent to a different email")

    if invitation.status == InvitationStatus.EXPIRED:
        raise Expired("This invitation has expired")

    if invitation.status == target and invitation.resolved_by_user_id == user.id:
        return invitation, _outcome(invitation, replayed=True)

    if invitation.status != InvitationStatus.PENDING:
        raise AlreadyResolved(invitation.status.value)
    return invitation, None


def accept(session: Session, token: str, user: User) -> InvitationOutcome:
    invitation, replay = _resolve(session, token, user, InvitationStatus.ACCEPTED)
    if replay is not None:
        return replay

    project = invitation.project
    if project.get_member_role(user.id) is None:
        session.add(ProjectMember(project_id=project.id, user_id=user.id, role=invitation.role))

    invitation.status = InvitationStatus.ACCEPTED
    invitation.resolved_at = datetime.utcnow()
    invitation.resolved_by_user_id = user.id
    session.add(invitation)

    create_smart_notification(
        session,
        user_id=invitation.invited_by_user_id,
        title="Invitation accepted",
        message=f"{user.display_name} joined {project.name} as {invitation.role.label}",
        type=NotificationType.PROJECT_TEAM.value,
        context="joined",
        action_url=f"/projects/{project.id}",
        related_item_id=project.id,
        related_item_type="project",
        commit=False,
    )
    session.commit()
    session.refresh(invitation)
    logger.info("User %s accepted invitation %s", user.id, invitation.id)
    return _outcome(invitation)


def decline(session: Session, token: str, user: User) -> InvitationOutcome:
    invitation, replay = _resolve(session, token, user, InvitationStatus.DECLINED)
    if replay is not None:
        return replay

    invitation.status = InvitationStatus.DECLINED
    invitation.resolved_at = datetime.utcnow()
    invitation.resolved_by_user_id = user.id
    session.add(invitation)

    create_smart_notification(
        session,
        user_id=invitation.invited_by_user_id,
        title="Invitation declined",
        message=f"{user.display_name} declined the invitation to {invitation.project.name}",
        type=NotificationType.INVITATION.value,
        context="declined",
        related_item_id=invitation.id,
        related_item_type="invitation",
        commit=False,
    )
    session.commit()
    session.refresh(invitation)
    logger.info("User %s declined invitation %s", user.id, invitation.id)
    return _outcome(invitation)


def list_for_project(session: Session, project_id: int) -> List[TeamInvitation]:
    if session.get(Project, project_id) is None:
        raise NotFoundError("Project", project_id)
    invitations = session.exec(
        select(TeamInvitation)
        .where(TeamInvitation.project_id == project_id)
        .order_by(TeamInvitation.created_at.desc())
    ).all()
    for invitation in invitations:
        _expire_if_due(session, invitation)
    return invitations


def list_for_email(session: Session, email: str) -> List[TeamInvitation]:
    invitations = session.exec(
        select(TeamInvitation)
        .where(TeamInvitation.invite_email == email.lower())
        .order_by(TeamInvitation.created_at.desc())
    ).all()
    for invitation in invitations:
        _expire_if_due(session, invitation)
    return invitations
