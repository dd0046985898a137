"""
Project invitations.

- `POST /projects/{project_id}/invitations` issues an invitation and mails the
  join link in the background (requires INVITE_MEMBERS).
- `GET /projects/{project_id}/invitations` lists a project's invitations.
- `GET /invitations/mine` lists invitations sent to the caller's email.
- `GET /invitations/{token}` reports an invitation's state for the join page.
- `POST /invitations/accept` and `POST /invitations/decline` resolve a token.
  Retrying a call that already succeeded returns the same outcome.
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlmodel import Session

from ..core.database import get_session
from ..core.permission import Permission, require_permission
from ..core.security import get_current_user
from ..models.invitations import TeamInvitation
from ..models.projects import Project
from ..models.users import User
from ..schemas.invitations import (
    InvitationCreate,
    InvitationOutcomeRead,
    InvitationRead,
    InvitationToken,
)
from ..services import invitation_service
from ..services.email_services import EmailService, deliver_quietly, get_email_service


router = APIRouter()


def to_read(invitation: TeamInvitation) -> InvitationRead:
    return InvitationRead(
        id=invitation.id,
        project_id=invitation.project_id,
        project_name=invitation.project.name,
        invite_email=invitation.invite_email,
        role=invitation.role,
        status=invitation.status,
        expires_at=invitation.expires_at,
        created_at=invitation.created_at,
    )


def to_outcome(outcome: invitation_service.InvitationOutcome) -> InvitationOutcomeRead:
    return InvitationOutcomeRead(
        status=outcome.status,
        project_id=outcome.project_id,
        project_name=outcome.project_name,
        role=outcome.role,
        redirect_url=outcome.redirect_url,
        replayed=outcome.replayed,
    )


@router.post(
    "/projects/{project_id}/invitations",
    response_model=InvitationRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(
    invitation_data: InvitationCreate,
    background_tasks: BackgroundTasks,
    project: Project = Depends(require_permission(Permission.INVITE_MEMBERS)),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    mailer: EmailService = Depends(get_email_service),
):
    invitation = invitation_service.issue_invitation(
        session, project, current_user, invitation_data.email, invitation_data.role
    )
    background_tasks.add_task(
        deliver_quietly, mailer.send_team_invitation_email, invitation, project.name
    )
    return to_read(invitation)


@router.get("/projects/{project_id}/invitations", response_model=List[InvitationRead])
async def list_project_invitations(
    project: Project = Depends(require_permission(Permission.INVITE_MEMBERS)),
    session: Session = Depends(get_session),
):
    return [to_read(i) for i in invitation_service.list_for_project(session, project.id)]


@router.get("/invitations/mine", response_model=List[InvitationRead])
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return [to_read(i) for i in invitation_service.list_for_email(session, current_user.email)]


@router.get("/invitations/{token}", response_model=InvitationRead)
async def get_invitation(token: str, session: Session = Depends(get_session)):
    return to_read(invitation_service.get_by_token(session, token))


@router.post("/invitations/accept", response_model=InvitationOutcomeRead)
async def accept_invitation(
    body: InvitationToken,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return to_outcome(invitation_service.accept(session, body.token, current_user))


@router.post("/invitations/decline", response_model=InvitationOutcomeRead)
async def decline_invitation(
    body: InvitationToken,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return to_outcome(invitation_service.decline(session, body.token, current_user))
