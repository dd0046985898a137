"""Invitation lifecycle tests."""

from datetime import datetime, timedelta

import pytest
from sqlmodel import select

from artisans.core.errors import (
    AlreadyResolved,
    AuthFailure,
    ConflictError,
    Expired,
    InvalidToken,
    NotFoundError,
    ValidationError,
)
from artisans.models import Notification, TeamInvitation
from artisans.models.types import InvitationStatus, ProjectRole
from artisans.services import invitation_service


@pytest.fixture
def invitation(session, project, owner, invitee):
    return invitation_service.issue_invitation(
        session, project, owner, invitee.email, ProjectRole.CONTRACTOR
    )


def notifications_for(session, user):
    return session.exec(select(Notification).where(Notification.user_id == user.id)).all()


def test_issue_creates_pending_invitation(invitation, invitee):
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.invite_email == invitee.email
    assert len(invitation.invite_token) >= 32
    assert invitation.expires_at - invitation.created_at >= timedelta(days=6, hours=23)


def test_issue_normalizes_email(session, project, owner):
    invitation = invitation_service.issue_invitation(
        session, project, owner, "  Ama@Example.COM ", ProjectRole.INSPECTOR
    )
    assert invitation.invite_email == "ama@example.com"


def test_issue_notifies_existing_invitee(session, invitation, invitee):
    [notification] = notifications_for(session, invitee)
    assert notification.type == "project_team"
    assert notification.action_url == f"/join/{invitation.invite_token}"
    assert "Osu Duplex" in notification.message


def test_cannot_invite_as_owner(session, project, owner):
    with pytest.raises(ValidationError) as exc_info:
        invitation_service.issue_invitation(session, project, owner, "x@example.com", ProjectRole.OWNER)
    assert exc_info.value.field == "role"


def test_duplicate_pending_invitation_conflicts(session, project, owner, invitation, invitee):
    with pytest.raises(ConflictError):
        invitation_service.issue_invitation(
            session, project, owner, invitee.email, ProjectRole.INSPECTOR
        )


def test_cannot_invite_existing_member(session, project, owner):
    with pytest.raises(ConflictError):
        invitation_service.issue_invitation(session, project, owner, owner.email, ProjectRole.CONTRACTOR)


def test_accept_grants_membership_and_notifies_inviter(session, project, owner, invitee, invitation):
    outcome = invitation_service.accept(session, invitation.invite_token, invitee)

    assert outcome.status == InvitationStatus.ACCEPTED
    assert outcome.project_name == "Osu Duplex"
    assert outcome.redirect_url == f"/projects/{project.id}"
    assert outcome.replayed is False

    session.refresh(project)
    assert project.get_member_role(invitee.id) == ProjectRole.CONTRACTOR

    [notification] = notifications_for(session, owner)
    assert notification.type == "project_team"
    assert "Kwame Boateng" in notification.message


def test_accept_twice_replays_outcome(session, owner, invitee, invitation):
    first = invitation_service.accept(session, invitation.invite_token, invitee)
    second = invitation_service.accept(session, invitation.invite_token, invitee)

    assert second.replayed is True
    assert (second.status, second.project_id, second.role) == (first.status, first.project_id, first.role)
    # no second membership row and no second notification
    assert len(notifications_for(session, owner)) == 1


def test_decline_then_accept_is_already_resolved(session, invitee, invitation):
    outcome = invitation_service.decline(session, invitation.invite_token, invitee)
    assert outcome.status == InvitationStatus.DECLINED
    assert outcome.redirect_url is None

    with pytest.raises(AlreadyResolved) as exc_info:
        invitation_service.accept(session, invitation.invite_token, invitee)
    assert exc_info.value.state == "declined"
    assert exc_info.value.status_code == 409


def test_decline_twice_replays(session, invitee, invitation):
    invitation_service.decline(session, invitation.invite_token, invitee)
    assert invitation_service.decline(session, invitation.invite_token, invitee).replayed is True


def test_decline_notifies_inviter(session, owner, invitee, invitation):
    invitation_service.decline(session, invitation.invite_token, invitee)
    [notification] = notifications_for(session, owner)
    assert notification.type == "invitation"
    assert "declined" in notification.message


def test_expired_invitation_is_marked_lazily(session, invitee, invitation):
    invitation.expires_at = datetime.utcnow() - timedelta(minutes=1)
    session.add(invitation)
    session.commit()

    with pytest.raises(Expired):
        invitation_service.accept(session, invitation.invite_token, invitee)

    stored = session.get(TeamInvitation, invitation.id)
    assert stored.status == InvitationStatus.EXPIRED
    assert stored.resolved_at is not None


def test_expired_invitation_can_be_reissued(session, project, owner, invitee, invitation):
    invitation.expires_at = datetime.utcnow() - timedelta(minutes=1)
    session.add(invitation)
    session.commit()

    fresh = invitation_service.issue_invitation(
        session, project, owner, invitee.email, ProjectRole.CONTRACTOR
    )
    assert fresh.invite_token != invitation.invite_token


def test_unknown_token_is_invalid(session, invitee):
    with pytest.raises(InvalidToken) as exc_info:
        invitation_service.accept(session, "no-such-token", invitee)
    assert exc_info.value.state == "invalid"


def test_other_user_cannot_accept(session, make_user, invitation):
    stranger = make_user("yaw")
    with pytest.raises(AuthFailure):
        invitation_service.accept(session, invitation.invite_token, stranger)


def test_list_for_project_and_email(session, project, invitee, invitation):
    assert [i.id for i in invitation_service.list_for_project(session, project.id)] == [invitation.id]
    assert [i.id for i in invitation_service.list_for_email(session, invitee.email.upper())] == [invitation.id]

    with pytest.raises(NotFoundError):
        invitation_service.list_for_project(session, 9999)
