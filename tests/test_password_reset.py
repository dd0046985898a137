"""Password reset token tests."""

from datetime import datetime, timedelta

import pytest

from artisans.core.errors import AlreadyResolved, Expired, InvalidToken
from artisans.core.security import verify_password
from artisans.services import password_reset


def test_unknown_email_issues_nothing(session):
    assert password_reset.request_reset(session, "nobody@example.com") is None


def test_request_reset_issues_token(session, owner):
    reset_token = password_reset.request_reset(session, " OLIVIA@example.com ")
    assert reset_token.user_id == owner.id
    assert len(reset_token.token) == 64
    assert reset_token.expires_at > datetime.utcnow() + timedelta(hours=23)


def test_reset_changes_password_once(session, owner):
    reset_token = password_reset.request_reset(session, owner.email)

    user = password_reset.reset_password(session, reset_token.token, "new-password-1")
    assert verify_password("new-password-1", user.password_hash)

    with pytest.raises(AlreadyResolved) as exc_info:
        password_reset.reset_password(session, reset_token.token, "new-password-2")
    assert exc_info.value.state == "used"


def test_expired_token(session, owner):
    reset_token = password_reset.request_reset(session, owner.email)
    reset_token.expires_at = datetime.utcnow() - timedelta(seconds=1)
    session.add(reset_token)
    session.commit()

    with pytest.raises(Expired):
        password_reset.check_token(session, reset_token.token)


def test_invalid_token(session):
    with pytest.raises(InvalidToken):
        password_reset.check_token(session, "deadbeef")
