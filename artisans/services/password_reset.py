"""
Password reset tokens.

A token is good for one password change within its lifetime. Used tokens
stay on record so that reuse reports `AlreadyResolved` rather than looking
like an unknown link.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from ..core.config import get_settings
from ..core.errors import AlreadyResolved, Expired, InvalidToken
from ..core.security import get_password_hash
from ..models.users import PasswordResetToken, User

logger = logging.getLogger(__name__)


def request_reset(session: Session, email: str, expire_hours: Optional[int] = None) -> Optional[PasswordResetToken]:
    """
    Issue a reset token for `email`.

    Returns None for an unknown email; callers must answer both cases the
    same way so that account existence is not revealed.
    """
    user = session.exec(select(User).where(User.email == email.strip().lower())).first()
    if not user:
        logger.info("Password reset requested for unknown email")
        return None

    expire_hours = expire_hours or get_settings().RESET_TOKEN_EXPIRE_HOURS
    reset_token = PasswordResetToken(
        token=secrets.token_hex(32),
        user_id=user.id,
        expires_at=datetime.utcnow() + timedelta(hours=expire_hours),
    )
    session.add(reset_token)
    session.commit()
    session.refresh(reset_token)
    return reset_token


def check_token(session: Session, token: str) -> PasswordResetToken:
    """Raise the terminal state of an unusable token; return the record otherwise."""
    reset_token = session.exec(
        select(PasswordResetToken).where(PasswordResetToken.token == token)
    ).first()
    if reset_token is None:
        raise InvalidToken("This password reset link is not valid")
    if reset_token.used_at is not None:
        raise AlreadyResolved("used", "This password reset link has already been used")
    if datetime.utcnow() >= reset_token.expires_at:
        raise Expired("This password reset link has expired")
    return reset_token


def reset_password(session: Session, token: str, new_password: str) -> User:
    reset_token = check_token(session, token)

    user = session.get(User, reset_token.user_id)
    if user is None:
        raise InvalidToken("This password reset link is not valid")

    user.password_hash = get_password_hash(new_password)
    reset_token.used_at = datetime.utcnow()
    session.add(user)
    session.add(reset_token)
    session.commit()
    logger.info("Password reset for user %s", user.id)
    return user
