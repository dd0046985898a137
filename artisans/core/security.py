from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .config import get_settings
from .database import get_session
from .errors import AuthFailure
from ..models.users import User
from ..services.kv_store import KeyValueStore, TokenBlacklist, get_kv_store


settings = get_settings()
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
security = HTTPBearer()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_blacklist(store: KeyValueStore = Depends(get_kv_store)) -> TokenBlacklist:
    return TokenBlacklist(store)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    session: Session = Depends(get_session),
    blacklist: TokenBlacklist = Depends(get_blacklist),
) -> User:
    if blacklist.contains(credentials.credentials):
        raise AuthFailure("Token has been revoked")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise AuthFailure()

    user_id = payload.get("sub")
    if not user_id:
        raise AuthFailure()
    user = session.get(User, int(user_id))
    if not user or not user.is_active:
        raise AuthFailure()
    return user
