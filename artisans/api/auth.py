from fastapi import APIRouter, Depends, BackgroundTasks, Security, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlmodel import Session, select

from ..core.config import get_settings
from ..core.database import get_session
from ..core.errors import ConflictError, AuthFailure, ValidationError
from ..core.security import (
    create_access_token,
    get_blacklist,
    get_current_user,
    get_password_hash,
    security,
    verify_password,
)
from ..models.users import User
from ..schemas.auth import (
    ForgotPassword,
    LoginRequest,
    RegisterResponse,
    ResetPassword,
    ResetTokenState,
    TokenResponse,
)
from ..schemas.users import UserCreate
from ..services import password_reset
from ..services.email_services import EmailService, deliver_quietly, get_email_service
from ..services.kv_store import TokenBlacklist


router = APIRouter()
settings = get_settings()

RESET_REQUESTED_MESSAGE = "If an account with that email exists, we've sent a password reset link"


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, session: Session = Depends(get_session)):
    if session.exec(select(User).where(User.email == user_data.email)).first():
        raise ConflictError("Email already registered")
    if session.exec(select(User).where(User.username == user_data.username)).first():
        raise ConflictError("Username already taken")

    user = User(
        email=user_data.email,
        username=user_data.username,
        full_name=user_data.full_name,
        role=user_data.role,
        password_hash=get_password_hash(user_data.password),
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return RegisterResponse(user=user, message="Registration successful")


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == login_data.email)).first()

    if not user or not verify_password(login_data.password, user.password_hash):
        raise AuthFailure("Incorrect email or password")
    if not user.is_active:
        raise AuthFailure("This account has been deactivated")

    return TokenResponse(
        access_token=create_access_token({"sub": str(user.id)}),
        token_type="bearer",
        user=user,
    )


@router.post("/logout")
async def logout(
    credentials: HTTPAuthorizationCredentials = Security(security),
    current_user: User = Depends(get_current_user),
    blacklist: TokenBlacklist = Depends(get_blacklist),
):
    blacklist.add(credentials.credentials, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)
    return {"message": "Logged out"}


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPassword,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    mailer: EmailService = Depends(get_email_service),
):
    """
    Issue a reset link and mail it.

    The response is identical whether or not the account exists, and mail
    delivery failures are only logged.
    """
    reset_token = password_reset.request_reset(session, body.email)
    if reset_token is not None:
        background_tasks.add_task(
            deliver_quietly, mailer.send_password_reset_email, body.email, reset_token.token
        )
    return {"message": RESET_REQUESTED_MESSAGE}


@router.get("/reset-password/{token}", response_model=ResetTokenState)
async def check_reset_token(token: str, session: Session = Depends(get_session)):
    password_reset.check_token(session, token)
    return ResetTokenState(valid=True, state="pending")


@router.post("/reset-password")
async def reset_password(body: ResetPassword, session: Session = Depends(get_session)):
    if body.password != body.confirm_password:
        raise ValidationError("Passwords must match", field="confirm_password")
    password_reset.reset_password(session, body.token, body.password)
    return {"message": "Password has been successfully reset"}
