from sqlmodel import SQLModel
from pydantic import EmailStr, field_validator

from .users import UserRead
from .validators import normalize_email, check_password


class TokenResponse(SQLModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class LoginRequest(SQLModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class RegisterResponse(SQLModel):
    message: str
    user: UserRead


class ForgotPassword(SQLModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class ResetPassword(SQLModel):
    token: str
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        return check_password(value)


class ResetTokenState(SQLModel):
    valid: bool
    state: str
