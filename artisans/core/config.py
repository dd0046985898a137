from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str = "sqlite:///./artisans.db"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Email; missing credentials switch the mailer to the mock transport
    MAIL_USERNAME: Optional[str] = None
    MAIL_PASSWORD: Optional[str] = None
    MAIL_FROM: str = "artisans-platform@example.com"
    MAIL_PORT: int = 587
    MAIL_SERVER: Optional[str] = None
    APP_URL: str = "http://localhost:5000"

    INVITATION_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_HOURS: int = 24

    # Key-value store for preferences and the token blacklist
    KV_BACKEND: str = "memory"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379

    LOG_LEVEL: str = "info"
    CORS_ORIGINS: List[str] = ["http://localhost:5000", "http://localhost:5173"]

    class Config:
        env_file = ".env"

    @property
    def mail_configured(self) -> bool:
        return bool(self.MAIL_SERVER and self.MAIL_USERNAME and self.MAIL_PASSWORD)


@lru_cache
def get_settings():
    return Settings()
