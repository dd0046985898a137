from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
from .config import get_settings


settings = get_settings()


def build_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


engine = build_engine(settings.DATABASE_URL)


def create_db_and_tables(bind=None):
    from .. import models  # noqa: F401  registers tables on the metadata
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
