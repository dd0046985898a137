"""Shared test fixtures."""

import os

# Configure before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["KV_BACKEND"] = "memory"
for key in ("MAIL_SERVER", "MAIL_USERNAME", "MAIL_PASSWORD"):
    os.environ.pop(key, None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import artisans.models  # noqa: F401
from artisans.core.database import get_session
from artisans.core.security import create_access_token, get_password_hash
from artisans.models import Project, User
from artisans.services.email_services import EmailService, MockTransport, get_email_service
from artisans.services.kv_store import MemoryStore, get_kv_store

DEFAULT_PASSWORD = "correct-horse"
_PASSWORD_HASH = get_password_hash(DEFAULT_PASSWORD)


class RecordingTransport(MockTransport):
    """Mock transport that keeps every message it was asked to send."""

    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)
        return super().send(message)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by the test session and the app."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def kv():
    return MemoryStore()


@pytest.fixture
def mail_transport():
    return RecordingTransport()


@pytest.fixture
def mailer(mail_transport):
    return EmailService(transport=mail_transport)


@pytest.fixture
def make_user(session):
    def _make_user(username: str, email: str = None, **kwargs) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=_PASSWORD_HASH,
            **kwargs,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user("olivia", full_name="Olivia Mensah")


@pytest.fixture
def invitee(make_user):
    return make_user("kwame", full_name="Kwame Boateng")


@pytest.fixture
def project(session, owner):
    project = Project(name="Osu Duplex", owner_id=owner.id)
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def app(engine, kv, mailer):
    """Application instance wired to the in-memory database, store and mailer."""
    from artisans.main import create_app

    _app = create_app(init_db=False)

    def override_session():
        with Session(engine) as s:
            yield s

    _app.dependency_overrides[get_session] = override_session
    _app.dependency_overrides[get_kv_store] = lambda: kv
    _app.dependency_overrides[get_email_service] = lambda: mailer
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
