import os
from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Required settings; a local .env or the CI environment may override them
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./clinic_intake.db")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BREVO_API_KEY", "test-brevo-key")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.core.security import create_access_token  # noqa: E402
from app.database import get_db, get_session_factory  # noqa: E402
from app.dependencies import (  # noqa: E402
    enforce_public_rate_limit,
    get_email_dispatcher,
    get_pdf_renderer,
)
from app.main import app  # noqa: E402
from app.models import metadata  # noqa: E402
from app.services.user_service import UserService  # noqa: E402

# Point at PostgreSQL with TEST_DATABASE_URL; otherwise every test gets its
# own SQLite file
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


class FakeRenderer:
    """Stands in for the Chromium renderer."""

    def __init__(self) -> None:
        self.rendered: list[str] = []
        self.error: Exception | None = None
        self.pdf = b"%PDF-1.4 test slip"

    async def render(self, html: str) -> bytes:
        self.rendered.append(html)
        if self.error:
            raise self.error
        return self.pdf


class RecordingDispatcher:
    """Stands in for the Brevo client and remembers every email."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.error: Exception | None = None

    async def send(self, to, subject, html, attachments=None) -> dict:
        if self.error:
            raise self.error
        self.sent.append(
            {"to": to, "subject": subject, "html": html, "attachments": attachments or []}
        )
        return {"messageId": f"<test-{len(self.sent)}@brevo>"}

    def subjects(self) -> list[str]:
        return [email["subject"] for email in self.sent]


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Engine with freshly created tables."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def email_outbox() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest_asyncio.fixture
async def client(
    session_factory,
    fake_renderer: FakeRenderer,
    email_outbox: RecordingDispatcher,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client wired to the test database and fakes."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_pdf_renderer] = lambda: fake_renderer
    app.dependency_overrides[get_email_dispatcher] = lambda: email_outbox
    app.dependency_overrides[enforce_public_rate_limit] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_appointment_data() -> dict:
    """Intake form as the booking wizard submits it."""
    return {
        "fullName": "Jane Doe",
        "gender": "Female",
        "age": 34,
        "phone": "9876543210",
        "email": "jane.doe@example.com",
        "address": {
            "street": "12 Lake View Road",
            "city": "Madurai",
            "state": "Tamil Nadu",
            "pincode": "625001",
        },
        "emergencyContact": {"name": "John Doe", "phone": "9876500000"},
        "primaryConcern": "Anxiety",
        "substanceUse": {"type": "", "frequency": "", "lastConsumption": ""},
        "preferredDate": "2025-03-10",
        "preferredTimeSlot": "10:00 AM - 11:00 AM",
        "appointmentType": "General Consultation",
        "mode": "In-Person",
    }


async def _create_user(db_session, email: str, role: str) -> dict:
    return await UserService.create_user(
        db_session,
        full_name=f"{role.title()} User",
        email=email,
        password="secret123",
        phone="9000000000",
        role=role,
    )


def _headers_for(user: dict) -> dict:
    token = create_access_token(
        data={"sub": str(user["id"]), "role": user["role"]},
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session) -> dict:
    """Create a patient account."""
    return await _create_user(db_session, "patient@example.com", "patient")


@pytest_asyncio.fixture
async def other_user(db_session) -> dict:
    return await _create_user(db_session, "someone.else@example.com", "patient")


@pytest_asyncio.fixture
async def admin_user(db_session) -> dict:
    """Create an admin account."""
    return await _create_user(db_session, "admin@example.com", "admin")


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Authentication headers for the patient."""
    return _headers_for(test_user)


@pytest.fixture
def other_headers(other_user) -> dict:
    return _headers_for(other_user)


@pytest.fixture
def admin_headers(admin_user) -> dict:
    """Authentication headers for the admin."""
    return _headers_for(admin_user)
