"""
Shared fixtures for doclocker tests.

- In-memory SQLite (aiosqlite + StaticPool) behind the real Database object
- A controllable clock and a recording mailer for the share-link flow
- An httpx AsyncClient bound to the FastAPI app through ASGITransport
"""

from __future__ import annotations

import smtplib
from datetime import datetime, timedelta, timezone
from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from doclocker.core.config import Settings
from doclocker.core.db import Database
from doclocker.db.repositories.user_repository import UserRepository
from doclocker.domains.documents.schemas import DocumentCreate
from doclocker.domains.documents.services import DocumentService
from doclocker.domains.identity.entities import User
from doclocker.domains.notifications.dispatcher import NotificationDispatcher
from doclocker.domains.notifications.mailer import Mailer
from doclocker.main import create_app

PDF_BYTES = b"%PDF-1.4\n% test document\n"


class FakeClock:
    """Часы, которыми управляет тест"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingMailer(Mailer):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List = []

    async def send(self, message) -> None:
        if self.fail:
            raise smtplib.SMTPException("connection refused")
        self.sent.append(message)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret",
        frontend_url="http://frontend.test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings):
    engine = create_async_engine(
        settings.database_url,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(settings, engine=engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def dispatcher(mailer) -> NotificationDispatcher:
    return NotificationDispatcher(mailer, "Digital Locker <no-reply@test>")


async def make_user(
    session,
    email: str = "owner@example.com",
    aadhaar_number: str = "123456789012",
    name: str = "Owner Person",
    password: str = "secret123",
    verified: bool = True,
) -> User:
    user = User.create_user(
        name=name,
        email=email,
        password=password,
        aadhaar_number=aadhaar_number,
        phone="9876543210",
    )
    if verified:
        user.mark_verified()
    return await UserRepository(session).create(user)


async def make_document(session, settings, owner: User, title: str = "Degree Certificate", category: str = "education"):
    service = DocumentService(session, settings)
    stored = service.build_file("degree.pdf", "application/pdf", PDF_BYTES)
    return await service.upload_document(
        owner, DocumentCreate(title=title, category=category), stored
    )


@pytest_asyncio.fixture
async def owner(session) -> User:
    return await make_user(session)


@pytest_asyncio.fixture
async def stranger(session) -> User:
    return await make_user(
        session, email="stranger@example.com", aadhaar_number="210987654321", name="Stranger"
    )


@pytest_asyncio.fixture
async def document(session, settings, owner):
    return await make_document(session, settings, owner)


@pytest_asyncio.fixture
async def client(settings, database, dispatcher):
    app = create_app(settings, database=database, dispatcher=dispatcher)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def user_factory(session):
    async def _make(**kwargs) -> User:
        return await make_user(session, **kwargs)
    return _make


@pytest.fixture
def document_factory(session, settings):
    async def _make(owner: User, **kwargs):
        return await make_document(session, settings, owner, **kwargs)
    return _make


@pytest.fixture
def failing_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(RecordingMailer(fail=True), "no-reply@test")
