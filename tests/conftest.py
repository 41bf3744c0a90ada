"""
Pytest fixtures for all tests.

Provides:
- A fresh SQLite database per test
- HTTP client wired to the app with the database dependency overridden
- Two seeded tenants (Free "acme", Pro "globex") with an admin and a member each
- Recorded notification dispatch instead of a Celery broker
"""

import os

# Settings are read at import time; configure before importing the app
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("BCRYPT_ROUNDS", "10")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SENTRY_ENABLED", "false")
os.environ.setdefault("DB_CREATE_TABLES", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("IDENTITY_VERIFIER", "database")

from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

import notesaas.models  # noqa: F401  (registers tables on Base.metadata)
from notesaas.core.database import Base, enable_sqlite_foreign_keys, get_db
from notesaas.features.auth.identity import Principal
from notesaas.features.notifications import dispatch
from notesaas.features.notifications.tasks import (
    send_invitation_email,
    send_upgrade_request_email,
)
from notesaas.main import create_application
from notesaas.models import Tenant, TenantPlan, User, UserRole
from tests.factories import TenantFactory, UserFactory

REAL_ENQUEUE = dispatch.enqueue


@pytest_asyncio.fixture(scope="function")
async def test_db_engine(tmp_path):
    """
    Create test database engine.

    A file-backed SQLite database per test; NullPool gives every session
    its own connection, like separate requests against a real server.
    Foreign keys are enforced as in ``DatabaseManager.init``.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database (use for fresh reads)."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by the test body and factories."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app(session_factory):
    """
    Create FastAPI test application.

    Each request gets its own session, mirroring ``get_db``.
    """
    application = create_application()

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/api/v1/notes")
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def sent_notifications(monkeypatch) -> list[tuple[str, dict[str, Any]]]:
    """Record notification jobs instead of publishing to a broker."""
    calls: list[tuple[str, dict[str, Any]]] = []

    def fake_enqueue(task, **kwargs):
        calls.append((task.name.rsplit(".", 1)[-1], kwargs))
        return True

    monkeypatch.setattr(dispatch, "enqueue", fake_enqueue)
    return calls


@pytest.fixture
def broker_down(monkeypatch, sent_notifications) -> None:
    """Real dispatch, with a broker that refuses every publish."""

    def refuse(**kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(dispatch, "enqueue", REAL_ENQUEUE)
    for task in (send_invitation_email, send_upgrade_request_email):
        monkeypatch.setattr(task, "delay", refuse)


# Seeded tenants and users
@pytest_asyncio.fixture
async def acme(db_session: AsyncSession) -> Tenant:
    """Free tenant."""
    return await TenantFactory.create(db_session, name="Acme Corp", slug="acme")


@pytest_asyncio.fixture
async def globex(db_session: AsyncSession) -> Tenant:
    """Pro tenant."""
    return await TenantFactory.create(
        db_session, name="Globex Corporation", slug="globex", plan=TenantPlan.PRO
    )


@pytest_asyncio.fixture
async def acme_admin(db_session: AsyncSession, acme: Tenant) -> User:
    return await UserFactory.create(
        db_session, acme, email="admin@acme.com", role=UserRole.ADMIN
    )


@pytest_asyncio.fixture
async def acme_member(db_session: AsyncSession, acme: Tenant) -> User:
    return await UserFactory.create(db_session, acme, email="user@acme.com")


@pytest_asyncio.fixture
async def globex_admin(db_session: AsyncSession, globex: Tenant) -> User:
    return await UserFactory.create(
        db_session, globex, email="admin@globex.com", role=UserRole.ADMIN
    )


@pytest_asyncio.fixture
async def globex_member(db_session: AsyncSession, globex: Tenant) -> User:
    return await UserFactory.create(db_session, globex, email="user@globex.com")


@pytest.fixture
def admin_principal(acme_admin: User, acme: Tenant) -> Principal:
    return Principal.from_models(acme_admin, acme)


@pytest.fixture
def member_principal(acme_member: User, acme: Tenant) -> Principal:
    return Principal.from_models(acme_member, acme)
