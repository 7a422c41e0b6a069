"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets a fresh schema and a session joined to an outer
  transaction that rolls back after the test.
- ``TEST_DATABASE_URL`` selects the database; the default is an in-memory
  SQLite database through aiosqlite.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.auth.jwt import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.booking import Booking
from app.models.user import User
from app.notifications import outbox

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _make_engine() -> AsyncEngine:
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, echo=False, pool_pre_ping=True)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT. Take over.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


# ---------------------------------------------------------------------------
# Per-test: schema, transactional rollback, HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create the schema on a fresh engine and drop it afterwards."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        # Mirrors get_db; the outer test transaction stands in for the commit.
        try:
            yield db_session
            await db_session.flush()
        except Exception:
            outbox.discard(db_session)
            raise
        outbox.send_committed(db_session)

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def notifications(monkeypatch: pytest.MonkeyPatch) -> dict[str, MagicMock]:
    """Replace notification dispatch with mocks so no e-mail task is scheduled."""
    created = MagicMock(return_value=[])
    cancelled = MagicMock(return_value=[])
    monkeypatch.setattr("app.services.booking_service.notify_booking_created", created)
    monkeypatch.setattr("app.services.booking_service.notify_booking_cancelled", cancelled)
    return {"created": created, "cancelled": cancelled}


# ---------------------------------------------------------------------------
# Convenience fixtures: users and auth headers
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, prefix: str, role: str = "member", is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{prefix}-{unique}@test.com",
        full_name=f"{prefix.title()} User",
        phone="+15550000000",
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A regular player."""
    return await _create_user(db_session, "player")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second regular player."""
    return await _create_user(db_session, "rival")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "admin", role="admin")


@pytest_asyncio.fixture
async def inactive_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "inactive", is_active=False)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    return headers_for(test_user)


@pytest_asyncio.fixture
async def other_auth_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: bookings inserted directly (bypassing admission rules)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def make_booking(db_session: AsyncSession) -> Callable[..., Awaitable[Booking]]:
    """Return a factory that inserts a booking row as-is."""

    async def _make(
        user: User,
        court_id: str = "court-1",
        booking_date: str = "2025-06-10",
        start_time: str = "10:00",
        end_time: str = "11:00",
        coach_id: str | None = None,
        status: str = "confirmed",
        membership_status: str = "member",
    ) -> Booking:
        booking = Booking(
            user_id=user.id,
            court_id=court_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            coach_id=coach_id,
            coach_name=f"Coach {coach_id}" if coach_id else None,
            membership_status=membership_status,
            status=status,
        )
        db_session.add(booking)
        await db_session.flush()
        await db_session.refresh(booking)
        return booking

    return _make
