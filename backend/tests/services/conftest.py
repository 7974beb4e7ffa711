"""Service test fixtures — async DB, fake authority, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Components under test receive a DatabaseSessionManager bound to that database
    - Seed helpers commit through their own session and return plain ids, so no
      ORM instance outlives the session that loaded it
    - Route dependencies are replaced through app.dependency_overrides

Design Decisions:
    - SQLite in-memory + StaticPool: fast, no external dependency, one shared connection
      so every session sees the tables created by the fixture
    - foreign_keys=ON on connect, so ON DELETE CASCADE behaves as on PostgreSQL
    - db_manager patched for the readiness probe, which reads the module global
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from gatekeeper.api.dependencies import get_access_resolver, get_resource_binder
from gatekeeper.core.access_resolution import (
    AccessSnapshot, Authorized, CheckOutcome, VisitorSession,
)
from gatekeeper.core.domain_types import AccessStatus
from gatekeeper.db.base import Base
from gatekeeper.infrastructure.database import DatabaseSessionManager
import gatekeeper.infrastructure.database as db_module
from gatekeeper.main import app
from gatekeeper.models import Account, CardRegistration
from gatekeeper.services.access_resolver import AccessResolver
from gatekeeper.services.card_binding import SqlResourceBinder


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _enable_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def db(test_engine, test_session_factory):
    """DatabaseSessionManager wired to the in-memory engine."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def binder(db):
    return SqlResourceBinder(db)


# ─── Seed & inspection helpers ───────────────────────────────────

@pytest.fixture
def make_account(db):
    """Insert an account (and its card registration when usc_id is given)."""

    async def _make(
        account_type: str = "full",
        expires_at: datetime | None = None,
        usc_id: str | None = None,
        name: str = "Test User",
    ) -> str:
        async with db.session() as session:
            async with session.begin():
                account = Account(
                    name=name,
                    account_type=account_type,
                    account_expires_at=expires_at,
                    usc_id=usc_id,
                )
                session.add(account)
                await session.flush()
                if usc_id:
                    session.add(
                        CardRegistration(usc_id=usc_id, user_id=account.user_id),
                    )
                return account.user_id

    return _make


@pytest.fixture
def make_guest(make_account):
    """Guest account expiring `expires_in` from NOW (negative = already expired)."""

    async def _make(expires_in: timedelta, usc_id: str | None = None) -> str:
        return await make_account(
            account_type="guest", expires_at=NOW + expires_in, usc_id=usc_id,
        )

    return _make


@pytest.fixture
def store(db):
    """Read-only views on the DB, each through a fresh session."""

    class _Store:
        async def account(self, user_id: str) -> Account | None:
            async with db.session() as session:
                return await session.get(Account, user_id)

        async def registration(self, usc_id: str) -> CardRegistration | None:
            async with db.session() as session:
                return await session.get(CardRegistration, usc_id)

        async def registration_count(self) -> int:
            async with db.session() as session:
                rows = await session.scalars(select(CardRegistration))
                return len(rows.all())

    return _Store()


# ─── Fake authority ──────────────────────────────────────────────

class FakeAuthority:
    """Stands in for AccessStatusClient. Records every session it is asked about."""

    def __init__(
        self,
        outcome: CheckOutcome | None = None,
        error: Exception | None = None,
    ):
        self.outcome = outcome or Authorized(AccessSnapshot(AccessStatus.NONE))
        self.error = error
        self.calls: list[VisitorSession] = []

    async def check(self, session: VisitorSession) -> CheckOutcome:
        self.calls.append(session)
        if self.error:
            raise self.error
        return self.outcome


@pytest.fixture
def authority():
    return FakeAuthority()


# ─── HTTP client ─────────────────────────────────────────────────

@pytest.fixture
async def client(db, binder, authority):
    """FastAPI test client with components overridden (lifespan not run)."""
    app.dependency_overrides[get_access_resolver] = lambda: AccessResolver(authority)
    app.dependency_overrides[get_resource_binder] = lambda: binder

    original_manager = db_module.db_manager
    db_module.db_manager = db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
