"""Service test fixtures — async DB, fake collaborators and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - get_db and every collaborator provider are overridden; no network calls
    - db_manager is patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for workflow
      and route tests (PostgreSQL-specific features are not exercised)
    - PRAGMA foreign_keys=ON: cascades and FK failures behave as in production
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

import uden.infrastructure.database as db_module
from uden.api.dependencies import (
    get_email_relay, get_oauth_registry, get_payment_gateway,
)
from uden.config import Settings, get_settings
from uden.db.base import Base
from uden.infrastructure.database import DatabaseSessionManager, get_db
from uden.infrastructure.oauth_providers import OAuthProviderRegistry
from uden.main import app
import uden.models  # noqa: F401

from tests.services.fakes import (
    PREMIUM_PRICE, FakeEmailRelay, FakeOAuthProvider, FakePaymentGateway,
)


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

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
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def email_relay():
    return FakeEmailRelay()


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def misskey():
    return FakeOAuthProvider("misskey", external_id="9abcmisskey")


@pytest.fixture
def mastodon():
    return FakeOAuthProvider("mastodon", external_id="109876")


@pytest.fixture
def oauth_registry(misskey, mastodon):
    return OAuthProviderRegistry([misskey, mastodon])


@pytest.fixture
def test_settings():
    return Settings(
        stripe={"products": {"premium": PREMIUM_PRICE}, "secret_api_key": "sk_test"},
        billing={"require_verified_email": True},
    )


@pytest.fixture
async def client(
    test_engine, test_session_factory, test_settings,
    email_relay, payment_gateway, oauth_registry,
):
    """FastAPI test client with DB and collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_email_relay] = lambda: email_relay
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_oauth_registry] = lambda: oauth_registry

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
