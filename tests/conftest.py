"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from deeplink_router.core.app_config import ConfigTable
from deeplink_router.core.config import Settings
from deeplink_router.core.database import create_session_factory, init_db
from deeplink_router.main import create_app
from deeplink_router.models import DeepLink, DeepLinkClick
from deeplink_router.services.exceptions import PersistenceError
from deeplink_router.services.link_store import SqlAlchemyLinkStore
from deeplink_router.services.resolver import ResolutionEngine

DOMAIN = "links.test"
DEFAULT_FALLBACK = "https://www.acme.test"

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
ANDROID_UA = (
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36"
)
DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

APPS_CONFIG = {
    "domain": DOMAIN,
    "defaultFallback": DEFAULT_FALLBACK,
    "apps": [
        {
            "appId": "acmeApp",
            "fallbackUrl": "https://acme.test/open?src=link&r=old",
            "ios": {"teamId": "T1", "bundleId": "com.acme.app", "paths": ["/product/*"]},
            "android": {
                "package": "com.acme.app",
                "sha256CertFingerprints": ["AA:BB", "CC:DD"],
            },
        },
        {
            "appId": "shopApp",
            "defaultRoute": "/home",
            "fallbackUrl": "https://shop.test",
            "android": {"package": "com.shop.app", "sha256CertFingerprints": ["EE:FF"]},
        },
    ],
}


class FailingLinkStore:
    """Link store whose selected operations raise PersistenceError."""

    def __init__(self, inner: SqlAlchemyLinkStore | None = None, fail_on: set[str] | None = None) -> None:
        self.inner = inner
        self.fail_on = fail_on or {"create", "find_active_by_slug", "append_click"}

    async def create(self, app_id, route, params):
        if "create" in self.fail_on:
            raise PersistenceError("database unavailable")
        return await self.inner.create(app_id, route, params)

    async def find_active_by_slug(self, slug):
        if "find_active_by_slug" in self.fail_on:
            raise PersistenceError("database unavailable")
        return await self.inner.find_active_by_slug(slug)

    async def append_click(self, slug, ip, user_agent):
        if "append_click" in self.fail_on:
            raise PersistenceError("database unavailable")
        return await self.inner.append_click(slug, ip, user_agent)


async def fetch_clicks(
    session_factory: async_sessionmaker[AsyncSession],
    slug: str,
) -> list[DeepLinkClick]:
    """Load the clicks of a link in append order."""
    async with session_factory() as session:
        result = await session.execute(
            select(DeepLinkClick)
            .join(DeepLink)
            .where(DeepLink.slug == slug)
            .order_by(DeepLinkClick.id)
        )
        return list(result.scalars().all())


async def deactivate(session_factory: async_sessionmaker[AsyncSession], slug: str) -> None:
    """Mark a link inactive."""
    async with session_factory() as session, session.begin():
        await session.execute(
            update(DeepLink).where(DeepLink.slug == slug).values(is_active=False)
        )


@pytest.fixture
def config_table() -> ConfigTable:
    """Routing table with two apps."""
    return ConfigTable.model_validate(APPS_CONFIG)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with the default pool, for concurrent sessions.

    The in-memory StaticPool engine shares one connection between all
    sessions, so one session's reset rollback discards the others' writes.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path}/db.sqlite",
        connect_args={"timeout": 30},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def file_session_factory(file_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(file_engine)


@pytest.fixture
def file_link_store(file_session_factory) -> SqlAlchemyLinkStore:
    return SqlAlchemyLinkStore(file_session_factory)


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def link_store(session_factory) -> SqlAlchemyLinkStore:
    return SqlAlchemyLinkStore(session_factory)


@pytest.fixture
def resolver(config_table, link_store) -> ResolutionEngine:
    return ResolutionEngine(config_table, link_store)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with Redis, Sentry and tracing disabled."""
    return Settings(
        _env_file=None,
        debug=True,
        redis_url="",
        sentry_dsn="",
        otlp_endpoint="",
        static_dir=tmp_path / "public",
    )


@pytest.fixture
def app(settings, config_table, link_store):
    return create_app(settings, config_table=config_table, link_store=link_store)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client talking to the app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
