"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.gzip import GZipMiddleware

from deeplink_router.api.errors import register_exception_handlers
from deeplink_router.api.router import router
from deeplink_router.core.app_config import ConfigTable, load_config_table
from deeplink_router.core.config import Settings, get_settings
from deeplink_router.core.database import close_db, create_engine, create_session_factory
from deeplink_router.core.middleware import SecurityHeadersMiddleware
from deeplink_router.core.observability import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    setup_observability,
)
from deeplink_router.core.redis import LinkCache, close_redis, create_redis
from deeplink_router.services.link_store import LinkStore, SqlAlchemyLinkStore
from deeplink_router.services.resolver import ResolutionEngine

logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    *,
    config_table: ConfigTable | None = None,
    link_store: LinkStore | None = None,
) -> FastAPI:
    """Build the application.

    The routing table is loaded from `settings.apps_config_path` unless
    given. Without an explicit link store, a SQLAlchemy store on
    `settings.database_url` is created, with a Redis cache when
    `settings.redis_url` is set.
    """
    settings = settings or get_settings()
    if config_table is None:
        config_table = load_config_table(settings.apps_config_path)

    engine = None
    redis_client = None
    if link_store is None:
        engine = create_engine(settings)
        redis_client = create_redis(settings.redis_url)
        cache = LinkCache(redis_client, ttl=settings.link_cache_ttl) if redis_client else None
        link_store = SqlAlchemyLinkStore(
            create_session_factory(engine),
            cache=cache,
            slug_length=settings.slug_length,
            max_attempts=settings.slug_max_attempts,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup and shutdown events."""
        logger.info(
            "Starting deep link router",
            version=settings.app_version,
            domain=config_table.domain,
            apps=len(config_table.apps),
        )
        yield
        logger.info("Shutting down deep link router")
        await close_redis(redis_client)
        if engine is not None:
            await close_db(engine)
            logger.info("Database connections closed")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Platform-aware deep links and app association manifests",
        lifespan=lifespan,
    )
    app.state.config_table = config_table
    app.state.resolver = ResolutionEngine(config_table, link_store, logger=logger)

    setup_observability(app, settings)
    register_exception_handlers(app)

    # Middleware stack (order matters - last added = outermost = runs first on request, last on response)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        SecurityHeadersMiddleware,
        enable_hsts=not settings.debug,  # Enable HSTS in production
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(router)

    # Static assets catch everything the routers don't match
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.info("Static assets disabled (directory missing)", static_dir=str(settings.static_dir))

    return app


def run() -> None:
    """Run the server with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "deeplink_router.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
