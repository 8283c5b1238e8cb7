"""Link store for deep link persistence and slug generation."""

import secrets
import string
from collections.abc import Mapping
from typing import Protocol

import structlog
from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from deeplink_router.core.redis import LinkCache
from deeplink_router.models.deep_link import DeepLink, DeepLinkClick
from deeplink_router.schemas.link import DeepLinkRecord
from deeplink_router.services.exceptions import LinkNotFoundError, PersistenceError

logger = structlog.get_logger()

# URL-safe slug alphabet (base62 plus '_' and '-')
SLUG_CHARS = string.ascii_letters + string.digits + "_-"
SLUG_LENGTH = 8
UNKNOWN_USER_AGENT = "unknown"


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Generate a random URL-safe slug."""
    return "".join(secrets.choice(SLUG_CHARS) for _ in range(length))


class LinkStore(Protocol):
    """Persistence operations the resolution engine depends on."""

    async def create(self, app_id: str, route: str, params: Mapping[str, str]) -> str: ...

    async def find_active_by_slug(self, slug: str) -> DeepLinkRecord | None: ...

    async def append_click(self, slug: str, ip: str | None, user_agent: str | None) -> None: ...


class SqlAlchemyLinkStore:
    """Link store backed by SQLAlchemy, with an optional Redis cache.

    Each operation runs in its own session and transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: LinkCache | None = None,
        slug_length: int = SLUG_LENGTH,
        max_attempts: int = 5,
    ) -> None:
        self._session_factory = session_factory
        self._cache = cache
        self._slug_length = slug_length
        self._max_attempts = max_attempts

    async def create(self, app_id: str, route: str, params: Mapping[str, str]) -> str:
        """Persist a new active deep link and return its slug.

        A slug collision is retried with a fresh slug up to max_attempts
        times. Raises PersistenceError on any other storage failure.
        """
        for attempt in range(1, self._max_attempts + 1):
            slug = generate_slug(self._slug_length)
            try:
                async with self._session_factory() as session, session.begin():
                    session.add(
                        DeepLink(
                            slug=slug,
                            app_id=app_id,
                            route=route,
                            params=dict(params),
                            is_active=True,
                        )
                    )
            except IntegrityError as e:
                logger.warning("Slug collision", slug=slug, attempt=attempt, error=str(e))
                continue
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to create deep link: {e}") from e
            return slug

        raise PersistenceError(
            f"Unable to generate unique slug after {self._max_attempts} attempts"
        )

    async def find_active_by_slug(self, slug: str) -> DeepLinkRecord | None:
        """Get an active link by its slug, or None if unknown or inactive."""
        if self._cache is not None:
            cached = await self._cache.get(slug)
            if cached is not None:
                return cached

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DeepLink).where(
                        DeepLink.slug == slug,
                        DeepLink.is_active == True,  # noqa: E712
                    )
                )
                link = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up slug {slug!r}: {e}") from e

        if link is None:
            return None

        record = DeepLinkRecord.model_validate(link)
        if self._cache is not None:
            await self._cache.set(record)
        return record

    async def append_click(self, slug: str, ip: str | None, user_agent: str | None) -> None:
        """Append a click to an active link.

        The click is a single row insert, so concurrent clicks on the same
        link never overwrite each other. Raises LinkNotFoundError, and drops
        any cached record, when the link is unknown or inactive.
        """
        link_id = select(DeepLink.id).where(DeepLink.slug == slug).scalar_subquery()
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    update(DeepLink)
                    .where(
                        DeepLink.slug == slug,
                        DeepLink.is_active == True,  # noqa: E712
                    )
                    .values(updated_at=func.now())
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise LinkNotFoundError(slug)
                await session.execute(
                    insert(DeepLinkClick).values(
                        deep_link_id=link_id,
                        ip_address=ip,
                        user_agent=user_agent or UNKNOWN_USER_AGENT,
                    )
                )
        except LinkNotFoundError:
            if self._cache is not None:
                await self._cache.invalidate(slug)
            raise
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to record click for slug {slug!r}: {e}") from e
