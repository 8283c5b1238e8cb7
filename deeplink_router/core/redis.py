"""Redis client and read-through cache for short link lookups."""

import json

import redis.asyncio as redis
import structlog
from pydantic import ValidationError

from deeplink_router.schemas.link import DeepLinkRecord

logger = structlog.get_logger()

# Cache key prefixes
LINK_CACHE_PREFIX = "deeplink:"
LINK_CACHE_TTL = 3600  # 1 hour


def create_redis(redis_url: str) -> redis.Redis | None:
    """Create a Redis client, or None when no URL is configured."""
    if not redis_url:
        logger.info("Redis disabled (no URL configured)")
        return None
    client = redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    logger.info("Redis client initialized", url=redis_url)
    return client


async def close_redis(client: redis.Redis | None) -> None:
    """Close the Redis connection."""
    if client is not None:
        await client.aclose()
        logger.info("Redis connection closed")


def _link_cache_key(slug: str) -> str:
    """Generate cache key for a link."""
    return f"{LINK_CACHE_PREFIX}{slug}"


class LinkCache:
    """Caches active deep link records by slug.

    Redis failures are logged and treated as misses so the cache never
    fails a request.
    """

    def __init__(self, client: redis.Redis, ttl: int = LINK_CACHE_TTL) -> None:
        self._client = client
        self._ttl = ttl

    async def get(self, slug: str) -> DeepLinkRecord | None:
        """Get a link record from cache, or None on miss."""
        try:
            data = await self._client.get(_link_cache_key(slug))
        except redis.RedisError as e:
            logger.warning("Redis get error", slug=slug, error=str(e))
            return None

        if not data:
            logger.debug("Cache miss", slug=slug)
            return None

        try:
            record = DeepLinkRecord.model_validate(json.loads(data))
        except (ValueError, ValidationError) as e:
            logger.warning("Discarding unreadable cache entry", slug=slug, error=str(e))
            await self.invalidate(slug)
            return None

        logger.debug("Cache hit", slug=slug)
        return record

    async def set(self, record: DeepLinkRecord) -> None:
        """Cache a link record under its slug."""
        try:
            await self._client.setex(
                _link_cache_key(record.slug),
                self._ttl,
                record.model_dump_json(),
            )
            logger.debug("Link cached", slug=record.slug, ttl=self._ttl)
        except redis.RedisError as e:
            logger.warning("Redis set error", slug=record.slug, error=str(e))

    async def invalidate(self, slug: str) -> None:
        """Invalidate (delete) a link from cache."""
        try:
            await self._client.delete(_link_cache_key(slug))
            logger.debug("Cache invalidated", slug=slug)
        except redis.RedisError as e:
            logger.warning("Redis delete error", slug=slug, error=str(e))
