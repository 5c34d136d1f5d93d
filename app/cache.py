import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import settings

logger = logging.getLogger(__name__)

POST_LIST_PREFIX = "posts:list:"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Every public method tolerates an unavailable Redis: reads report a
    miss and writes are skipped, so the post endpoints keep working
    straight from the database.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except RedisError as exc:
            logger.warning("Redis ping failed, post list cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except RedisError as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """Store *value* as JSON under *key*; a failed write is logged and dropped."""
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except RedisError as exc:
            logger.warning("Cache invalidation failed for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Post list helpers
    # ------------------------------------------------------------------

    @staticmethod
    def post_list_key(**params) -> str:
        """
        Build the list cache key from every query dimension.

        Parameters are sorted by name so call-site ordering never
        produces two keys for the same page.
        """
        parts = [f"{name}={'' if value is None else value}" for name, value in sorted(params.items())]
        return POST_LIST_PREFIX + "&".join(parts)

    async def invalidate_posts(self) -> None:
        """Drop every cached post page; any write can change any page."""
        await self.delete_pattern(POST_LIST_PREFIX + "*")

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
