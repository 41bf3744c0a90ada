"""
Redis connection shared by the API process.

Only the rate limiter keeps state here. Redis being down must never take
the API down with it, so startup tolerates an unreachable server.
"""

import logging

import redis.asyncio as aioredis

from notesaas.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "notesaas"


class CacheManager:
    """Owns the Redis connection pool and namespaced counters."""

    def __init__(self) -> None:
        self._client: aioredis.Redis | None = None

    async def init(self) -> None:
        self._client = aioredis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
        )
        try:
            await self._client.ping()
            logger.info("Redis connection initialized")
        except aioredis.RedisError as e:
            logger.warning(f"Redis unavailable at startup, rate limiting will fail open: {e}")

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    @property
    def client(self) -> aioredis.Redis:
        if not self._client:
            raise RuntimeError("Cache not initialized. Call init() first.")
        return self._client

    @staticmethod
    def key(*parts: str) -> str:
        """Namespaced key, e.g. ``notesaas:rl_auth:127.0.0.1``."""
        return ":".join((KEY_PREFIX, *parts))

    async def hit(self, key: str, window: int) -> tuple[int, int]:
        """
        Count one hit against a fixed window.

        The expiry is only set when the window opens, so repeated hits do
        not extend it. All three commands run in one MULTI block.

        Returns:
            (hits so far in the window, seconds until it resets)
        """
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window, nx=True)
            pipe.ttl(key)
            count, _, ttl = await pipe.execute()
        return int(count), max(int(ttl), 0)


# Global instance
cache_manager = CacheManager()
