import logging
import asyncio
import time
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import ConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.config import settings

logger = logging.getLogger(__name__)


class AsyncRedisManager:

    def __init__(self):
        self.pool: Optional[ConnectionPool] = None
        self.redis: Optional[redis.Redis] = None
        self._connection_lock = asyncio.Lock()
        self._retry_at = 0.0

    async def initialize(self):
        async with self._connection_lock:
            if self.pool is None:
                if time.monotonic() < self._retry_at:
                    raise RedisConnectionError("Redis unavailable, waiting before reconnecting")
                try:
                    self.pool = ConnectionPool(
                        host=settings.REDIS_HOST,
                        port=settings.REDIS_PORT,
                        db=settings.REDIS_DB,
                        decode_responses=True,
                        socket_connect_timeout=5,
                        socket_timeout=5,
                        max_connections=20,
                        health_check_interval=30,
                    )
                    self.redis = redis.Redis(connection_pool=self.pool)

                    # Test connection
                    await self.redis.ping()
                    logger.info("Redis connection pool initialized successfully")
                    self._retry_at = 0.0

                except Exception as e:
                    logger.error(f"Failed to initialize Redis connection pool: {e}")
                    if self.pool is not None:
                        await self.pool.disconnect()
                    self.pool = None
                    self.redis = None
                    self._retry_at = time.monotonic() + settings.REDIS_RETRY_COOLDOWN_SECONDS
                    raise

    async def close(self):
        """Close Redis connection pool."""
        async with self._connection_lock:
            if self.redis:
                await self.redis.aclose()
                self.redis = None
            if self.pool:
                await self.pool.disconnect()
                self.pool = None
            logger.info("Redis connection pool closed")

    async def ping(self) -> bool:
        """Check if Redis is available."""
        try:
            if not self.redis:
                await self.initialize()
            await self.redis.ping()
            return True
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def hit(self, key: str, window_seconds: int) -> int:
        """
        Count one request against a fixed-window counter.

        Returns:
            The counter value after this request
        """
        if not self.redis:
            await self.initialize()

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window_seconds)
            count, _ = await pipe.execute()
        return int(count)


# Global Redis manager instance
redis_manager = AsyncRedisManager()
