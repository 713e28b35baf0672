import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.core.config import get_settings

_log = logging.getLogger(__name__)


class SharedRedisClient:
    """
    Holds the single Redis client used by the result cache and health check.

    The client is created lazily on first use. Creation never awaits, so concurrent
    first callers cannot race; a failed creation is not remembered and the next
    call retries.
    """

    def __init__(self, url: Optional[str] = None):
        self._url = url
        self._client: Optional[aioredis.Redis] = None

    @property
    def url(self) -> str:
        return self._url or get_settings().redis_url

    def _connect(self) -> Optional[aioredis.Redis]:
        _log.info(f"Creating Redis client for: {self.url}")
        try:
            return aioredis.from_url(
                self.url,
                decode_responses=True,      # cached results are JSON text
                socket_connect_timeout=1,
                socket_timeout=2,
            )
        except (RedisError, ValueError) as exc:
            _log.error(f"Failed to create Redis client for {self.url}, result cache disabled ({exc})")
            return None

    async def get(self) -> Optional[aioredis.Redis]:
        if self._client is None:
            self._client = self._connect()
        return self._client

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        _log.info("Closing Redis connection pool...")
        try:
            await client.aclose()
        except RedisError as e:
            _log.warning(f"Error closing Redis connection: {e}")


_shared_client = SharedRedisClient()


async def get_redis() -> Optional[aioredis.Redis]:
    """Returns the shared Redis client, or None if it cannot be created."""
    return await _shared_client.get()


async def close_redis() -> None:
    """Close and discard the shared client."""
    await _shared_client.close()
