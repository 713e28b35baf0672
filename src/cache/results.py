# src/cache/results.py
# Caches generated quiz results by answers hash so repeat submissions skip matching.

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from redis.exceptions import RedisError

from src.cache.connection import get_redis

logger = logging.getLogger(__name__)

NAMESPACE = "careerpath:"
RESULT_PREFIX = "quiz-result:"
_OP_TIMEOUT = 2.0


def result_cache_key(answers_hash: str, quiz_type: str) -> str:
    return f"{NAMESPACE}{RESULT_PREFIX}{quiz_type}:{answers_hash}"


class QuizResultCache:
    """
    JSON result cache in Redis. Every failure (Redis down, timeouts, corrupt
    entries) degrades to a cache miss or a skipped write.
    """

    def __init__(self, ttl: int, redis_getter: Callable[[], Awaitable[Any]] = get_redis):
        self.ttl = ttl
        self._redis_getter = redis_getter

    async def get(self, answers_hash: str, quiz_type: str) -> Optional[List[Dict[str, Any]]]:
        redis_conn = await self._redis_getter()
        if not redis_conn:
            logger.warning("Redis unavailable, skipping result cache lookup")
            return None

        key = result_cache_key(answers_hash, quiz_type)
        try:
            cached = await asyncio.wait_for(redis_conn.get(key), timeout=_OP_TIMEOUT)
        except (RedisError, asyncio.TimeoutError) as e:
            logger.warning(f"Redis error during GET for key {key}: {e}")
            return None

        if cached is None:
            logger.debug(f"Cache miss: key='{key}'")
            return None
        try:
            return json.loads(cached)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to decode cached result for key {key}: {e}")
            return None

    async def set(self, answers_hash: str, quiz_type: str, result: List[Dict[str, Any]]) -> bool:
        if self.ttl <= 0:
            return False
        redis_conn = await self._redis_getter()
        if not redis_conn:
            logger.warning("Redis unavailable, result not cached")
            return False

        key = result_cache_key(answers_hash, quiz_type)
        try:
            await asyncio.wait_for(redis_conn.setex(key, self.ttl, json.dumps(result)), timeout=_OP_TIMEOUT)
        except (RedisError, asyncio.TimeoutError) as e:
            logger.warning(f"Redis error during SETEX for key {key}: {e}. Result not cached.")
            return False
        logger.debug(f"Stored quiz result under {key}, TTL={self.ttl}")
        return True

    async def clear(self) -> int:
        """Drops every cached quiz result, e.g. after patterns change. Returns the count deleted."""
        redis_conn = await self._redis_getter()
        if not redis_conn:
            logger.warning("Redis unavailable, cannot clear result cache.")
            return 0

        deleted_count = 0
        match_pattern = f"{NAMESPACE}{RESULT_PREFIX}*"
        try:
            async for key in redis_conn.scan_iter(match=match_pattern, count=100):
                deleted_count += await asyncio.wait_for(redis_conn.unlink(key), timeout=_OP_TIMEOUT)
        except (RedisError, asyncio.TimeoutError) as e:
            logger.error(f"Redis error while clearing '{match_pattern}': {e}")
        logger.info(f"Cleared {deleted_count} cached quiz results.")
        return deleted_count
