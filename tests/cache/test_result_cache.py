import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.cache.results import QuizResultCache, result_cache_key

RESULT = [{"career": "Nurse", "description": "d", "reasoning": "r", "roadmapPath": "nurse", "roadmapSlug": "nurse"}]


def make_cache(redis_conn, ttl=3600):
    async def redis_getter():
        return redis_conn

    return QuizResultCache(ttl=ttl, redis_getter=redis_getter)


@pytest.fixture
def redis_conn():
    conn = AsyncMock()
    conn.get.return_value = None
    return conn


def test_result_cache_key_is_namespaced():
    assert result_cache_key("abc", "long") == "careerpath:quiz-result:long:abc"


@pytest.mark.asyncio
async def test_get_hit_decodes_json(redis_conn):
    redis_conn.get.return_value = json.dumps(RESULT)
    cache = make_cache(redis_conn)
    assert await cache.get("abc", "standard") == RESULT
    redis_conn.get.assert_awaited_once_with("careerpath:quiz-result:standard:abc")


@pytest.mark.asyncio
async def test_get_miss(redis_conn):
    assert await make_cache(redis_conn).get("abc", "standard") is None


@pytest.mark.asyncio
async def test_get_corrupt_entry_is_a_miss(redis_conn):
    redis_conn.get.return_value = "{not json"
    assert await make_cache(redis_conn).get("abc", "standard") is None


@pytest.mark.asyncio
async def test_get_redis_error_is_a_miss(redis_conn):
    redis_conn.get.side_effect = RedisConnectionError("down")
    assert await make_cache(redis_conn).get("abc", "standard") is None


@pytest.mark.asyncio
async def test_redis_unavailable():
    cache = make_cache(None)
    assert await cache.get("abc", "standard") is None
    assert await cache.set("abc", "standard", RESULT) is False
    assert await cache.clear() == 0


@pytest.mark.asyncio
async def test_set_uses_ttl(redis_conn):
    assert await make_cache(redis_conn, ttl=60).set("abc", "long", RESULT) is True
    redis_conn.setex.assert_awaited_once_with("careerpath:quiz-result:long:abc", 60, json.dumps(RESULT))


@pytest.mark.asyncio
async def test_set_disabled_with_zero_ttl(redis_conn):
    assert await make_cache(redis_conn, ttl=0).set("abc", "long", RESULT) is False
    redis_conn.setex.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_redis_error_is_skipped(redis_conn):
    redis_conn.setex.side_effect = RedisConnectionError("down")
    assert await make_cache(redis_conn).set("abc", "long", RESULT) is False


@pytest.mark.asyncio
async def test_clear_unlinks_result_keys(redis_conn):
    keys = ["careerpath:quiz-result:standard:a", "careerpath:quiz-result:long:b"]

    async def scan_iter(match=None, count=None):
        assert match == "careerpath:quiz-result:*"
        for key in keys:
            yield key

    redis_conn.scan_iter = scan_iter
    redis_conn.unlink.return_value = 1
    assert await make_cache(redis_conn).clear() == 2
    assert redis_conn.unlink.await_count == 2
