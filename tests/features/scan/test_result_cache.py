import json

import pytest
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from app.platform.cache.redis import ResultCache


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    return client


class TestResultCache:
    @pytest.mark.asyncio
    async def test_round_trip_uses_ttl(self, redis_client):
        cache = ResultCache(redis_client, ttl_seconds=60)

        assert await cache.set_json("k", {"corrections": []}) is True

        redis_client.set.assert_awaited_once_with("k", json.dumps({"corrections": []}), ex=60)

    @pytest.mark.asyncio
    async def test_hit_decodes_json(self, redis_client):
        redis_client.get.return_value = '{"corrections": []}'
        cache = ResultCache(redis_client, ttl_seconds=60)

        assert await cache.get_json("k") == {"corrections": []}

    @pytest.mark.asyncio
    async def test_unavailable_cache_is_a_miss(self, redis_client):
        redis_client.get.side_effect = RedisConnectionError("refused")
        cache = ResultCache(redis_client, ttl_seconds=60)

        assert await cache.get_json("k") is None

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, redis_client):
        redis_client.get.return_value = "{not json"
        cache = ResultCache(redis_client, ttl_seconds=60)

        assert await cache.get_json("k") is None

    @pytest.mark.asyncio
    async def test_failed_write_is_not_fatal(self, redis_client):
        redis_client.set.side_effect = RedisConnectionError("refused")
        cache = ResultCache(redis_client, ttl_seconds=60)

        assert await cache.set_json("k", {"a": 1}) is False
