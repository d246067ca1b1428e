"""
Redis-backed cache for LLM results.

The cache is never a correctness dependency: read failures behave like a miss
and write failures are logged and skipped.
"""
import json
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


def create_redis_client(url: Optional[str] = None) -> Redis:
    return Redis.from_url(
        url or settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
    )


class ResultCache:
    """JSON values stored under content-derived keys with a fixed expiry."""

    def __init__(self, redis: Redis, ttl_seconds: int = settings.LLM_CACHE_TTL_SECONDS):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            cached = await self.redis.get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {e}")
            return None

        if cached is None:
            return None

        try:
            return json.loads(cached)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable cache entry {key}")
            return None

    async def set_json(self, key: str, value: Any) -> bool:
        try:
            # Last writer wins for identical keys
            await self.redis.set(key, json.dumps(value), ex=self.ttl_seconds)
            return True
        except RedisError as e:
            logger.error(f"Cache write failed for {key}: {e}")
            return False

    async def close(self) -> None:
        await self.redis.aclose()
