import json
import logging
from typing import Any
from redis import asyncio as aioredis
from media_platform.core.config import Settings
from media_platform.platform.ports.cache import CachePort

log = logging.getLogger("cache.redis")

class RedisCache(CachePort):
    def __init__(self, settings: Settings, client=None):
        self.redis = client or aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )

    async def get_json(self, key: str) -> Any | None:
        data = await self.redis.get(key)
        if data:
            return json.loads(data)
        return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self.redis.setex(key, ttl_seconds, json.dumps(value, default=str))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self.redis.delete(*keys)

    async def scan(self, pattern: str) -> list[str]:
        # SCAN is incremental and does not block the server the way KEYS does
        return [key async for key in self.redis.scan_iter(match=pattern, count=100)]

    async def ping(self) -> None:
        await self.redis.ping()

    async def close(self) -> None:
        await self.redis.aclose()
        log.info("Redis connection closed")
