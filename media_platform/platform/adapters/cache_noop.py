import logging
from typing import Any
from media_platform.platform.ports.cache import CachePort

log = logging.getLogger("cache.noop")

class NoopCache(CachePort):
    """Cache that never hits; every read goes to the relational store."""

    async def get_json(self, key: str) -> Any | None:
        return None

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        log.debug(f"[NOOP CACHE] skip set key={key} ttl={ttl_seconds}")

    async def delete(self, *keys: str) -> int:
        return 0

    async def scan(self, pattern: str) -> list[str]:
        return []

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None
