from typing import Any, Protocol, runtime_checkable

@runtime_checkable
class CachePort(Protocol):
    async def get_json(self, key: str) -> Any | None: ...
    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None: ...
    async def delete(self, *keys: str) -> int: ...
    async def scan(self, pattern: str) -> list[str]: ...
    async def ping(self) -> None: ...
    async def close(self) -> None: ...
