from dataclasses import dataclass
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class StoredObject:
    key: str
    body: bytes
    content_type: str | None
    size: int

@runtime_checkable
class ObjectStoragePort(Protocol):
    def presign_upload(self, key: str, content_type: str, expires_seconds: int = 300) -> str: ...
    def presign_download(self, key: str, expires_seconds: int = 900) -> str: ...
    def put_bytes(self, key: str, data: bytes, content_type: str) -> None: ...
    def get(self, key: str) -> StoredObject: ...
