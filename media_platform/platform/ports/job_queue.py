from dataclasses import dataclass
from typing import Protocol, runtime_checkable

@dataclass(frozen=True)
class QueueMessage:
    message_id: str
    receipt_handle: str
    body: str

@runtime_checkable
class JobQueuePort(Protocol):
    async def send(self, body: dict) -> str: ...
    async def receive(self, max_messages: int, wait_seconds: int) -> list[QueueMessage]: ...
    async def delete(self, receipt_handle: str) -> None: ...
