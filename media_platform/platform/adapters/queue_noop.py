import json
import logging
import uuid
from media_platform.platform.ports.job_queue import JobQueuePort, QueueMessage

log = logging.getLogger("queue.noop")

class NoopJobQueue(JobQueuePort):
    async def send(self, body: dict) -> str:
        message_id = str(uuid.uuid4())
        log.info(f"[NOOP QUEUE] message_id={message_id} body={json.dumps(body)}")
        return message_id

    async def receive(self, max_messages: int, wait_seconds: int) -> list[QueueMessage]:
        return []

    async def delete(self, receipt_handle: str) -> None:
        return None
