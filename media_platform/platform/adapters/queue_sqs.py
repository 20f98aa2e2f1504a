import json
import logging
from functools import partial
import anyio
from media_platform.core.config import Settings
from media_platform.platform.ports.job_queue import JobQueuePort, QueueMessage
from media_platform.platform.adapters.aws import make_client

log = logging.getLogger("queue.sqs")

class SqsJobQueue(JobQueuePort):
    """boto3 is blocking; calls run on a worker thread so the event loop stays free."""

    def __init__(self, settings: Settings, client=None):
        if not settings.SQS_QUEUE_URL:
            raise RuntimeError("SQS_QUEUE_URL not configured")
        self.sqs = client or make_client("sqs", settings)
        self.queue_url = settings.SQS_QUEUE_URL

    async def send(self, body: dict) -> str:
        resp = await anyio.to_thread.run_sync(
            partial(self.sqs.send_message, QueueUrl=self.queue_url, MessageBody=json.dumps(body))
        )
        log.debug(f"[SQS] sent message_id={resp['MessageId']}")
        return resp["MessageId"]

    async def receive(self, max_messages: int, wait_seconds: int) -> list[QueueMessage]:
        resp = await anyio.to_thread.run_sync(
            partial(
                self.sqs.receive_message,
                QueueUrl=self.queue_url,
                MaxNumberOfMessages=min(max_messages, 10),
                WaitTimeSeconds=wait_seconds,
            )
        )
        return [
            QueueMessage(message_id=m["MessageId"], receipt_handle=m["ReceiptHandle"], body=m["Body"])
            for m in resp.get("Messages", [])
        ]

    async def delete(self, receipt_handle: str) -> None:
        await anyio.to_thread.run_sync(
            partial(self.sqs.delete_message, QueueUrl=self.queue_url, ReceiptHandle=receipt_handle)
        )
