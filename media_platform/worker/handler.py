"""
Batch entry points for the processing worker.

``process_batch`` handles one queue delivery (up to 10 messages) sequentially and
returns a per-message report. Two failure modes, chosen by
``WORKER_REPORT_BATCH_ITEM_FAILURES``:

* True (default): every message succeeds or fails on its own; only failed
  message ids are reported back for redelivery.
* False: the first failure is re-raised and aborts the invocation, so the queue
  redelivers the whole batch (including messages that already succeeded).

``handler`` adapts this to an SQS-triggered function invocation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from media_platform.core.config import Settings, settings as default_settings
from media_platform.core.logging import request_id_ctx, setup_logging
from media_platform.modules.media.jobs import parse_job
from media_platform.platform.ports.job_queue import QueueMessage
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.worker.pipeline import MediaProcessor, error_text

log = logging.getLogger("media.worker")


@dataclass
class ItemResult:
    message_id: str
    receipt_handle: str = ""
    media_id: int | None = None
    error: str | None = None


@dataclass
class BatchReport:
    successful: list[ItemResult] = field(default_factory=list)
    failed: list[ItemResult] = field(default_factory=list)

    def batch_item_failures(self) -> dict:
        return {"batchItemFailures": [{"itemIdentifier": f.message_id} for f in self.failed]}

    def summary(self) -> dict:
        return {
            "successful": [r.media_id for r in self.successful],
            "failed": [{"messageId": r.message_id, "error": r.error} for r in self.failed],
        }


async def process_batch(
    processor: MediaProcessor,
    messages: Iterable[QueueMessage],
    *,
    report_item_failures: bool = True,
) -> BatchReport:
    report = BatchReport()
    for msg in messages:
        token = request_id_ctx.set(msg.message_id)
        item = ItemResult(message_id=msg.message_id, receipt_handle=msg.receipt_handle)
        try:
            job = parse_job(msg.body)
            item.media_id = job.media_id
            await processor.process(job)
            report.successful.append(item)
        except Exception as e:
            item.error = error_text(e)
            report.failed.append(item)
            log.error("Error processing message %s: %s", msg.message_id, item.error)
            if not report_item_failures:
                raise
        finally:
            request_id_ctx.reset(token)
    log.info("Processing results: %s", report.summary())
    return report


def messages_from_event(event: dict) -> list[QueueMessage]:
    return [
        QueueMessage(
            message_id=r.get("messageId", ""),
            receipt_handle=r.get("receiptHandle", ""),
            body=r.get("body", ""),
        )
        for r in event.get("Records", [])
    ]


class WorkerRuntime:
    """Registry + processor for one worker process, started once and reused across invocations."""

    def __init__(self, settings: Settings, registry: ProviderRegistry | None = None):
        self.settings = settings
        self.registry = registry or ProviderRegistry(settings)
        self.processor = MediaProcessor(self.registry)

    async def start(self) -> None:
        await self.registry.startup()

    async def stop(self) -> None:
        await self.registry.shutdown()

    async def handle_event(self, event: dict) -> dict:
        messages = messages_from_event(event)
        log.info("Received %d record(s)", len(messages))
        report = await process_batch(
            self.processor,
            messages,
            report_item_failures=self.settings.WORKER_REPORT_BATCH_ITEM_FAILURES,
        )
        if self.settings.WORKER_REPORT_BATCH_ITEM_FAILURES:
            return report.batch_item_failures()
        return report.summary()


# asyncpg connections are bound to the loop that opened them, so one loop lives
# for the whole process instead of asyncio.run() per invocation
_loop: asyncio.AbstractEventLoop | None = None
_runtime: WorkerRuntime | None = None


def _get_runtime() -> tuple[asyncio.AbstractEventLoop, WorkerRuntime]:
    global _loop, _runtime
    if _loop is None:
        setup_logging()
        _loop = asyncio.new_event_loop()
    if _runtime is None:
        runtime = WorkerRuntime(default_settings)
        _loop.run_until_complete(runtime.start())
        _runtime = runtime
    return _loop, _runtime


def handler(event: dict, context: Any = None) -> dict:
    loop, runtime = _get_runtime()
    return loop.run_until_complete(runtime.handle_event(event))
