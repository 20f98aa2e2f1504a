import asyncio
import logging

from media_platform.core.config import Settings
from media_platform.platform.ports.job_queue import QueueMessage
from media_platform.worker.handler import BatchReport, WorkerRuntime, process_batch

log = logging.getLogger("media.worker.consumer")


class QueueConsumer:
    """
    Long-poll consumer for deployments without a function trigger.

    Up to WORKER_CONCURRENCY batches run at once; messages inside a batch run in
    order. Only messages reported as successful are deleted. Anything else (a
    failure, a timed-out batch, a whole-batch abort) stays on the queue and comes
    back after its visibility timeout.
    """

    def __init__(self, runtime: WorkerRuntime):
        self.runtime = runtime
        self.settings: Settings = runtime.settings
        self.queue = runtime.registry.job_queue()

    async def run_batch(self, messages: list[QueueMessage]) -> BatchReport | None:
        try:
            report = await asyncio.wait_for(
                process_batch(
                    self.runtime.processor,
                    messages,
                    report_item_failures=self.settings.WORKER_REPORT_BATCH_ITEM_FAILURES,
                ),
                timeout=self.settings.WORKER_BATCH_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            log.error("Batch of %d timed out after %ss; leaving it for redelivery",
                      len(messages), self.settings.WORKER_BATCH_TIMEOUT_SECONDS)
            return None
        except Exception:
            log.exception("Batch of %d failed; leaving it for redelivery", len(messages))
            return None

        for item in report.successful:
            await self.queue.delete(item.receipt_handle)
        return report

    async def run(self, stop: asyncio.Event | None = None, poll_interval_seconds: float = 1.0) -> None:
        stop = stop or asyncio.Event()
        slots = asyncio.Semaphore(self.settings.WORKER_CONCURRENCY)
        inflight: set[asyncio.Task] = set()
        log.info("Queue consumer started (concurrency=%d batch_size=%d)",
                 self.settings.WORKER_CONCURRENCY, self.settings.WORKER_BATCH_SIZE)
        try:
            while not stop.is_set():
                await slots.acquire()
                try:
                    messages = await self.queue.receive(self.settings.WORKER_BATCH_SIZE, self.settings.WORKER_WAIT_SECONDS)
                except Exception:
                    slots.release()
                    log.exception("Receive failed")
                    await asyncio.sleep(poll_interval_seconds)
                    continue
                if not messages:
                    slots.release()
                    await asyncio.sleep(poll_interval_seconds)
                    continue

                task = asyncio.create_task(self.run_batch(messages))
                inflight.add(task)

                def _done(t: asyncio.Task) -> None:
                    inflight.discard(t)
                    slots.release()

                task.add_done_callback(_done)
        except asyncio.CancelledError:
            log.info("Queue consumer cancelled; shutting down")
            raise
        finally:
            if inflight:
                await asyncio.gather(*inflight, return_exceptions=True)
            log.info("Queue consumer stopped")


async def run_consumer(runtime: WorkerRuntime, stop: asyncio.Event | None = None) -> None:
    await runtime.start()
    try:
        await QueueConsumer(runtime).run(stop)
    finally:
        await runtime.stop()
