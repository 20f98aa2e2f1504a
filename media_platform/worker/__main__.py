import asyncio
import signal

from media_platform.core.config import settings
from media_platform.core.logging import setup_logging
from media_platform.worker.consumer import run_consumer
from media_platform.worker.handler import WorkerRuntime


async def main() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop.set)
    await run_consumer(WorkerRuntime(settings), stop)


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
