import asyncio
import logging
from functools import partial

import anyio

from media_platform.core.errors import MediaProcessingError
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.modules.media.cache import invalidate_user_media
from media_platform.modules.media.jobs import JobDescriptor
from media_platform.modules.media.metadata import BaseMetadata
from media_platform.modules.media.repository import MediaRepository
from media_platform.worker.transforms import transform

log = logging.getLogger("media.pipeline")

MAX_ERROR_LENGTH = 2000


def error_text(exc: BaseException) -> str:
    text = str(exc) or exc.__class__.__name__
    return text[:MAX_ERROR_LENGTH]


class MediaProcessor:
    """
    Runs one job through: processing -> fetch -> transform -> ready -> cache invalidation.

    Each status write commits on its own; nothing is rolled back when a later step
    fails. On any failure or cancellation the record is marked failed and the
    exception re-raised so the queue can redeliver.
    """

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry

    async def process(self, job: JobDescriptor) -> BaseMetadata:
        log.info("Processing media %s for user %s", job.media_id, job.owner_id)
        try:
            await self._set_status(job.media_id, "processing")

            storage = self.registry.object_storage()
            original = await anyio.to_thread.run_sync(partial(storage.get, job.object_key))
            metadata = await transform(storage, job, original)

            await self._mark_ready(job, metadata)
            await invalidate_user_media(self.registry.cache(), job.owner_id)
        except asyncio.CancelledError:
            # batch timeout or shutdown; the record must not stay in "processing"
            log.warning("Processing of media %s was cancelled", job.media_id)
            await self._record_failure(job, MediaProcessingError("Processing cancelled before completion"))
            raise
        except Exception as e:
            log.error("Failed to process media %s: %s", job.media_id, e, exc_info=True)
            await self._record_failure(job, e)
            raise
        log.info("Successfully processed media %s", job.media_id)
        return metadata

    async def _set_status(self, media_id: int, status: str, error: str | None = None) -> None:
        async with self.registry.database.session() as session:
            found = await MediaRepository(session).set_status(media_id, status, error)
            await session.commit()
        if not found:
            raise MediaProcessingError(f"Media {media_id} not found")

    async def _mark_ready(self, job: JobDescriptor, metadata: BaseMetadata) -> None:
        async with self.registry.database.session() as session:
            found = await MediaRepository(session).mark_ready(
                job.media_id, metadata=metadata.to_json(), thumbnail_key=metadata.thumbnail_key
            )
            await session.commit()
        if not found:
            raise MediaProcessingError(f"Media {job.media_id} not found")

    async def _record_failure(self, job: JobDescriptor, exc: Exception) -> None:
        try:
            async with self.registry.database.session() as session:
                await MediaRepository(session).set_status(job.media_id, "failed", error_text(exc))
                await session.commit()
        except Exception:
            # the original error is what gets re-raised; this one is only logged
            log.exception("Could not mark media %s as failed", job.media_id)
