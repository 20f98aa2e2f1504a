import logging
import time
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.modules.media.repository import MediaRepository
from media_platform.modules.media.schemas import UploadUrlIn, UploadUrlOut, ConfirmOut, MediaOut
from media_platform.modules.media.jobs import JobDescriptor
from media_platform.modules.media.cache import user_media_key, user_media_page_key

log = logging.getLogger("media.api")

def build_upload_key(user_id: int, file_name: str, *, now_ms: int | None = None) -> str:
    ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"uploads/{user_id}/{ts}-{file_name}"

class MediaService:
    def __init__(self, session: AsyncSession, registry: ProviderRegistry):
        self.session = session
        self.registry = registry
        self.settings = registry.settings
        self.repo = MediaRepository(session)

    async def create_upload_url(self, user_id: int, payload: UploadUrlIn) -> UploadUrlOut:
        if payload.file_type not in self.settings.allowed_file_types:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"File type not allowed: {payload.file_type}")
        if "/" in payload.file_name or "\\" in payload.file_name or payload.file_name in (".", ".."):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid fileName")

        key = build_upload_key(user_id, payload.file_name)
        upload_url = self.registry.object_storage().presign_upload(
            key, payload.file_type, expires_seconds=self.settings.UPLOAD_URL_TTL_SECONDS
        )
        obj = await self.repo.create(user_id, s3_key=key, file_name=payload.file_name, file_type=payload.file_type)
        await self.session.commit()
        log.info("Issued upload URL media_id=%s key=%s", obj.id, key)
        return UploadUrlOut(upload_url=upload_url, media_id=obj.id, s3_key=obj.s3_key)

    async def confirm(self, user_id: int, media_id: int) -> ConfirmOut:
        media = await self.repo.get_owned(user_id, media_id)
        if not media:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")
        if media.status != "pending":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Media already {media.status}")

        job = JobDescriptor(
            media_id=media.id, owner_id=user_id, object_key=media.s3_key, declared_type=media.file_type
        )
        message_id = await self.registry.job_queue().send(job.to_message())
        log.info("Queued media_id=%s for processing (message_id=%s)", media.id, message_id)
        return ConfirmOut(message="Media queued for processing", media_id=media.id)

    async def get_status(self, user_id: int, media_id: int) -> MediaOut:
        media = await self.repo.get_owned(user_id, media_id)
        if not media:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")
        return MediaOut.from_model(media)

    async def list_media(self, user_id: int, *, limit: int | None = None, offset: int = 0) -> list[dict]:
        limit = limit or self.settings.MEDIA_LIST_LIMIT
        default_page = limit == self.settings.MEDIA_LIST_LIMIT and offset == 0
        cache_key = user_media_key(user_id) if default_page else user_media_page_key(user_id, limit, offset)

        cache = self.registry.cache()
        cached = await cache.get_json(cache_key)
        if cached is not None:
            return cached

        rows = await self.repo.list_ready(user_id, limit=limit, offset=offset)
        items = [MediaOut.from_model(m).model_dump(by_alias=True, mode="json") for m in rows]
        await cache.set_json(cache_key, items, self.settings.MEDIA_LIST_CACHE_TTL_SECONDS)
        return items
