from typing import Sequence
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.modules.media.models import Media, TERMINAL_STATUSES

class MediaRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, *, s3_key: str, file_name: str, file_type: str) -> Media:
        obj = Media(user_id=user_id, s3_key=s3_key, file_name=file_name, file_type=file_type, status="pending")
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    async def get(self, media_id: int) -> Media | None:
        return await self.session.get(Media, media_id)

    async def get_owned(self, user_id: int, media_id: int) -> Media | None:
        q = select(Media).where(Media.id == media_id, Media.user_id == user_id)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_ready(self, user_id: int, *, limit: int, offset: int = 0) -> Sequence[Media]:
        q = (
            select(Media)
            .where(Media.user_id == user_id, Media.status == "ready")
            .order_by(Media.created_at.desc(), Media.id.desc())
            .limit(limit)
            .offset(offset)
        )
        res = await self.session.execute(q)
        return res.scalars().all()

    # ---- worker write-back (each call is its own statement; caller commits) ----

    async def set_status(self, media_id: int, status: str, error_message: str | None = None) -> bool:
        """Narrow update: status and error only. Metadata from an earlier attempt is left alone."""
        values = {"status": status, "error_message": error_message, "updated_at": func.now()}
        if status in TERMINAL_STATUSES:
            values["processed_at"] = func.coalesce(Media.processed_at, func.now())
        res = await self.session.execute(
            update(Media)
            .where(Media.id == media_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount > 0

    async def mark_ready(self, media_id: int, *, metadata: dict, thumbnail_key: str | None) -> bool:
        res = await self.session.execute(
            update(Media)
            .where(Media.id == media_id)
            .values({
                Media.status: "ready",
                Media.media_metadata: metadata,
                Media.thumbnail_key: thumbnail_key,
                Media.error_message: None,
                Media.processed_at: func.coalesce(Media.processed_at, func.now()),
                Media.updated_at: func.now(),
            })
            .execution_options(synchronize_session=False)
        )
        return res.rowcount > 0
