import logging
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.modules.media.repository import MediaRepository
from media_platform.modules.media.schemas import MediaOut, SharedMediaOut
from media_platform.modules.media.cache import user_shared_media_key
from media_platform.modules.users.repository import UserRepository
from media_platform.modules.shares.repository import ShareRepository
from media_platform.modules.shares.schemas import ShareIn, ShareOut

log = logging.getLogger("media.shares")

class ShareService:
    def __init__(self, session: AsyncSession, registry: ProviderRegistry):
        self.session = session
        self.registry = registry
        self.settings = registry.settings
        self.media = MediaRepository(session)
        self.users = UserRepository(session)
        self.shares = ShareRepository(session)

    async def share(self, user_id: int, media_id: int, payload: ShareIn) -> ShareOut:
        # ownership check and insert are separate statements; the unique constraint absorbs races
        media = await self.media.get_owned(user_id, media_id)
        if not media or media.status != "ready":
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found or not ready")

        target = await self.users.get_by_email(payload.target_email.lower())
        if not target:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Target user not found")
        if target.id == user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot share media with yourself")

        created = await self.shares.create_if_absent(media_id=media.id, from_user_id=user_id, to_user_id=target.id)
        await self.session.commit()
        await self.registry.cache().delete(user_shared_media_key(target.id))

        view_url = self.registry.object_storage().presign_download(
            media.s3_key, expires_seconds=self.settings.SHARE_URL_TTL_SECONDS
        )
        log.info("Shared media_id=%s from=%s to=%s (new=%s)", media.id, user_id, target.id, created)
        return ShareOut(message="Media shared successfully", view_url=view_url)

    async def list_shared_with(self, user_id: int) -> list[dict]:
        cache = self.registry.cache()
        cache_key = user_shared_media_key(user_id)
        cached = await cache.get_json(cache_key)
        if cached is not None:
            return cached

        rows = await self.shares.list_shared_with(user_id, limit=self.settings.MEDIA_LIST_LIMIT)
        items = []
        for media, share in rows:
            base = MediaOut.from_model(media).model_dump()
            out = SharedMediaOut(**{**base, "shared_by": share.from_user_id, "shared_at": share.created_at})
            items.append(out.model_dump(by_alias=True, mode="json"))
        await cache.set_json(cache_key, items, self.settings.MEDIA_LIST_CACHE_TTL_SECONDS)
        return items
