from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from media_platform.api.deps import get_session, get_registry
from media_platform.core.security import get_principal, Principal
from media_platform.platform.provider_registry import ProviderRegistry
from media_platform.modules.media.schemas import UploadUrlIn, UploadUrlOut, ConfirmOut, MediaOut, SharedMediaOut
from media_platform.modules.media.service import MediaService
from media_platform.modules.shares.schemas import ShareIn, ShareOut
from media_platform.modules.shares.service import ShareService

router = APIRouter()

def svc(session: AsyncSession = Depends(get_session), registry: ProviderRegistry = Depends(get_registry)) -> MediaService:
    return MediaService(session, registry)

def share_svc(session: AsyncSession = Depends(get_session), registry: ProviderRegistry = Depends(get_registry)) -> ShareService:
    return ShareService(session, registry)

@router.post("/upload-url", response_model=UploadUrlOut)
async def create_upload_url(payload: UploadUrlIn, principal: Principal = Depends(get_principal), service: MediaService = Depends(svc)):
    return await service.create_upload_url(principal.user_id, payload)

@router.get("", response_model=list[MediaOut])
async def list_media(
    limit: int | None = Query(default=None, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    service: MediaService = Depends(svc),
):
    return await service.list_media(principal.user_id, limit=limit, offset=offset)

@router.get("/shared", response_model=list[SharedMediaOut])
async def list_shared_media(principal: Principal = Depends(get_principal), service: ShareService = Depends(share_svc)):
    return await service.list_shared_with(principal.user_id)

@router.post("/{media_id}/confirm", response_model=ConfirmOut)
async def confirm_upload(media_id: int, principal: Principal = Depends(get_principal), service: MediaService = Depends(svc)):
    return await service.confirm(principal.user_id, media_id)

@router.get("/{media_id}/status", response_model=MediaOut)
async def media_status(media_id: int, principal: Principal = Depends(get_principal), service: MediaService = Depends(svc)):
    return await service.get_status(principal.user_id, media_id)

@router.post("/{media_id}/share", response_model=ShareOut)
async def share_media(media_id: int, payload: ShareIn, principal: Principal = Depends(get_principal), service: ShareService = Depends(share_svc)):
    return await service.share(principal.user_id, media_id, payload)
