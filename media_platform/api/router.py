from fastapi import APIRouter
from media_platform.modules.users.router import router as auth_router
from media_platform.modules.media.router import router as media_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(media_router, prefix="/media", tags=["media"])
