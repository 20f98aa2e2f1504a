import logging
from media_platform.platform.ports.cache import CachePort

log = logging.getLogger("media.cache")

def user_media_key(user_id: int | str) -> str:
    return f"user:{user_id}:media"

def user_media_page_key(user_id: int | str, limit: int, offset: int) -> str:
    return f"{user_media_key(user_id)}:{limit}:{offset}"

def user_shared_media_key(user_id: int | str) -> str:
    return f"user:{user_id}:shared-media"

async def invalidate_user_media(cache: CachePort, user_id: int | str) -> int:
    """Drop the owner's listing and every paginated variant of it."""
    base = user_media_key(user_id)
    keys = [base, *await cache.scan(f"{base}:*")]
    deleted = await cache.delete(*keys)
    log.info("Invalidated cache for user %s (%d keys)", user_id, deleted)
    return deleted
