import logging
import time
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from media_platform.api.deps import get_registry
from media_platform.platform.provider_registry import ProviderRegistry

log = logging.getLogger("health")

router = APIRouter()
_started = time.monotonic()

@router.get("/health", tags=["health"])
async def health(registry: ProviderRegistry = Depends(get_registry)):
    body = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started, 3),
        "checks": {},
    }
    try:
        await registry.database.ping()
        body["checks"]["database"] = "ok"
    except Exception as e:
        log.warning("Database health check failed: %s", e)
        body["checks"]["database"] = "error"
        body["status"] = "unhealthy"
    try:
        await registry.cache().ping()
        body["checks"]["redis"] = "ok"
    except Exception as e:
        log.warning("Redis health check failed: %s", e)
        body["checks"]["redis"] = "error"
        body["status"] = "unhealthy"
    return JSONResponse(status_code=200 if body["status"] == "healthy" else 503, content=body)
