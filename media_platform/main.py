import logging
import time
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from media_platform.core.config import settings
from media_platform.core.logging import setup_logging, request_id_ctx
from media_platform.api.router import api_router
from media_platform.api.health import health, router as health_router
from media_platform.platform.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
}


def create_app(registry: ProviderRegistry | None = None) -> FastAPI:
    setup_logging()
    registry = registry or ProviderRegistry(settings)
    cfg = registry.settings
    app = FastAPI(title=cfg.APP_NAME)
    app.state.registry = registry

    # one limiter per app so counters never leak between instances
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[cfg.RATE_LIMIT_DEFAULT],
        storage_uri=cfg.RATE_LIMIT_STORAGE_URL,
        enabled=cfg.RATE_LIMIT_ENABLED,
    )
    limiter.exempt(health)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        token = request_id_ctx.set(request.headers.get("x-request-id", "-"))
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
            )
            return response
        finally:
            request_id_ctx.reset(token)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": "An internal server error occurred."},
        )

    @app.on_event("startup")
    async def on_startup():
        # credentials failure is fatal: let it abort startup
        await app.state.registry.startup()

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.registry.shutdown()

    app.include_router(health_router)
    app.include_router(api_router, prefix=cfg.API_PREFIX)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("media_platform.main:app", host="0.0.0.0", port=3000)
