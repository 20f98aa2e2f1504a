import logging
from contextvars import ContextVar
from .config import settings

# attached to every log record as %(request_id)s; API sets it per request, worker per message
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")

_configured = False

def setup_logging():
    global _configured
    if _configured:
        return
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.request_id = request_id_ctx.get()
        return record

    logging.setLogRecordFactory(record_factory)
    level = logging.DEBUG if settings.ENV == "local" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s",
    )
    _configured = True
