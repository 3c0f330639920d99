from __future__ import annotations
import logging, sys
import structlog
import structlog.stdlib
from app.config import settings

def configure_logging(level: str | None = None):
    lvl = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        cache_logger_on_first_use=True,
    )
    # stdlib loggers (uvicorn, sqlalchemy, httpx, rq) go out as JSON too
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer()))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(lvl)
