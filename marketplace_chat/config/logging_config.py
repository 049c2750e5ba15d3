"""
Logging setup for the API process.

Every record carries the request's correlation id (set by
CorrelationIdMiddleware from X-Correlation-ID). Records logged outside a
request, e.g. by the change feed listener, get NO_CORRELATION_ID.
"""

import logging
import sys
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path

from marketplace_chat.config.settings import Config

NO_CORRELATION_ID = "-"

correlation_id_var: ContextVar[str] = ContextVar(
    "correlation_id", default=NO_CORRELATION_ID
)

# Client libraries that log every request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "hpack", "psycopg", "prisma", "supabase")

_HANDLER_MARK = "_marketplace_chat_handler"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        return True


class SafeFormatter(logging.Formatter):
    """Tolerates records from handlers that bypassed CorrelationIdFilter."""

    def format(self, record):
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_CORRELATION_ID
        return super().format(record)


def _install(root: logging.Logger, handler: logging.Handler, formatter: logging.Formatter):
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure root handlers once; calling again (uvicorn reload) replaces them."""
    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    for handler in [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = SafeFormatter(Config.LOG_FORMAT)
    _install(root, logging.StreamHandler(sys.stdout), formatter)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        _install(
            root,
            RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5),
            formatter,
        )

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger = logging.getLogger("marketplace_chat")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.info(f"Logging is set up: level={level}, log_file={log_file}")
    return root
