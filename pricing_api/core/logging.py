"""
Logging configuration.

WHAT: Configures the stdlib root logger once at application startup.

WHY: Modules log through ``logging.getLogger(__name__)``. Configuring the
handler and format in one place keeps uvicorn, SQLAlchemy and application
records consistent, and stamps each record with the request id captured by
RequestContextMiddleware so a price calculation can be traced back to the
request that triggered it.
"""

import logging

from pricing_api.core.config import settings
from pricing_api.middleware.request_context import get_request_context


LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


class RequestIdFilter(logging.Filter):
    """Attach the current request id (or "-") to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_request_context()
        record.request_id = ctx.request_id if ctx else "-"
        return True


def configure_logging(level: str | None = None) -> None:
    """
    Configure the root logger.

    Safe to call more than once: the handler is only installed the first time.

    Args:
        level: Log level name; defaults to settings.LOG_LEVEL (DEBUG when settings.DEBUG)
    """
    root = logging.getLogger()
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    root.setLevel(level.upper())

    if any(isinstance(f, RequestIdFilter) for h in root.handlers for f in h.filters):
        return

    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
