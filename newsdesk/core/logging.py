from __future__ import annotations

import logging

from newsdesk.core.config import settings
from newsdesk.core.request_context import get_request_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] - %(message)s"


class RequestIdFilter(logging.Filter):
    """Stamp each record with the id of the request being handled ("-" outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


# Centralized app logging configuration (format + level).
def configure_logging(log_level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (log_level or settings.log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
