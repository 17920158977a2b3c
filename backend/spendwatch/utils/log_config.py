"""Logging setup: structured terminal output with ``extra=`` fields appended as JSON."""
import json
import logging
from typing import Optional

from spendwatch.config import settings

_STANDARD_LOG_RECORD_KEYS = frozenset(
    (
        "name", "msg", "args", "created", "filename", "funcName", "levelname", "levelno",
        "lineno", "module", "msecs", "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "message", "thread", "threadName", "taskName",
        "asctime", "getMessage",
    )
)


def _format_extra(record: logging.LogRecord) -> str:
    extra = {k: getattr(record, k) for k in record.__dict__ if k not in _STANDARD_LOG_RECORD_KEYS}
    if not extra:
        return ""
    try:
        return " | " + json.dumps(extra, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return " | " + str(extra)


class ExtraFormatter(logging.Formatter):
    """Formatter that appends any ``extra`` attributes of the record."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        suffix = _format_extra(record)
        return base + suffix if suffix else base


def configure_logging(level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure the root logger once.

    Args:
        level: Log level name; defaults to ``settings.log_level`` (DEBUG when ``settings.debug``)
        force: Reconfigure even if handlers are already installed
    """
    if logging.root.handlers and not force:
        return
    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(level=level.upper(), format=settings.log_format, force=force)
    for handler in logging.root.handlers:
        handler.setFormatter(ExtraFormatter(settings.log_format))
