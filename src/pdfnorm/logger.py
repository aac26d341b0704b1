"""Structured JSON logging for the normalizer.

Every record is one JSON object per line on stderr:
{"time":"2026-10-19T09:12:03.114+02:00","level":"DEBUG","source":{"function":"extract_page","file":".../stage_extract.py","line":61},"msg":"page extracted","page":3,"tables":1}
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Union

from pdfnorm.config import settings

# Fields attached to every record logged in the current context (e.g. the input file name)
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


class StructuredFormatter(logging.Formatter):
    """JSON formatter with source location and keyword fields."""

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.now(timezone.utc).astimezone().isoformat()

        log_entry: dict[str, Any] = {
            "time": time_str,
            "level": record.levelname,
            "source": {
                "function": record.funcName,
                "file": record.pathname,
                "line": record.lineno,
            },
            "msg": record.getMessage(),
        }

        ctx_fields = _log_context.get()
        if ctx_fields:
            log_entry.update(ctx_fields)

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredLogger:
    """Logger that takes keyword fields instead of format arguments."""

    def __init__(self, name: str = "pdfnorm", level: str = "INFO"):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level.upper())

        self._logger.handlers.clear()
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
        self._logger.addHandler(handler)

        # Keep library output away from the host application's root handlers
        self._logger.propagate = False

    @property
    def level(self) -> int:
        return self._logger.level

    def set_level(self, level: Union[str, int]) -> None:
        """Change the minimum level, e.g. from the CLI's --verbose flag."""
        self._logger.setLevel(level.upper() if isinstance(level, str) else level)

    def _log(
        self,
        level: int,
        msg: str,
        stacklevel: int = 3,
        exc_info: bool = False,
        **fields: Any,
    ) -> None:
        extra = {"extra_fields": fields} if fields else {}
        self._logger.log(level, msg, stacklevel=stacklevel, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **fields: Any) -> None:
        """Log a debug message with optional fields."""
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        """Log an info message with optional fields."""
        self._log(logging.INFO, msg, **fields)

    def warn(self, msg: str, **fields: Any) -> None:
        """Log a warning message with optional fields."""
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        """Log an error message with optional fields."""
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)


def set_context(**fields: Any) -> None:
    """Attach fields to every subsequent log record in this context.

    Example:
        set_context(document="invoices.pdf")
        logger.info("document extracted", pages=4)  # includes document
    """
    current = _log_context.get()
    _log_context.set({**current, **fields})


def clear_context() -> None:
    """Clear all context fields."""
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Get current context fields."""
    return _log_context.get().copy()


logger = StructuredLogger("pdfnorm", level=settings.log_level)
