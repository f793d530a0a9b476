"""Structured logging for the import pipeline.

One ``StructuredLogger`` per process, reached through ``get_logger()``.
Output goes to stderr so stdout stays free for the CLI report. With
``json_logging`` every record is a single JSON object carrying the keyword
fields passed by the caller (``operation``, ``title``, ``issue_number``...).
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

LOGGER_NAME = "issueimport"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(message)s"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_") and key not in entry
        )
        return json.dumps(entry, default=str)


def _stderr_handler(json_logging: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_logging else logging.Formatter(TEXT_FORMAT))
    return handler


class StructuredLogger:
    """Thin wrapper over a stdlib logger with pipeline-specific helpers.

    In JSON mode an entry identical to the one just emitted (same level,
    message and fields) is dropped.
    """

    def __init__(
        self, name: str = LOGGER_NAME, json_logging: bool = False, level: str = "INFO"
    ) -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.handlers[:] = [_stderr_handler(json_logging)]
        self._logger.propagate = False
        self._suppress_repeats = json_logging
        self._previous: tuple[Any, ...] | None = None

    def _emit(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if self._suppress_repeats:
            key = (level, message, sorted((k, repr(v)) for k, v in fields.items()))
            if key == self._previous:
                return
            self._previous = key
        self._logger.log(level, message, extra=fields)

    def log_operation(self, operation: str, **fields: Any) -> None:
        self._emit(logging.INFO, f"Operation: {operation}", {"operation": operation, **fields})

    def log_issue_action(
        self,
        action: str,
        title: str,
        issue_number: int | None = None,
        dry_run: bool = False,
    ) -> None:
        """Record one create attempt, e.g. ``issue create 'Fix login' #12``."""
        fields: dict[str, Any] = {
            "operation": f"issue_{action}",
            "title": title,
            "dry_run": dry_run,
        }
        message = f"issue {action} {title!r}"
        if issue_number:
            fields["issue_number"] = issue_number
            message += f" #{issue_number}"
        if dry_run:
            message += " [DRY]"
        self._emit(logging.INFO, message, fields)

    def log_performance(self, operation: str, duration_ms: float, **fields: Any) -> None:
        self._emit(
            logging.INFO,
            f"Performance: {operation} completed in {duration_ms:.2f}ms",
            {"operation": operation, "duration_ms": round(duration_ms, 2), **fields},
        )

    def log_error(self, message: str, error: str | None = None, **fields: Any) -> None:
        if error:
            fields["error"] = error
        self._logger.error(message, extra=fields)

    def debug(self, message: str, **fields: Any) -> None:
        self._logger.debug(message, extra=fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._logger.warning(message, extra=fields)

    @contextmanager
    def timed_operation(self, operation: str, **fields: Any) -> Iterator[None]:
        """Log ``<operation>_start``, then the duration or the failure."""
        started = time.perf_counter()
        self.log_operation(f"{operation}_start", **fields)
        try:
            yield
        except Exception as exc:
            self.log_error(f"operation {operation} failed", error=str(exc), **fields)
            raise
        self.log_performance(operation, (time.perf_counter() - started) * 1000, **fields)


_GLOBAL: StructuredLogger | None = None


def get_logger() -> StructuredLogger:
    global _GLOBAL  # noqa: PLW0603
    if _GLOBAL is None:
        _GLOBAL = StructuredLogger()
    return _GLOBAL


def configure_logging(json_logging: bool = False, level: str = "INFO") -> StructuredLogger:
    global _GLOBAL  # noqa: PLW0603
    _GLOBAL = StructuredLogger(json_logging=json_logging, level=level)
    return _GLOBAL


__all__ = ["JSONFormatter", "StructuredLogger", "configure_logging", "get_logger"]
