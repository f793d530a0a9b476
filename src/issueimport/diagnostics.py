"""Diagnostics sinks for non-fatal warnings.

Normalization, validation and submission never print; they hand warning
strings to a sink. ``NullSink`` discards, ``CollectingSink`` keeps them for
tests and summaries, ``LoggerSink`` forwards to the structured logger.
"""

from __future__ import annotations

from typing import Protocol

from .logging import StructuredLogger, get_logger


class DiagnosticsSink(Protocol):
    def warn(self, message: str) -> None: ...  # pragma: no cover - structural only


class NullSink:
    def warn(self, message: str) -> None:
        return None


class CollectingSink:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)

    def __len__(self) -> int:
        return len(self.messages)


class LoggerSink:
    """Forward warnings to the structured logger, optionally keeping a copy."""

    def __init__(self, logger: StructuredLogger | None = None, keep: bool = True) -> None:
        self._logger = logger
        self._keep = keep
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        (self._logger or get_logger()).warning(message, operation="diagnostic")
        if self._keep:
            self.messages.append(message)


NULL_SINK = NullSink()

__all__ = ["CollectingSink", "DiagnosticsSink", "LoggerSink", "NULL_SINK", "NullSink"]
