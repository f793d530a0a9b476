"""Centralized retry / backoff helpers for the HTTP transport.

Provides ``run_with_retries`` which wraps a thunk with exponential backoff
plus jitter. Only transient failures are retried: rate-limit / abuse
messages, gateway 5xx statuses, connection errors and timeouts. Calls made
with ``idempotent=False`` only retry rate-limit refusals and connect
timeouts. Everything else propagates immediately so the submitter can
classify it.

Environment overrides:
  ISSUEIMPORT_RETRY_ATTEMPTS (default 3)
  ISSUEIMPORT_RETRY_BASE (seconds base, default 0.5)
  ISSUEIMPORT_RETRY_MAX_SLEEP (cap in seconds, optional)
"""

from __future__ import annotations

import os
import random
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

import requests

from .logging import get_logger

T = TypeVar("T")

TRANSIENT_TOKENS = (
    "rate limit",
    "abuse detection",
    "secondary rate",
)
TRANSIENT_STATUSES = frozenset({500, 502, 503, 504})

_RE_RETRY_AFTER = re.compile(r"retry[-\s]after:?\s*(\d+)", re.IGNORECASE)
_RE_SECONDS_HINT = re.compile(r"wait\s*(\d+)\s*seconds", re.IGNORECASE)
_JITTER = random.SystemRandom()


def _extract_explicit_backoff(text: str) -> float | None:
    """Extract an explicit backoff (seconds) from error output.

    Supports patterns like:
      Retry-After: 12
      retry after 12
      wait 30 seconds
    """
    if not text:
        return None
    for pattern in (_RE_RETRY_AFTER, _RE_SECONDS_HINT):
        m = pattern.search(text)
        if m:
            val = float(m.group(1))
            return val if val > 0 else None
    return None


@dataclass
class RetryConfig:
    attempts: int = field(
        default_factory=lambda: int(os.environ.get("ISSUEIMPORT_RETRY_ATTEMPTS", "3"))
    )
    base_sleep: float = field(
        default_factory=lambda: float(os.environ.get("ISSUEIMPORT_RETRY_BASE", "0.5"))
    )
    sleep: Callable[[float], None] = time.sleep


def is_transient(output: str) -> bool:
    out_lower = output.lower()
    return any(tok in out_lower for tok in TRANSIENT_TOKENS)


def _error_text(exc: BaseException) -> str:
    response_text = getattr(exc, "response_text", None)
    return f"{exc} {response_text}" if response_text else str(exc)


def is_retryable(exc: BaseException, *, idempotent: bool = True) -> bool:
    """Decide whether ``exc`` is worth another attempt.

    Non-idempotent requests (issue creation) are retried only on rate-limit
    refusals and connect timeouts.
    """
    if not idempotent:
        return isinstance(exc, requests.ConnectTimeout) or is_transient(_error_text(exc))
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    status = getattr(exc, "status", None)
    if status in TRANSIENT_STATUSES:
        return True
    return is_transient(_error_text(exc))


def _compute_sleep(attempt: int, cfg: RetryConfig, out: str) -> float:
    explicit = _extract_explicit_backoff(out)
    backoff = cfg.base_sleep * (2 ** (attempt - 1)) + _JITTER.uniform(0, 0.25)
    sleep_for: float = explicit if explicit is not None else backoff
    max_cap_env = os.environ.get("ISSUEIMPORT_RETRY_MAX_SLEEP")
    if max_cap_env:
        try:
            cap = float(max_cap_env)
        except ValueError:
            return sleep_for
        if cap >= 0:
            sleep_for = min(sleep_for, cap)
    return sleep_for


def run_with_retries(
    fn: Callable[[], T], *, cfg: RetryConfig | None = None, idempotent: bool = True
) -> T:
    cfg = cfg or RetryConfig()
    attempts = max(1, cfg.attempts)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt >= attempts or not is_retryable(exc, idempotent=idempotent):
                raise
            sleep_for = _compute_sleep(attempt, cfg, _error_text(exc))
            get_logger().warning(
                f"[retry] transient error, attempt {attempt}/{attempts}, "
                f"sleeping {sleep_for:.2f}s",
                operation="retry",
            )
            cfg.sleep(sleep_for)
    raise RuntimeError("retry logic exited unexpectedly")  # pragma: no cover


__all__ = ["RetryConfig", "is_retryable", "is_transient", "run_with_retries"]
