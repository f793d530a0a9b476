"""Error taxonomy & redaction helpers.

Two families live here:

- pipeline errors raised before any network activity (missing titles,
  validation failures, empty input, unreadable sources);
- submission errors, split into fatal classes that abort a batch and a
  classification helper that turns any transport exception into an
  ``ErrorInfo`` for per-item failure outcomes.

Public API:
- classify_submission_error(exc) -> ErrorInfo
- redact(text) -> str
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .models import SubmissionOutcome

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"(?i)(authorization:\s*bearer\s+)\S+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422


def redact(text: str) -> str:
    """Replace token-like substrings with a placeholder."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


class IssueImportError(RuntimeError):
    """Base class for every error raised by the import pipeline."""


class SourceError(IssueImportError):
    """The row source could not be read."""


class MissingTitleError(IssueImportError):
    def __init__(self, row: int | None = None) -> None:
        self.row = row
        prefix = f"Row {row}: " if row is not None else ""
        super().__init__(f"{prefix}Title is required for each issue")


class ValidationError(IssueImportError):
    """A record violates the tracker's constraints; fatal for the batch."""

    def __init__(self, row: int, reason: str) -> None:
        self.row = row
        self.reason = reason
        super().__init__(f"Row {row}: {reason}")


class NoRecordsError(IssueImportError):
    def __init__(self, message: str = "No valid issues found in CSV file") -> None:
        super().__init__(message)


class SubmissionAbortedError(IssueImportError):
    """Fatal submission failure; no further records are attempted.

    ``outcomes`` holds the results gathered before the abort. They are
    informational only, the batch as a whole must be treated as failed.
    """

    category = "aborted"

    def __init__(
        self,
        message: str,
        *,
        row: int | None = None,
        title: str | None = None,
        outcomes: list[SubmissionOutcome] | None = None,
    ) -> None:
        super().__init__(message)
        self.row = row
        self.title = title
        self.outcomes: list[SubmissionOutcome] = list(outcomes or [])


class AuthenticationError(SubmissionAbortedError):
    category = "auth"


class AuthorizationError(SubmissionAbortedError):
    category = "forbidden"


class TargetNotFoundError(SubmissionAbortedError):
    category = "not_found"


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    fatal: bool = False
    status: int | None = None
    details: dict[str, Any] | None = None


_FATAL_BY_STATUS: dict[int, tuple[str, str]] = {
    HTTP_UNAUTHORIZED: ("auth", "Authentication failed. Please check your GitHub token."),
    HTTP_FORBIDDEN: (
        "forbidden",
        'Access forbidden. Make sure your token has "repo" permissions.',
    ),
    HTTP_NOT_FOUND: ("not_found", "Repository not found or you don't have access."),
}

_FATAL_TYPES: dict[str, type[SubmissionAbortedError]] = {
    "auth": AuthenticationError,
    "forbidden": AuthorizationError,
    "not_found": TargetNotFoundError,
}


def _status_of(exc: BaseException) -> int | None:
    status = getattr(exc, "status", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def classify_submission_error(exc: BaseException) -> ErrorInfo:
    """Classify an exception raised by a remote create call.

    401/403/404 are fatal for the whole batch; 422 and everything else
    are recorded against the single item.
    """
    msg = redact(str(exc) if exc else "")
    status = _status_of(exc)
    kind = exc.__class__.__name__
    if status in _FATAL_BY_STATUS:
        category, reason = _FATAL_BY_STATUS[status]
        return ErrorInfo(category, reason, kind, fatal=True, status=status, details={"error": msg})
    if status == HTTP_UNPROCESSABLE:
        return ErrorInfo(
            "unprocessable",
            f"{msg} (this might be due to invalid assignees or other validation errors)",
            kind,
            status=status,
        )
    low = msg.lower()
    if any(k in low for k in ("timeout", "timed out", "connection", "temporarily unavailable")):
        return ErrorInfo("network", msg, kind, status=status)
    return ErrorInfo("generic", msg or kind, kind, status=status)


def fatal_error_for(
    info: ErrorInfo,
    *,
    row: int | None = None,
    title: str | None = None,
    outcomes: list[SubmissionOutcome] | None = None,
) -> SubmissionAbortedError:
    """Build the abort exception matching a fatal ``ErrorInfo``."""
    error_type = _FATAL_TYPES.get(info.category, SubmissionAbortedError)
    return error_type(info.message, row=row, title=title, outcomes=outcomes)


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ErrorInfo",
    "IssueImportError",
    "MissingTitleError",
    "NoRecordsError",
    "SourceError",
    "SubmissionAbortedError",
    "TargetNotFoundError",
    "ValidationError",
    "classify_submission_error",
    "fatal_error_for",
    "redact",
]
