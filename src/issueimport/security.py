"""Input hygiene helpers: file checks, token shape checks, masking.

None of these talk to the network or write files. They run before the
pipeline touches a CSV and before a token is handed to the transport.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

MAX_FILE_BYTES = 50 * 1024 * 1024
_FORMULA_PREFIX = re.compile(r"^[=+\-@]")
_CLASSIC_TOKEN = re.compile(r"^[a-f0-9]{40}$")


@dataclass(frozen=True)
class PathCheck:
    safe: bool
    reason: str | None = None


@dataclass(frozen=True)
class TokenCheck:
    valid: bool
    sanitized: str | None = None
    reason: str | None = None


def validate_safe_file_path(path: str | Path, max_bytes: int = MAX_FILE_BYTES) -> PathCheck:
    p = Path(path).expanduser().resolve()
    if not p.exists():
        return PathCheck(False, "File does not exist")
    if not p.is_file():
        return PathCheck(False, "Path is not a file")
    if p.suffix.lower() != ".csv":
        return PathCheck(False, "Only CSV files are allowed")
    size = p.stat().st_size
    if size > max_bytes:
        return PathCheck(
            False,
            f"File too large (max {max_bytes // (1024 * 1024)}MB). "
            f"Current: {round(size / 1024 / 1024)}MB",
        )
    if not os.access(p, os.R_OK):
        return PathCheck(False, "File is not readable")
    return PathCheck(True)


def sanitize_github_token(token: str | None) -> TokenCheck:
    if not token or not isinstance(token, str):
        return TokenCheck(False, reason="Token must be a non-empty string")
    trimmed = token.strip()
    if not trimmed:
        return TokenCheck(False, reason="Token cannot be empty")
    if any(ch.isspace() for ch in trimmed):
        return TokenCheck(False, reason="Token contains invalid characters")
    personal = trimmed.startswith("ghp_") and len(trimmed) >= 36
    fine_grained = trimmed.startswith("github_pat_") and len(trimmed) >= 82
    classic = bool(_CLASSIC_TOKEN.match(trimmed))
    if not (personal or fine_grained or classic):
        return TokenCheck(
            False,
            reason=(
                "Invalid GitHub token format. Expected: ghp_* (personal), "
                "github_pat_* (fine-grained), or 40-char hex (classic)"
            ),
        )
    return TokenCheck(True, sanitized=trimmed)


def mask_sensitive(value: str | None, kind: str = "token") -> str:
    if not value or not isinstance(value, str):
        return "[INVALID]"
    if kind == "token":
        if len(value) <= 8:
            return "*" * len(value)
        return value[:4] + "*" * (len(value) - 8) + value[-4:]
    if kind == "email":
        user, sep, domain = value.partition("@")
        if not sep or "@" in domain:
            return "[INVALID_EMAIL]"
        masked = user[:2] + "*" * max(0, len(user) - 2) if len(user) > 2 else "*" * len(user)
        return f"{masked}@{domain}"
    if kind == "url":
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            return "[INVALID_URL]"
        return f"{parts.scheme}://{parts.hostname}{'/***' if parts.path else ''}"
    return "[MASKED]"


def is_formula_like(value: str) -> bool:
    return bool(_FORMULA_PREFIX.match(value.strip()))


def sanitize_cell(value: str) -> str:
    """Neutralise spreadsheet formula prefixes by quoting the cell."""
    if is_formula_like(value):
        return f"'{value}"
    return value


__all__ = [
    "MAX_FILE_BYTES",
    "PathCheck",
    "TokenCheck",
    "is_formula_like",
    "mask_sensitive",
    "sanitize_cell",
    "sanitize_github_token",
    "validate_safe_file_path",
]
