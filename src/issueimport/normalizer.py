"""Build canonical ``IssueRecord`` objects from raw CSV rows.

Missing titles are fatal (``MissingTitleError``) and stop the batch; every
other malformed field is either repaired or quietly dropped. Priority and
status columns become synthetic ``priority: <value>`` / ``status: <value>``
labels and a parseable due date is appended to the body.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime

from .diagnostics import NULL_SINK, DiagnosticsSink
from .errors import MissingTitleError
from .extractor import RawRow, extract_fields
from .models import IssueRecord
from .security import is_formula_like, mask_sensitive, sanitize_cell

_LABEL_SPLIT = re.compile(r"[,;|]")
_MISSING_SENTINELS = frozenset({"undefined", "null"})
_LABEL_SENTINELS = frozenset({"none", "no priority"}) | _MISSING_SENTINELS

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def split_labels(raw: str | None) -> list[str]:
    """Split on comma, semicolon or pipe; keep first-seen order, drop blanks."""
    if not raw:
        return []
    return [tok.strip() for tok in _LABEL_SPLIT.split(raw) if tok.strip()]


def split_assignees(raw: str | None) -> list[str]:
    """Split on comma and reduce email-shaped values to their local part."""
    if not raw:
        return []
    out: list[str] = []
    for token in raw.split(","):
        cleaned = token.strip()
        if "@" in cleaned:
            cleaned = cleaned.split("@", 1)[0].strip()
        if cleaned:
            out.append(cleaned)
    return out


def parse_due_date(raw: str | None) -> date | None:
    if not raw:
        return None
    text = raw.strip()
    if not text or text.lower() in _MISSING_SENTINELS:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_due_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _label_value(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.strip().lower()
    if not value or value in _LABEL_SENTINELS:
        return None
    return value


def _clean_cell(value: str, column: str, sink: DiagnosticsSink) -> str:
    if is_formula_like(value):
        sink.warn(
            f"Potentially dangerous CSV data detected in {column} and sanitized: "
            f"{mask_sensitive(value)}"
        )
        return sanitize_cell(value)
    return value


def normalize_row(
    row: RawRow, *, row_number: int | None = None, sink: DiagnosticsSink = NULL_SINK
) -> IssueRecord | None:
    """Turn one raw row into an ``IssueRecord``; ``None`` means skip the row."""
    fields = extract_fields(row)
    if fields is None:
        return None

    title = (fields.title or "").strip()
    if not title:
        raise MissingTitleError(row_number)
    title = _clean_cell(title, "title", sink)

    body: str | None = (fields.body or "").strip() or None
    if body is not None:
        body = _clean_cell(body, "body", sink)

    labels = split_labels(fields.labels)
    for prefix, raw in (("priority", fields.priority), ("status", fields.status)):
        value = _label_value(raw)
        if value is None:
            continue
        synthetic = f"{prefix}: {value}"
        if synthetic not in labels:
            labels.append(synthetic)

    assignees = split_assignees(fields.assignees)

    milestone: str | None = None
    if fields.milestone is not None:
        candidate = fields.milestone.strip()
        if candidate and candidate not in _MISSING_SENTINELS:
            milestone = candidate

    due = parse_due_date(fields.due_date)
    if due is not None:
        line = f"**Due Date:** {format_due_date(due)}"
        body = f"{body}\n\n{line}" if body else line

    return IssueRecord(
        title=title,
        body=body,
        labels=tuple(labels) or None,
        assignees=tuple(assignees) or None,
        milestone=milestone,
    )


def normalize_rows(
    rows: Iterable[RawRow], *, sink: DiagnosticsSink = NULL_SINK
) -> list[IssueRecord]:
    """Normalize every row, skipping title-less rows and failing fast on blank titles."""
    records: list[IssueRecord] = []
    for number, row in enumerate(rows, start=1):
        record = normalize_row(row, row_number=number, sink=sink)
        if record is not None:
            records.append(record)
    return records


__all__ = [
    "format_due_date",
    "normalize_row",
    "normalize_rows",
    "parse_due_date",
    "split_assignees",
    "split_labels",
]
