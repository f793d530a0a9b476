"""Column-name agnostic field lookup for loosely typed CSV rows.

Each semantic field has an ordered list of accepted column spellings. A row
is indexed once by case-folded column name; lookups walk the aliases in
order and return the first non-empty value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

RawRow = Mapping[str, "str | None"]
KeyIndex = dict[str, list[str]]

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title", "name"),
    "body": ("description", "body", "content"),
    "labels": ("labels", "tags", "label"),
    "assignees": ("assignee", "assignees", "assigned"),
    "milestone": ("milestone", "project milestone", "sprint"),
    "priority": ("priority",),
    "status": ("status", "state"),
    "due_date": ("due date", "duedate", "deadline"),
}


@dataclass(frozen=True)
class ExtractedFields:
    """Raw, untrimmed string values found for each semantic field."""

    title: str | None = None
    body: str | None = None
    labels: str | None = None
    assignees: str | None = None
    milestone: str | None = None
    priority: str | None = None
    status: str | None = None
    due_date: str | None = None


def _index_key(column: str) -> str:
    return " ".join(column.replace("\ufeff", "").split()).casefold()


def build_key_index(row: RawRow) -> KeyIndex:
    """Group the row's values by case-folded column name.

    Columns that only differ by case (``Title`` / ``title``) keep the row's
    original ordering within their bucket.
    """
    index: KeyIndex = {}
    for column, value in row.items():
        if column is None or value is None:
            continue
        index.setdefault(_index_key(str(column)), []).append(str(value))
    return index


def lookup(index: KeyIndex, field: str) -> str | None:
    """Return the first non-empty value for ``field`` across its aliases."""
    try:
        aliases = FIELD_ALIASES[field]
    except KeyError as exc:
        raise KeyError(f"Unknown field: {field}") from exc
    for alias in aliases:
        for value in index.get(alias, ()):
            if value != "":
                return value
    return None


def extract_fields(row: RawRow) -> ExtractedFields | None:
    """Resolve every semantic field for ``row``.

    Returns ``None`` when no title-like column carries a value, which tells
    the caller to skip the row.
    """
    index = build_key_index(row)
    title = lookup(index, "title")
    if title is None:
        return None
    return ExtractedFields(
        title=title,
        body=lookup(index, "body"),
        labels=lookup(index, "labels"),
        assignees=lookup(index, "assignees"),
        milestone=lookup(index, "milestone"),
        priority=lookup(index, "priority"),
        status=lookup(index, "status"),
        due_date=lookup(index, "due_date"),
    )


__all__ = [
    "ExtractedFields",
    "FIELD_ALIASES",
    "RawRow",
    "build_key_index",
    "extract_fields",
    "lookup",
]
