"""Constraint checks against GitHub's issue limits.

Validation is all-or-nothing: the first fatal violation raises
``ValidationError`` before any request is made. Soft problems (whitespace
around labels, usernames that look wrong) go to the diagnostics sink.
Label and assignee lists are trimmed and deduplicated; running the
validator again on its own output changes nothing.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace

from .diagnostics import NULL_SINK, DiagnosticsSink
from .errors import NoRecordsError, ValidationError
from .models import IssueRecord

MAX_TITLE_LENGTH = 256
MAX_BODY_LENGTH = 65_536
MAX_LABEL_LENGTH = 50
MAX_LABELS = 100
MAX_ASSIGNEE_LENGTH = 39
MAX_ASSIGNEES = 10
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?$")


def _dedupe(values: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(v.strip() for v in values))


def _check_labels(
    labels: Sequence[str], row: int, sink: DiagnosticsSink
) -> tuple[str, ...] | None:
    prefix = f"Row {row}:"
    for position, label in enumerate(labels, start=1):
        if not isinstance(label, str) or not label.strip():
            raise ValidationError(row, f"Label {position} must be a non-empty string")
        if len(label) > MAX_LABEL_LENGTH:
            raise ValidationError(
                row, f'Label "{label}" is too long (max {MAX_LABEL_LENGTH} characters)'
            )
        if label != label.strip():
            sink.warn(
                f'Warning: {prefix} Label "{label}" has leading/trailing spaces '
                "that will be trimmed"
            )
    deduped = _dedupe(labels)
    if len(deduped) > MAX_LABELS:
        raise ValidationError(row, f"Too many labels (max {MAX_LABELS}). Current: {len(deduped)}")
    return deduped or None


def _check_assignees(
    assignees: Sequence[str], row: int, sink: DiagnosticsSink
) -> tuple[str, ...] | None:
    prefix = f"Row {row}:"
    for position, assignee in enumerate(assignees, start=1):
        if not isinstance(assignee, str) or not assignee.strip():
            raise ValidationError(row, f"Assignee {position} must be a non-empty string")
        username = assignee.strip()
        if not USERNAME_PATTERN.match(username):
            sink.warn(
                f'Warning: {prefix} Assignee "{username}" may not be a valid GitHub username'
            )
        if len(username) > MAX_ASSIGNEE_LENGTH:
            raise ValidationError(
                row,
                f'Assignee "{username}" is too long (max {MAX_ASSIGNEE_LENGTH} characters)',
            )
    deduped = _dedupe(assignees)
    if len(deduped) > MAX_ASSIGNEES:
        raise ValidationError(
            row, f"Too many assignees (max {MAX_ASSIGNEES}). Current: {len(deduped)}"
        )
    return deduped or None


def validate_record(
    record: IssueRecord, row: int, *, sink: DiagnosticsSink = NULL_SINK
) -> IssueRecord:
    """Validate one record in isolation and return the repaired copy."""
    title = record.title
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(row, "Title is required and must be a non-empty string")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(
            row,
            f"Title is too long (max {MAX_TITLE_LENGTH} characters). Current: {len(title)}",
        )

    if record.body is not None and len(record.body) > MAX_BODY_LENGTH:
        raise ValidationError(
            row,
            f"Description is too long (max {MAX_BODY_LENGTH:,} characters). "
            f"Current: {len(record.body)}",
        )

    labels = _check_labels(record.labels, row, sink) if record.labels is not None else None
    assignees = (
        _check_assignees(record.assignees, row, sink) if record.assignees is not None else None
    )

    milestone = record.milestone
    if milestone is not None:
        if not isinstance(milestone, str) or not milestone.strip():
            raise ValidationError(row, "Milestone must be a non-empty string")
        milestone = milestone.strip()

    return replace(record, labels=labels, assignees=assignees, milestone=milestone)


def validate_records(
    records: Sequence[IssueRecord], *, sink: DiagnosticsSink = NULL_SINK
) -> list[IssueRecord]:
    """Validate the whole batch, failing on the first fatal violation."""
    if records is None or not isinstance(records, Sequence):
        raise NoRecordsError("Invalid CSV data: Expected a sequence of issues")
    if len(records) == 0:
        raise NoRecordsError()
    return [validate_record(record, row, sink=sink) for row, record in enumerate(records, start=1)]


__all__ = [
    "MAX_ASSIGNEES",
    "MAX_ASSIGNEE_LENGTH",
    "MAX_BODY_LENGTH",
    "MAX_LABELS",
    "MAX_LABEL_LENGTH",
    "MAX_TITLE_LENGTH",
    "USERNAME_PATTERN",
    "validate_record",
    "validate_records",
]
