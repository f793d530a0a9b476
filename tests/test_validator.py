from __future__ import annotations

import pytest

from issueimport.diagnostics import CollectingSink
from issueimport.errors import NoRecordsError, ValidationError
from issueimport.models import IssueRecord
from issueimport.validator import (
    MAX_ASSIGNEES,
    MAX_BODY_LENGTH,
    MAX_LABELS,
    MAX_TITLE_LENGTH,
    validate_record,
    validate_records,
)


def test_valid_batch_passes_through() -> None:
    records = [IssueRecord("One"), IssueRecord("Two", body="b", labels=("bug",))]
    assert validate_records(records) == records


def test_title_too_long_cites_row() -> None:
    records = [IssueRecord("ok"), IssueRecord("x" * (MAX_TITLE_LENGTH + 1))]
    with pytest.raises(ValidationError) as excinfo:
        validate_records(records)
    assert excinfo.value.row == 2
    assert str(excinfo.value).startswith("Row 2: Title is too long")
    assert "Current: 257" in str(excinfo.value)


def test_title_at_limit_is_fine() -> None:
    validate_record(IssueRecord("x" * MAX_TITLE_LENGTH), 1)


def test_blank_title_rejected() -> None:
    with pytest.raises(ValidationError, match="Title is required"):
        validate_record(IssueRecord("   "), 3)


def test_body_too_long() -> None:
    with pytest.raises(ValidationError, match="65,536"):
        validate_record(IssueRecord("t", body="b" * (MAX_BODY_LENGTH + 1)), 1)


def test_long_label_rejected() -> None:
    with pytest.raises(ValidationError, match="is too long"):
        validate_record(IssueRecord("t", labels=("l" * 51,)), 1)


def test_too_many_labels() -> None:
    labels = tuple(f"label-{i}" for i in range(MAX_LABELS + 1))
    with pytest.raises(ValidationError, match="Too many labels"):
        validate_record(IssueRecord("t", labels=labels), 1)


def test_duplicate_labels_do_not_count_twice() -> None:
    labels = tuple(f"label-{i}" for i in range(MAX_LABELS)) + ("label-0",)
    record = validate_record(IssueRecord("t", labels=labels), 1)
    assert record.labels is not None
    assert len(record.labels) == MAX_LABELS


def test_too_many_assignees() -> None:
    assignees = tuple(f"user{i}" for i in range(MAX_ASSIGNEES + 1))
    with pytest.raises(ValidationError, match="Too many assignees"):
        validate_record(IssueRecord("t", assignees=assignees), 4)


def test_long_assignee_rejected() -> None:
    with pytest.raises(ValidationError, match="Assignee"):
        validate_record(IssueRecord("t", assignees=("a" * 40,)), 1)


def test_empty_label_entry_rejected() -> None:
    with pytest.raises(ValidationError, match="Label 2 must be a non-empty string"):
        validate_record(IssueRecord("t", labels=("ok", "  ")), 1)


def test_blank_milestone_rejected() -> None:
    with pytest.raises(ValidationError, match="Milestone"):
        validate_record(IssueRecord("t", milestone="  "), 1)


def test_padded_label_warns_and_trims() -> None:
    sink = CollectingSink()
    record = validate_record(IssueRecord("t", labels=(" bug ", "bug")), 2, sink=sink)
    assert record.labels == ("bug",)
    assert sink.messages == [
        'Warning: Row 2: Label " bug " has leading/trailing spaces that will be trimmed'
    ]


def test_odd_username_warns_but_passes() -> None:
    sink = CollectingSink()
    record = validate_record(IssueRecord("t", assignees=("bad_name",)), 1, sink=sink)
    assert record.assignees == ("bad_name",)
    assert len(sink) == 1
    assert "may not be a valid GitHub username" in sink.messages[0]


def test_validation_is_idempotent() -> None:
    record = IssueRecord(
        "t", labels=(" a", "a", "b "), assignees=("jane", "jane"), milestone=" M1 "
    )
    once = validate_record(record, 1)
    twice = validate_record(once, 1)
    assert once == twice
    assert once.labels == ("a", "b")
    assert once.assignees == ("jane",)
    assert once.milestone == "M1"


def test_empty_batch_rejected() -> None:
    with pytest.raises(NoRecordsError, match="No valid issues found"):
        validate_records([])


def test_non_sequence_rejected() -> None:
    with pytest.raises(NoRecordsError):
        validate_records(None)  # type: ignore[arg-type]


def test_first_failure_wins() -> None:
    records = [IssueRecord("x" * 300), IssueRecord("t", milestone=" ")]
    with pytest.raises(ValidationError) as excinfo:
        validate_records(records)
    assert excinfo.value.row == 1
