from __future__ import annotations

from datetime import date

import pytest

from issueimport.diagnostics import CollectingSink
from issueimport.errors import MissingTitleError
from issueimport.normalizer import (
    format_due_date,
    normalize_row,
    normalize_rows,
    parse_due_date,
    split_assignees,
    split_labels,
)


def test_split_labels_on_all_delimiters() -> None:
    assert split_labels("bug, ui;docs|x") == ["bug", "ui", "docs", "x"]


def test_split_labels_drops_empty_tokens_and_keeps_duplicates() -> None:
    assert split_labels("a,,b; ;a") == ["a", "b", "a"]
    assert split_labels(None) == []


def test_assignee_email_reduced_to_local_part() -> None:
    assert split_assignees("jane@example.com") == ["jane"]
    assert split_assignees(" bob , carol@corp.io,, ") == ["bob", "carol"]


def test_basic_row() -> None:
    record = normalize_row(
        {
            "Title": "  Fix login  ",
            "Description": "  Steps to reproduce  ",
            "Labels": "bug|auth",
            "Assignee": "jane@example.com, bob",
            "Milestone": " v1.0 ",
        }
    )
    assert record is not None
    assert record.title == "Fix login"
    assert record.body == "Steps to reproduce"
    assert record.labels == ("bug", "auth")
    assert record.assignees == ("jane", "bob")
    assert record.milestone == "v1.0"


def test_empty_body_is_absent() -> None:
    record = normalize_row({"Title": "t", "Body": "   "})
    assert record is not None
    assert record.body is None
    assert record.labels is None
    assert record.assignees is None


def test_priority_label_added_once() -> None:
    record = normalize_row({"Title": "t", "Labels": "priority: high", "Priority": "High"})
    assert record is not None
    assert record.labels is not None
    assert record.labels.count("priority: high") == 1


def test_priority_and_status_become_labels() -> None:
    record = normalize_row({"Title": "t", "Priority": "Urgent", "State": "In Progress"})
    assert record is not None
    assert record.labels == ("priority: urgent", "status: in progress")


@pytest.mark.parametrize("value", ["none", "No Priority", "  ", "null"])
def test_priority_sentinels_ignored(value: str) -> None:
    record = normalize_row({"Title": "t", "Priority": value})
    assert record is not None
    assert record.labels is None


@pytest.mark.parametrize("value", ["undefined", "null", "   "])
def test_milestone_sentinels_are_absent(value: str) -> None:
    record = normalize_row({"Title": "t", "Sprint": value})
    assert record is not None
    assert record.milestone is None


def test_due_date_appended_to_body() -> None:
    record = normalize_row({"Title": "t", "Description": "Body", "Due Date": "2024-03-15"})
    assert record is not None
    assert record.body == "Body\n\n**Due Date:** 3/15/2024"


def test_due_date_without_body() -> None:
    record = normalize_row({"Title": "t", "deadline": "03/05/2025"})
    assert record is not None
    assert record.body == "**Due Date:** 3/5/2025"


def test_unparseable_due_date_is_ignored() -> None:
    record = normalize_row({"Title": "t", "Due Date": "someday"})
    assert record is not None
    assert record.body is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-15", date(2024, 3, 15)),
        ("2024-03-15T10:30:00Z", date(2024, 3, 15)),
        ("March 15, 2024", date(2024, 3, 15)),
        ("15 Mar 2024", date(2024, 3, 15)),
        ("undefined", None),
        ("", None),
        ("31/31/2024", None),
    ],
)
def test_parse_due_date(raw: str, expected: date | None) -> None:
    assert parse_due_date(raw) == expected


def test_format_due_date_has_no_zero_padding() -> None:
    assert format_due_date(date(2024, 1, 2)) == "1/2/2024"


def test_blank_title_raises_with_row_number() -> None:
    rows = [{"Title": "ok"}, {"Title": "   ", "Description": "x"}]
    with pytest.raises(MissingTitleError) as excinfo:
        normalize_rows(rows)
    assert excinfo.value.row == 2
    assert "Row 2" in str(excinfo.value)


def test_rows_without_title_are_dropped() -> None:
    rows = [{"Title": "a"}, {"Description": "no title"}, {}, {"name": "b"}]
    records = normalize_rows(rows)
    assert [r.title for r in records] == ["a", "b"]


def test_formula_cells_are_neutralised_with_warning() -> None:
    sink = CollectingSink()
    record = normalize_row({"Title": "=HYPERLINK(\"x\")", "Body": "@cmd"}, sink=sink)
    assert record is not None
    assert record.title.startswith("'=")
    assert record.body == "'@cmd"
    expected_warnings = 2
    assert len(sink.messages) == expected_warnings
    assert "HYPERLINK" not in sink.messages[0]


def test_normalize_does_not_mutate_row() -> None:
    row = {"Title": " t ", "Priority": "High"}
    snapshot = dict(row)
    normalize_row(row)
    assert row == snapshot
