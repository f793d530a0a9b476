from __future__ import annotations

import pytest

from issueimport.extractor import FIELD_ALIASES, build_key_index, extract_fields, lookup


def test_lookup_is_case_insensitive_and_ordered() -> None:
    index = build_key_index({"DESCRIPTION": "desc", "Body": "body text", "TITLE": "T"})
    assert lookup(index, "title") == "T"
    # description precedes body in the alias list
    assert lookup(index, "body") == "desc"


def test_friendly_multi_word_aliases() -> None:
    row = {"Title": "x", "Project Milestone": "Sprint 4", "Due Date": "2024-05-01"}
    fields = extract_fields(row)
    assert fields is not None
    assert fields.milestone == "Sprint 4"
    assert fields.due_date == "2024-05-01"


def test_first_non_empty_alias_wins() -> None:
    row = {"Title": "x", "Labels": "", "Tags": "bug"}
    fields = extract_fields(row)
    assert fields is not None
    assert fields.labels == "bug"


def test_columns_colliding_by_case_keep_row_order() -> None:
    row = {"Title": "Upper", "title": "lower"}
    assert extract_fields(row).title == "Upper"  # type: ignore[union-attr]


def test_name_column_stands_in_for_title() -> None:
    fields = extract_fields({"Name": "From name", "Status": "Open"})
    assert fields is not None
    assert fields.title == "From name"
    assert fields.status == "Open"


@pytest.mark.parametrize("row", [{}, {"Title": ""}, {"Description": "only body"}, {"title": None}])
def test_rows_without_title_are_skipped(row: dict[str, str | None]) -> None:
    assert extract_fields(row) is None


def test_whitespace_title_is_not_a_skip() -> None:
    fields = extract_fields({"Title": "   "})
    assert fields is not None
    assert fields.title == "   "


def test_extraction_does_not_mutate_row() -> None:
    row = {"Title": " A ", "Labels": "x;y"}
    snapshot = dict(row)
    extract_fields(row)
    assert row == snapshot


def test_bom_and_padding_in_headers_are_ignored() -> None:
    index = build_key_index({"\ufeffTitle": "t", "  Due   Date ": "2024-01-02"})
    assert lookup(index, "title") == "t"
    assert lookup(index, "due_date") == "2024-01-02"


def test_unknown_field_raises() -> None:
    with pytest.raises(KeyError):
        lookup({}, "reporter")


def test_every_field_has_aliases() -> None:
    assert set(FIELD_ALIASES) == {
        "title",
        "body",
        "labels",
        "assignees",
        "milestone",
        "priority",
        "status",
        "due_date",
    }
    assert all(FIELD_ALIASES.values())
