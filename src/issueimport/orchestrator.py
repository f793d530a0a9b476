"""High-level pipeline: CSV rows -> records -> validation -> submission.

``run_upload`` is what the CLI calls. It keeps the stages linear, writes an
optional JSON summary, and lets fatal errors propagate after recording
them in that summary.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypedDict

from .config import ImportConfig
from .csv_source import iter_csv_rows
from .diagnostics import CollectingSink, DiagnosticsSink
from .errors import SourceError, SubmissionAbortedError
from .extractor import RawRow
from .logging import get_logger
from .models import IssueRecord, SubmissionOutcome
from .normalizer import normalize_rows
from .security import MAX_FILE_BYTES, validate_safe_file_path
from .submitter import BatchSubmitter, IssueTracker, Throttle
from .validator import validate_records


class Totals(TypedDict):
    parsed: int
    created: int
    failed: int


class UploadSummary(TypedDict, total=False):
    generated_at: str
    repo: str | None
    dry_run: bool
    totals: Totals
    outcomes: list[dict[str, Any]]
    warnings: list[str]
    aborted: dict[str, Any]
    cancelled: bool


class UploadResult:
    def __init__(
        self,
        records: list[IssueRecord],
        outcomes: list[SubmissionOutcome],
        summary: UploadSummary,
    ) -> None:
        self.records = records
        self.outcomes = outcomes
        self.summary = summary

    @property
    def failed(self) -> list[SubmissionOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def created(self) -> list[SubmissionOutcome]:
        return [o for o in self.outcomes if o.success]


def prepare_records(rows: Iterable[RawRow], *, sink: DiagnosticsSink) -> list[IssueRecord]:
    """Normalize and validate; raises before any network activity."""
    return validate_records(normalize_rows(rows, sink=sink), sink=sink)


def load_records(
    csv_path: str | Path, *, sink: DiagnosticsSink, max_bytes: int | None = None
) -> list[IssueRecord]:
    check = validate_safe_file_path(csv_path, max_bytes=max_bytes or MAX_FILE_BYTES)
    if not check.safe:
        raise SourceError(f"Security validation failed: {check.reason}")
    logger = get_logger()
    with logger.timed_operation("parse_csv", path=str(csv_path)):
        records = prepare_records(iter_csv_rows(csv_path), sink=sink)
    logger.log_operation("records_validated", record_count=len(records))
    return records


def _build_summary(
    *,
    repo: str | None,
    dry_run: bool,
    records: list[IssueRecord],
    outcomes: list[SubmissionOutcome],
    warnings: list[str],
) -> UploadSummary:
    created = sum(1 for o in outcomes if o.success)
    return UploadSummary(
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        repo=repo,
        dry_run=dry_run,
        totals=Totals(parsed=len(records), created=created, failed=len(outcomes) - created),
        outcomes=[o.to_dict() for o in outcomes],
        warnings=list(warnings),
    )


def write_summary(summary: UploadSummary, path: str | Path) -> Path:
    sp = Path(path)
    sp.parent.mkdir(parents=True, exist_ok=True)
    sp.write_text(json.dumps(summary, indent=2) + "\n", encoding="utf-8")
    return sp


def run_upload(
    cfg: ImportConfig,
    csv_path: str | Path,
    tracker: IssueTracker | None,
    *,
    repo: str | None = None,
    dry_run: bool = False,
    verbose: bool | None = None,
    sink: DiagnosticsSink | None = None,
    throttle: Throttle | None = None,
    summary_path: str | Path | None = None,
    confirm: Callable[[list[IssueRecord]], bool] | None = None,
    records: list[IssueRecord] | None = None,
) -> UploadResult:
    """Run the pipeline for ``csv_path``.

    Pass ``records`` already returned by ``load_records`` to skip re-reading
    the file.
    """
    collecting = sink if sink is not None else CollectingSink()
    warnings: list[str] = getattr(collecting, "messages", [])
    verbose = cfg.verbose if verbose is None else verbose
    target = summary_path or cfg.summary_json
    if records is None:
        records = load_records(
            csv_path, sink=collecting, max_bytes=cfg.max_file_mb * 1024 * 1024
        )

    if dry_run:
        summary = _build_summary(
            repo=repo, dry_run=True, records=records, outcomes=[], warnings=warnings
        )
        if target:
            write_summary(summary, target)
        return UploadResult(records, [], summary)

    if confirm is not None and not confirm(records):
        summary = _build_summary(
            repo=repo, dry_run=False, records=records, outcomes=[], warnings=warnings
        )
        summary["cancelled"] = True
        if target:
            write_summary(summary, target)
        return UploadResult(records, [], summary)

    if tracker is None:
        raise ValueError("A tracker is required unless dry_run is set")

    submitter = BatchSubmitter(
        tracker,
        sink=collecting,
        throttle=throttle or Throttle(cfg.delay_seconds),
        verbose=verbose,
    )
    try:
        with get_logger().timed_operation("submit_batch", record_count=len(records)):
            outcomes = submitter.submit(records)
    except SubmissionAbortedError as exc:
        if target:
            summary = _build_summary(
                repo=repo, dry_run=False, records=records, outcomes=exc.outcomes, warnings=warnings
            )
            summary["aborted"] = {
                "category": exc.category,
                "message": str(exc),
                "row": exc.row,
                "title": exc.title,
            }
            write_summary(summary, target)
        raise

    summary = _build_summary(
        repo=repo, dry_run=False, records=records, outcomes=outcomes, warnings=warnings
    )
    if target:
        write_summary(summary, target)
    return UploadResult(records, outcomes, summary)


__all__ = [
    "Totals",
    "UploadResult",
    "UploadSummary",
    "load_records",
    "prepare_records",
    "run_upload",
    "write_summary",
]
