"""Sequential batch submission with pacing and partial-failure tolerance.

Records go out one at a time, in input order. Repository metadata is
fetched once per batch and only used to turn milestone titles into numbers.
Credential, permission and missing-repository errors abort the batch;
anything else becomes a failed outcome for that record and the loop moves on.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Protocol

from .diagnostics import NULL_SINK, DiagnosticsSink
from .errors import classify_submission_error, fatal_error_for, redact
from .logging import get_logger
from .models import CreatedIssue, IssueRecord, RemoteMetadata, SubmissionOutcome

DEFAULT_DELAY_SECONDS = 0.1


class IssueTracker(Protocol):
    def fetch_metadata(self) -> RemoteMetadata: ...  # pragma: no cover - structural only

    def create_issue(
        self,
        *,
        title: str,
        body: str,
        labels: Sequence[str] | None = None,
        assignees: Sequence[str] | None = None,
        milestone: int | None = None,
    ) -> CreatedIssue: ...  # pragma: no cover - structural only


class SubmitterState(str, Enum):
    IDLE = "idle"
    METADATA_FETCHING = "metadata_fetching"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    ABORTED = "aborted"


class Throttle:
    """Fixed pause between consecutive requests."""

    def __init__(
        self, interval: float = DEFAULT_DELAY_SECONDS, sleep: Callable[[float], None] = time.sleep
    ) -> None:
        self.interval = max(0.0, float(interval))
        self._sleep = sleep

    def wait(self) -> None:
        if self.interval > 0:
            self._sleep(self.interval)


class BatchSubmitter:
    def __init__(
        self,
        tracker: IssueTracker,
        *,
        sink: DiagnosticsSink = NULL_SINK,
        throttle: Throttle | None = None,
        verbose: bool = False,
    ) -> None:
        self.tracker = tracker
        self.sink = sink
        self.throttle = throttle or Throttle()
        self.verbose = verbose
        self.state = SubmitterState.IDLE
        self.position: int | None = None
        self.logger = get_logger()

    def _fetch_metadata(self) -> RemoteMetadata:
        self.state = SubmitterState.METADATA_FETCHING
        try:
            return self.tracker.fetch_metadata()
        except Exception as exc:
            self.sink.warn(
                "Warning: Could not fetch repository metadata for validation "
                f"({redact(str(exc))})"
            )
            return RemoteMetadata.empty()

    def _resolve_milestone(self, record: IssueRecord, metadata: RemoteMetadata) -> int | None:
        if not record.milestone:
            return None
        number = metadata.resolve_milestone(record.milestone)
        if number is None and self.verbose:
            self.sink.warn(f'Warning: Milestone "{record.milestone}" not found in repository')
        return number

    def submit(self, records: Sequence[IssueRecord]) -> list[SubmissionOutcome]:
        """Submit ``records`` and return one outcome per record, in order.

        Raises a ``SubmissionAbortedError`` subclass on 401/403/404.
        """
        metadata = self._fetch_metadata()
        outcomes: list[SubmissionOutcome] = []
        total = len(records)
        for index, record in enumerate(records):
            self.state = SubmitterState.SUBMITTING
            self.position = index
            progress = f"({index + 1}/{total})"
            milestone = self._resolve_milestone(record, metadata)
            payload = record.to_payload(milestone)
            try:
                created = self.tracker.create_issue(
                    title=payload["title"],
                    body=payload["body"],
                    labels=payload.get("labels"),
                    assignees=payload.get("assignees"),
                    milestone=payload.get("milestone"),
                )
            except Exception as exc:
                info = classify_submission_error(exc)
                if info.fatal:
                    self.state = SubmitterState.ABORTED
                    self.logger.log_error(
                        f"issue create aborted {progress}",
                        error=info.message,
                        title=record.title,
                        category=info.category,
                    )
                    raise fatal_error_for(
                        info, row=index + 1, title=record.title, outcomes=outcomes
                    ) from exc
                self.logger.warning(
                    f"issue create failed {progress}",
                    title=record.title,
                    category=info.category,
                    error=info.message,
                )
                outcomes.append(SubmissionOutcome.failed(record.title, info.message))
            else:
                outcomes.append(SubmissionOutcome.created(created))
                self.logger.log_issue_action("create", record.title, issue_number=created.number)
                if self.verbose:
                    self.logger.debug(f"  URL: {created.url}", title=record.title)
            if index < total - 1:
                self.throttle.wait()
        self.state = SubmitterState.COMPLETED
        return outcomes


def submit_issues(
    tracker: IssueTracker,
    records: Sequence[IssueRecord],
    *,
    sink: DiagnosticsSink = NULL_SINK,
    delay: float = DEFAULT_DELAY_SECONDS,
    verbose: bool = False,
) -> list[SubmissionOutcome]:
    return BatchSubmitter(
        tracker, sink=sink, throttle=Throttle(delay), verbose=verbose
    ).submit(records)


__all__ = [
    "BatchSubmitter",
    "DEFAULT_DELAY_SECONDS",
    "IssueTracker",
    "SubmitterState",
    "Throttle",
    "submit_issues",
]
