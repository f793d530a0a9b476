"""issueimport - bulk-create GitHub issues from loosely structured CSV files.

High-level public API:

from issueimport import prepare_records, BatchSubmitter, GitHubRestClient

records = prepare_records(rows, sink=CollectingSink())
client = GitHubRestClient(token=token, repo="owner/repo")
outcomes = BatchSubmitter(client).submit(records)

The CLI (``issueimport upload``) delegates to this library.
"""

from __future__ import annotations

from .config import ImportConfig, load_config
from .diagnostics import CollectingSink, LoggerSink, NullSink
from .errors import (
    AuthenticationError,
    AuthorizationError,
    MissingTitleError,
    NoRecordsError,
    SubmissionAbortedError,
    TargetNotFoundError,
    ValidationError,
)
from .github_rest import GitHubAPIError, GitHubRestClient
from .models import IssueRecord, RemoteMetadata, SubmissionOutcome
from .normalizer import normalize_row, normalize_rows
from .orchestrator import prepare_records, run_upload
from .submitter import BatchSubmitter, Throttle, submit_issues
from .validator import validate_records

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "BatchSubmitter",
    "CollectingSink",
    "GitHubAPIError",
    "GitHubRestClient",
    "ImportConfig",
    "IssueRecord",
    "LoggerSink",
    "MissingTitleError",
    "NoRecordsError",
    "NullSink",
    "RemoteMetadata",
    "SubmissionAbortedError",
    "SubmissionOutcome",
    "TargetNotFoundError",
    "Throttle",
    "ValidationError",
    "load_config",
    "normalize_row",
    "normalize_rows",
    "prepare_records",
    "run_upload",
    "submit_issues",
    "validate_records",
    "__version__",
]
