"""Terminal output helpers for the CLI - no external dependencies."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from .models import IssueRecord, SubmissionOutcome

PREVIEW_LIMIT = 5
BODY_PREVIEW_CHARS = 100


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"


def _supports_color(stream: TextIO | None = None) -> bool:
    stream = stream or sys.stdout
    if os.environ.get("NO_COLOR"):
        return False
    if not hasattr(stream, "isatty") or not stream.isatty():
        return False
    return os.environ.get("TERM") != "dumb"


def colorize(text: str, color: str, bold: bool = False, stream: TextIO | None = None) -> str:
    """Apply color to text if terminal supports it."""
    if not _supports_color(stream):
        return text
    prefix = (Colors.BOLD if bold else "") + color
    return f"{prefix}{text}{Colors.RESET}"


def print_success(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize("✓", Colors.GREEN, bold=True, stream=stream) + " " + message, file=stream)


def print_error(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("✗", Colors.RED, bold=True, stream=stream) + " " + message, file=stream)


def print_warning(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stderr
    print(colorize("⚠", Colors.YELLOW, bold=True, stream=stream) + " " + message, file=stream)


def print_header(message: str, stream: TextIO | None = None) -> None:
    stream = stream or sys.stdout
    print(colorize(message, Colors.CYAN, bold=True, stream=stream), file=stream)


def print_preview(
    records: Sequence[IssueRecord], repo: str | None, stream: TextIO | None = None
) -> None:
    """Show the first few issues a dry run would create."""
    stream = stream or sys.stdout
    target = repo or "(no repository selected)"
    print_header(f"\nPreview: {len(records)} issues for {target}\n", stream=stream)
    for index, record in enumerate(records[:PREVIEW_LIMIT], start=1):
        print(colorize(f"{index}. {record.title}", Colors.GREEN, stream=stream), file=stream)
        if record.body:
            snippet = record.body[:BODY_PREVIEW_CHARS]
            more = "..." if len(record.body) > BODY_PREVIEW_CHARS else ""
            print(colorize(f"   {snippet}{more}", Colors.DIM, stream=stream), file=stream)
        if record.labels:
            print(
                colorize(f"   Labels: {', '.join(record.labels)}", Colors.CYAN, stream=stream),
                file=stream,
            )
        if record.assignees:
            print(
                colorize(
                    f"   Assignees: {', '.join(record.assignees)}", Colors.MAGENTA, stream=stream
                ),
                file=stream,
            )
        print(file=stream)
    if len(records) > PREVIEW_LIMIT:
        remaining = len(records) - PREVIEW_LIMIT
        print(colorize(f"... and {remaining} more issues", Colors.DIM, stream=stream), file=stream)
    print(
        colorize("\nThis is a dry run. No issues were created.", Colors.YELLOW, stream=stream),
        file=stream,
    )


def print_results(
    outcomes: Sequence[SubmissionOutcome], repo: str | None, stream: TextIO | None = None
) -> None:
    """List created and failed issues after a batch."""
    stream = stream or sys.stdout
    created = [o for o in outcomes if o.success]
    failed = [o for o in outcomes if not o.success]
    print_success(f"Created {len(created)} of {len(outcomes)} issues", stream=stream)
    for outcome in created:
        print(colorize(f"  #{outcome.number}: {outcome.title}", Colors.GREEN, stream=stream), file=stream)
        print(colorize(f"  {outcome.url}", Colors.DIM, stream=stream), file=stream)
    if failed:
        print(colorize(f"\nFailed ({len(failed)}):", Colors.RED, bold=True, stream=stream), file=stream)
        for outcome in failed:
            print(f"  {outcome.title}: {outcome.reason}", file=stream)
    if repo:
        print(f"\nView all issues: https://github.com/{repo}/issues", file=stream)


__all__ = [
    "Colors",
    "colorize",
    "print_error",
    "print_header",
    "print_preview",
    "print_results",
    "print_success",
    "print_warning",
]
