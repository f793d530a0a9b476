"""Pytest configuration for issueimport tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep real credentials and endpoint overrides out of every test
    for name in (
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "GITHUB_PAT",
        "ISSUEIMPORT_GITHUB_API",
        "ISSUEIMPORT_DELAY",
        "ISSUEIMPORT_RETRY_MAX_SLEEP",
        "ISSUEIMPORT_JSON_LOGS",
        "NO_COLOR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _fresh_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    # Handlers bind sys.stderr at creation; rebuild per test so capture works
    from issueimport import logging as ii_logging

    monkeypatch.setattr(ii_logging, "_GLOBAL", None)
