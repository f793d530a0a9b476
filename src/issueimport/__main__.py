"""Module entrypoint so ``python -m issueimport`` invokes the CLI."""

from __future__ import annotations

from .cli import main


def run() -> int:  # pragma: no cover - thin wrapper
    return main(None)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(run())
