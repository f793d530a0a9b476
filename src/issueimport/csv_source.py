from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path

from .errors import SourceError


def iter_csv_rows(path: str | Path) -> Iterator[dict[str, str | None]]:
    """Yield one mapping per CSV data row; read failures raise ``SourceError``."""
    p = Path(path)
    try:
        with p.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            for row in reader:
                yield {key: value for key, value in row.items() if key is not None}
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise SourceError(f"Error reading CSV file: {exc}") from exc


__all__ = ["iter_csv_rows"]
