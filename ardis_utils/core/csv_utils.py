from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Protocol, Dict


class Row(Protocol):
    def as_row(self) -> Dict[str, object]: ...


def write_records_csv(filepath: str | Path, records: Iterable[Row]) -> Path:
    """
    Writes one CSV row per record. The header comes from the first record's
    as_row() keys; an empty iterable produces an empty file.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = [r.as_row() for r in records]

    with path.open("w", newline="", encoding="utf-8") as f:
        if not rows:
            return path
        w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        w.writeheader()
        for row in rows:
            w.writerow(row)

    return path
