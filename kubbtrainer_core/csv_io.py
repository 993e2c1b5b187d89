from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from .history import INKAST_ROUND_COLUMNS, PRACTICE_COLUMNS, inkast_round_rows, practice_history_rows
from .inkast_blast import InkastBlastSession
from .practice import PracticeSession


def _cell(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def export_rows_to_csv(path: str | Path, rows: list[dict[str, Any]], fieldnames: list[str] | None = None) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if fieldnames is None:
        fieldnames = list(rows[0].keys()) if rows else []

    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow({k: _cell(v) for k, v in row.items()})


def import_rows_from_csv(path: str | Path) -> list[dict[str, str]]:
    in_path = Path(path)
    with in_path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        return [dict(row) for row in reader]


def export_practice_history(path: str | Path, sessions: Sequence[PracticeSession]) -> int:
    rows = practice_history_rows(sessions)
    export_rows_to_csv(path, rows, fieldnames=PRACTICE_COLUMNS)
    return len(rows)


def export_inkast_rounds(path: str | Path, sessions: Sequence[InkastBlastSession]) -> int:
    rows = inkast_round_rows(sessions)
    export_rows_to_csv(path, rows, fieldnames=INKAST_ROUND_COLUMNS)
    return len(rows)
