"""Writers for run artifacts: JSON reports, JSONL event streams and CSV tables."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Sequence


def _prepare(path: str | Path) -> Path:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    return output


def write_json(path: str | Path, payload: dict[str, Any]) -> Path:
    output = _prepare(path)
    output.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return output


def write_jsonl(path: str | Path, rows: Sequence[dict[str, Any]]) -> Path:
    output = _prepare(path)
    with output.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False) + "\n")
    return output


def write_rows_csv(path: str | Path, rows: Sequence[dict[str, Any]]) -> Path:
    """Write ``rows`` with the union of their keys as header, in first-seen order."""
    output = _prepare(path)
    fieldnames: list[str] = []
    for row in rows:
        fieldnames.extend(key for key in row if key not in fieldnames)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return output


def write_timeline_csv(path: str | Path, timeline: Sequence[str]) -> Path:
    return write_rows_csv(path, [{"time": time, "task_id": slot} for time, slot in enumerate(timeline)])
