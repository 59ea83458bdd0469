"""CSV import and export for stored series."""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, TextIO

from datastore.series_store import SeriesStore
from models.records import Point

logger = logging.getLogger(__name__)

HEADER = ("ts", "value")


@dataclass(frozen=True, slots=True)
class RowError:
    """A CSV row that was skipped during import."""

    row_number: int
    reason: str


@dataclass
class ImportResult:
    inserted: int = 0
    errors: List[RowError] = field(default_factory=list)


def write_points(points: Iterable[Point], handle: TextIO) -> int:
    """Write ``ts,value`` rows in the order given and return the row count."""
    writer = csv.writer(handle, lineterminator="\n")
    writer.writerow(HEADER)
    rows = 0
    for point in points:
        writer.writerow((point.timestamp, point.value))
        rows += 1
    return rows


def export_points(points: Iterable[Point], path: Path) -> int:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        return write_points(points, handle)


def export_series(store: SeriesStore, name: str, path: Path) -> int:
    """Write a series to ``path`` in insertion order."""
    return export_points(store.points(name), path)


def import_points(store: SeriesStore, name: str, handle: TextIO) -> ImportResult:
    """Load ``ts,value`` rows into ``name``, collecting rows that fail to parse."""
    reader = csv.DictReader(handle)
    if not reader.fieldnames:
        raise ValueError("CSV file is missing a header row.")

    normalized = {column.lower().strip(): column for column in reader.fieldnames}
    missing = [column for column in HEADER if column not in normalized]
    if missing:
        raise ValueError(f"CSV missing required columns: {', '.join(missing)}")

    ts_col = normalized["ts"]
    value_col = normalized["value"]
    result = ImportResult()

    for row_number, row in enumerate(reader, start=2):
        ts_raw = (row.get(ts_col) or "").strip()
        value_raw = (row.get(value_col) or "").strip()

        if not ts_raw:
            _reject(result, name, row_number, "missing ts")
            continue
        try:
            timestamp = int(ts_raw)
        except ValueError:
            _reject(result, name, row_number, "invalid timestamp")
            continue

        if not value_raw:
            _reject(result, name, row_number, "missing value")
            continue
        try:
            value = float(value_raw)
        except ValueError:
            _reject(result, name, row_number, "invalid numeric value")
            continue
        if not math.isfinite(value):
            _reject(result, name, row_number, "invalid numeric value")
            continue

        store.insert(name, timestamp, value)
        result.inserted += 1

    return result


def _reject(result: ImportResult, name: str, row_number: int, reason: str) -> None:
    logger.warning(
        "Skipped CSV row",
        extra={"series": name, "row_number": row_number, "reason": reason},
    )
    result.errors.append(RowError(row_number=row_number, reason=reason))
