"""Fixed-width window aggregation and downsampling over stored series."""

from __future__ import annotations

import logging
from typing import List

from datastore.series_store import SeriesStore
from models.records import Point, Window

logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    """Raised when a caller passes arguments no aggregation can honour."""


def window_count(from_ts: int, to_ts: int, step_ms: int) -> int:
    """Number of windows needed to tile ``[from_ts, to_ts]`` with width ``step_ms``."""
    if from_ts > to_ts:
        return 0
    return -(-(to_ts - from_ts + 1) // step_ms)


def _validate_step(name: str, step_ms: int) -> None:
    if isinstance(step_ms, bool) or not isinstance(step_ms, int):
        logger.warning(
            "Rejected non-integer step",
            extra={"series": name, "step_ms": step_ms},
        )
        raise InvalidArgumentError(
            f"step_ms must be an integer number of milliseconds, got {step_ms!r}."
        )
    if step_ms <= 0:
        logger.warning(
            "Rejected non-positive step",
            extra={"series": name, "step_ms": step_ms},
        )
        raise InvalidArgumentError(f"step_ms must be positive, got {step_ms}.")


class Aggregator:
    """Read-only windowing component bound to a series store."""

    def __init__(self, store: SeriesStore) -> None:
        self.store = store

    def aggregate(self, name: str, from_ts: int, to_ts: int, step_ms: int) -> List[Window]:
        """Compute one window per ``step_ms`` slice of ``[from_ts, to_ts]``.

        Windows start exactly at ``from_ts`` and are returned in ascending
        order. The last window may extend past ``to_ts``; only points inside
        the queried range are counted. Empty windows carry ``average=None``.
        """
        _validate_step(name, step_ms)

        points = self.store.query_range(name, from_ts, to_ts)
        total_windows = window_count(from_ts, to_ts, step_ms)
        windows: List[Window] = []

        index = 0
        start = from_ts
        for _ in range(total_windows):
            end = start + step_ms - 1
            count = 0
            total = 0.0
            while index < len(points) and points[index].timestamp <= end:
                total += points[index].value
                count += 1
                index += 1

            if count:
                windows.append(Window(start=start, average=total / count, count=count))
            else:
                windows.append(Window(start=start, average=None, count=0))
            start += step_ms

        logger.debug(
            "Aggregated series",
            extra={
                "series": name,
                "from_ts": from_ts,
                "to_ts": to_ts,
                "step_ms": step_ms,
                "window_count": len(windows),
                "point_count": len(points),
            },
        )
        return windows

    def downsample(self, name: str, from_ts: int, to_ts: int, step_ms: int) -> List[Point]:
        """Collapse each window into a point, using 0 for windows without data."""
        return [
            Point(
                timestamp=window.start,
                value=window.average if window.average is not None else 0.0,
            )
            for window in self.aggregate(name, from_ts, to_ts, step_ms)
        ]
