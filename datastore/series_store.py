from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, List

from models.records import Point

logger = logging.getLogger(__name__)


class SeriesStore:
    """In-memory holder of append-only point sequences keyed by series name."""

    def __init__(self) -> None:
        self._series: Dict[str, List[Point]] = {}
        self._lock = Lock()

    def insert(self, name: str, timestamp: int, value: float) -> None:
        point = Point(timestamp=timestamp, value=float(value))
        with self._lock:
            points = self._series.get(name)
            if points is None:
                points = self._series[name] = []
                logger.debug("Created series", extra={"series": name})
            points.append(point)

    def query_range(self, name: str, from_ts: int, to_ts: int) -> list[Point]:
        """Return points with ``from_ts <= timestamp <= to_ts`` sorted by timestamp.

        Equal timestamps keep their insertion order. Unknown series yield an
        empty list.
        """

        with self._lock:
            points = self._series.get(name, ())
            selected = [point for point in points if from_ts <= point.timestamp <= to_ts]
        selected.sort(key=lambda point: point.timestamp)
        return selected

    def points(self, name: str) -> list[Point]:
        """Return all points of a series in insertion order."""

        with self._lock:
            return list(self._series.get(name, ()))

    def series_names(self) -> list[str]:
        with self._lock:
            return sorted(self._series)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._series

    def __len__(self) -> int:
        with self._lock:
            return len(self._series)
