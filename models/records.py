"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class Point:
    """A single timestamped observation in a series."""

    timestamp: int
    value: float


@dataclass(frozen=True, slots=True)
class Window:
    """Statistics for one fixed-width time bucket.

    ``average`` is ``None`` when no points fell inside the bucket.
    """

    start: int
    average: Optional[float]
    count: int

    def end(self, step_ms: int) -> int:
        return self.start + step_ms - 1

    @property
    def is_empty(self) -> bool:
        return self.count == 0
