"""Pydantic schemas for JSON output of aggregation results."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from models.records import Point, Window


class PointModel(BaseModel):
    ts: int
    value: float

    @classmethod
    def from_point(cls, point: Point) -> "PointModel":
        return cls(ts=point.timestamp, value=point.value)


class WindowModel(BaseModel):
    """One aggregation window; ``average`` is null when the window is empty."""

    start: int
    end: int
    average: Optional[float] = None
    count: int = Field(..., ge=0)

    @classmethod
    def from_window(cls, window: Window, step_ms: int) -> "WindowModel":
        return cls(
            start=window.start,
            end=window.end(step_ms),
            average=window.average,
            count=window.count,
        )


class _ReportBase(BaseModel):
    series: str
    from_ts: int
    to_ts: int
    step_ms: int = Field(..., gt=0)


class AggregateReport(_ReportBase):
    """Windows produced for a series over a queried range."""

    windows: List[WindowModel] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        series: str,
        from_ts: int,
        to_ts: int,
        step_ms: int,
        windows: Sequence[Window],
    ) -> "AggregateReport":
        return cls(
            series=series,
            from_ts=from_ts,
            to_ts=to_ts,
            step_ms=step_ms,
            windows=[WindowModel.from_window(window, step_ms) for window in windows],
        )


class DownsampleReport(_ReportBase):
    """Downsampled points, one per window, with empty windows reported as 0."""

    points: List[PointModel] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        series: str,
        from_ts: int,
        to_ts: int,
        step_ms: int,
        points: Sequence[Point],
    ) -> "DownsampleReport":
        return cls(
            series=series,
            from_ts=from_ts,
            to_ts=to_ts,
            step_ms=step_ms,
            points=[PointModel.from_point(point) for point in points],
        )
