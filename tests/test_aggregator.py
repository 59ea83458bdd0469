"""Unit tests for the windowing logic."""

from __future__ import annotations

import math

import pytest

from datastore.series_store import SeriesStore
from models.records import Point, Window
from services.aggregator import Aggregator, InvalidArgumentError, window_count


@pytest.fixture()
def store() -> SeriesStore:
    return SeriesStore()


@pytest.fixture()
def aggregator(store: SeriesStore) -> Aggregator:
    return Aggregator(store)


def _seed(store: SeriesStore, name: str, points: list[tuple[int, float]]) -> None:
    for timestamp, value in points:
        store.insert(name, timestamp, value)


def test_aggregate_excludes_points_past_range_end(store, aggregator) -> None:
    _seed(store, "x", [(0, 10.0), (500, 20.0), (1000, 30.0)])

    windows = aggregator.aggregate("x", 0, 999, 500)

    assert windows == [
        Window(start=0, average=10.0, count=1),
        Window(start=500, average=20.0, count=1),
    ]


def test_aggregate_unknown_series_yields_empty_windows(aggregator) -> None:
    windows = aggregator.aggregate("y", 0, 999, 500)

    assert windows == [
        Window(start=0, average=None, count=0),
        Window(start=500, average=None, count=0),
    ]
    assert all(window.is_empty for window in windows)


def test_downsample_substitutes_zero_for_empty_windows(aggregator) -> None:
    points = aggregator.downsample("y", 0, 999, 500)

    assert points == [Point(timestamp=0, value=0.0), Point(timestamp=500, value=0.0)]


def test_aggregate_computes_mean_per_window(store, aggregator) -> None:
    _seed(store, "x", [(5, 1.0), (1, 3.0), (12, 10.0), (30, 4.0), (31, 6.0)])

    windows = aggregator.aggregate("x", 0, 39, 10)

    assert windows == [
        Window(start=0, average=2.0, count=2),
        Window(start=10, average=10.0, count=1),
        Window(start=20, average=None, count=0),
        Window(start=30, average=5.0, count=2),
    ]


def test_average_of_zero_is_distinct_from_empty(store, aggregator) -> None:
    _seed(store, "x", [(0, -1.0), (1, 1.0)])

    measured, empty = aggregator.aggregate("x", 0, 19, 10)

    assert measured.average == 0.0
    assert measured.count == 2
    assert empty.average is None


def test_last_window_may_extend_past_range(store, aggregator) -> None:
    _seed(store, "x", [(9, 1.0), (10, 100.0), (12, 100.0)])

    windows = aggregator.aggregate("x", 0, 10, 4)

    assert [window.start for window in windows] == [0, 4, 8]
    assert windows[-1].end(4) == 11
    # 12 lies inside the last window's span but outside the queried range.
    assert windows[-1] == Window(start=8, average=50.5, count=2)


def test_windows_start_at_range_start_not_aligned_to_epoch(store, aggregator) -> None:
    _seed(store, "x", [(7, 1.0), (16, 2.0)])

    windows = aggregator.aggregate("x", 7, 16, 5)

    assert windows == [
        Window(start=7, average=1.0, count=1),
        Window(start=12, average=2.0, count=1),
    ]


def test_negative_timestamps_are_windowed(store, aggregator) -> None:
    _seed(store, "x", [(-10, 2.0), (-6, 4.0), (-1, 8.0)])

    windows = aggregator.aggregate("x", -10, -1, 5)

    assert windows == [
        Window(start=-10, average=3.0, count=2),
        Window(start=-5, average=8.0, count=1),
    ]


def test_inverted_range_yields_no_windows(store, aggregator) -> None:
    _seed(store, "x", [(0, 1.0)])

    assert aggregator.aggregate("x", 10, 0, 5) == []
    assert aggregator.downsample("x", 10, 0, 5) == []


@pytest.mark.parametrize("step_ms", [0, -1, -500])
def test_non_positive_step_is_rejected(aggregator, step_ms: int) -> None:
    with pytest.raises(InvalidArgumentError, match="positive"):
        aggregator.aggregate("x", 0, 999, step_ms)
    with pytest.raises(InvalidArgumentError):
        aggregator.downsample("x", 0, 999, step_ms)


@pytest.mark.parametrize("step_ms", [1.5, "10", True])
def test_non_integer_step_is_rejected(aggregator, step_ms) -> None:
    with pytest.raises(InvalidArgumentError, match="integer"):
        aggregator.aggregate("x", 0, 999, step_ms)


def test_invalid_argument_is_a_value_error() -> None:
    assert issubclass(InvalidArgumentError, ValueError)


@pytest.mark.parametrize(
    ("from_ts", "to_ts", "step_ms"),
    [(0, 0, 1), (0, 999, 500), (0, 1000, 500), (-7, 13, 3), (5, 5, 100), (0, 99, 1)],
)
def test_window_count_matches_ceiling(aggregator, from_ts, to_ts, step_ms) -> None:
    expected = math.ceil((to_ts - from_ts + 1) / step_ms)

    assert window_count(from_ts, to_ts, step_ms) == expected
    assert len(aggregator.aggregate("x", from_ts, to_ts, step_ms)) == expected


def test_counts_cover_every_point_in_range(store, aggregator) -> None:
    timestamps = [3, 3, 17, 250, 251, 499, 500, 999, 1000, -1]
    _seed(store, "x", [(ts, float(i)) for i, ts in enumerate(timestamps)])

    windows = aggregator.aggregate("x", 0, 999, 7)
    in_range = store.query_range("x", 0, 999)

    assert sum(window.count for window in windows) == len(in_range)
    for window in windows:
        expected = [p for p in in_range if window.start <= p.timestamp <= window.end(7)]
        assert window.count == len(expected)


def test_aggregate_is_idempotent(store, aggregator) -> None:
    _seed(store, "x", [(1, 1.0), (2, 2.0), (40, 3.0)])

    assert aggregator.aggregate("x", 0, 99, 10) == aggregator.aggregate("x", 0, 99, 10)


def test_aggregate_does_not_mutate_store(store, aggregator) -> None:
    _seed(store, "x", [(40, 3.0), (1, 1.0)])

    aggregator.aggregate("x", 0, 99, 10)

    assert [point.timestamp for point in store.points("x")] == [40, 1]


def test_downsample_matches_aggregate_window_for_window(store, aggregator) -> None:
    _seed(store, "x", [(0, 1.0), (1, 2.0), (25, 7.5)])

    windows = aggregator.aggregate("x", 0, 29, 10)
    points = aggregator.downsample("x", 0, 29, 10)

    assert len(points) == len(windows)
    for window, point in zip(windows, points):
        assert point.timestamp == window.start
        if window.count == 0:
            assert point.value == 0
        else:
            assert point.value == window.average


def test_duplicate_timestamps_all_count(store, aggregator) -> None:
    _seed(store, "x", [(5, 1.0), (5, 2.0), (5, 6.0)])

    (window,) = aggregator.aggregate("x", 0, 9, 10)

    assert window == Window(start=0, average=3.0, count=3)
