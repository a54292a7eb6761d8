"""Unit tests for the aggregation logic."""

from __future__ import annotations

import math

import pytest

from models.records import ChartValuePoint, MetricPoint
from services.aggregator import (
    ONE_DAY_MS,
    ONE_HOUR_MS,
    ONE_MONTH_MS,
    Aggregator,
    summarize_window,
)
from services.buckets import BucketLimits
from services.normalizer import build_metric_points, parse_epoch_ms


def _point(timestamp: str, value: float) -> MetricPoint:
    """Helper to build deterministic metric points."""

    epoch_ms = parse_epoch_ms(timestamp)
    assert epoch_ms is not None
    return MetricPoint(timestamp=timestamp, epoch_ms=epoch_ms, value=value)


def _at(epoch_ms: int, value: float) -> MetricPoint:
    return MetricPoint(timestamp=str(epoch_ms), epoch_ms=epoch_ms, value=value)


def test_aggregate_empty_sequence_returns_default_summary() -> None:
    aggregator = Aggregator()

    summary = aggregator.aggregate([])

    assert summary.sample_count == 0
    assert summary.latest_value is None
    assert summary.latest_timestamp is None
    assert summary.min is None
    assert summary.max is None
    assert summary.average is None
    assert summary.sum is None
    assert summary.last_hour_average is None
    assert summary.last_day_total is None
    assert summary.last_month_average is None
    assert summary.hourly_buckets == []
    assert summary.daily_buckets == []
    assert summary.monthly_buckets == []


def test_aggregate_end_to_end_drops_missing_reading() -> None:
    raw = [
        ChartValuePoint(timestamp="2024-01-01T00:00:00Z", value=10),
        ChartValuePoint(timestamp="2024-01-01T01:00:00Z", value=20),
        ChartValuePoint(timestamp="2024-01-01T02:00:00Z", value=None),
    ]

    summary = Aggregator().aggregate(build_metric_points(raw))

    assert summary.min == 10
    assert summary.max == 20
    assert summary.average == 15
    assert summary.sum == 30
    assert summary.sample_count == 2
    assert summary.latest_value == 20
    assert summary.latest_timestamp == "2024-01-01T01:00:00Z"
    assert summary.last_hour_average == 15
    assert summary.last_hour_total == 30


def test_trailing_windows_are_measured_from_latest_point() -> None:
    reference = parse_epoch_ms("2024-03-01T12:00:00Z")
    assert reference is not None
    points = [
        _at(reference - 40 * ONE_DAY_MS, 1.0),
        _at(reference - 10 * ONE_DAY_MS, 2.0),
        _at(reference - 5 * ONE_HOUR_MS, 4.0),
        _at(reference - 30 * 60 * 1000, 8.0),
        _at(reference, 16.0),
    ]

    summary = Aggregator().aggregate(points)

    assert summary.last_hour_total == 24.0
    assert summary.last_hour_average == 12.0
    assert summary.last_day_total == 28.0
    assert summary.last_day_average == pytest.approx(28.0 / 3)
    assert summary.last_month_total == 30.0
    assert summary.last_month_average == 7.5
    assert summary.sum == 31.0


def test_window_cutoff_is_inclusive() -> None:
    reference = 10 * ONE_MONTH_MS
    points = [_at(reference - ONE_HOUR_MS, 3.0), _at(reference, 5.0)]

    window = summarize_window(points, reference - ONE_HOUR_MS)

    assert window.total == 8.0
    assert window.average == 4.0


def test_empty_window_is_null() -> None:
    window = summarize_window([_at(0, 1.0)], cutoff_ms=1)

    assert window.average is None
    assert window.total is None


@pytest.mark.parametrize(
    "values",
    [
        [0.1, 0.2, 0.3],
        [3.912, 3.91, 3.905, 3.9],
        [-5.0, 12.5, 1e6, 0.0],
        [42.0],
    ],
)
def test_sum_matches_average_times_count(values) -> None:
    points = [_at(index * ONE_HOUR_MS, value) for index, value in enumerate(values)]

    summary = Aggregator().aggregate(points)

    assert summary.sample_count == len(values)
    assert math.isclose(summary.sum, summary.average * summary.sample_count, rel_tol=1e-9, abs_tol=1e-9)


def test_window_totals_never_exceed_series_total_for_non_negative_values() -> None:
    points = [_at(index * 7 * ONE_HOUR_MS, float(index % 5)) for index in range(200)]

    summary = Aggregator().aggregate(points)

    for total in (summary.last_hour_total, summary.last_day_total, summary.last_month_total):
        assert total is not None
        assert total <= summary.sum


def test_aggregate_does_not_mutate_input() -> None:
    points = [
        _point("2024-01-01T00:00:00Z", 1.0),
        _point("2024-01-01T05:00:00Z", 2.0),
    ]
    snapshot = list(points)

    Aggregator().aggregate(points)

    assert points == snapshot


def test_bucket_limits_are_configurable() -> None:
    points = [_at(index * ONE_HOUR_MS, 1.0) for index in range(30)]

    summary = Aggregator(BucketLimits(hourly=3, daily=1, monthly=1)).aggregate(points)

    assert len(summary.hourly_buckets) == 3
    assert len(summary.daily_buckets) == 1
    assert summary.daily_buckets[0].start_iso == "1970-01-02T00:00:00.000Z"
    assert summary.daily_buckets[0].count == 6
    assert len(summary.monthly_buckets) == 1
    assert summary.monthly_buckets[0].count == 30
