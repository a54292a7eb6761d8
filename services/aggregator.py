"""Aggregation logic for metric points."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from models.records import MetricAggregates, MetricPoint, WindowSummary
from services.buckets import BucketGranularity, BucketLimits, build_buckets

ONE_HOUR_MS = 60 * 60 * 1000
ONE_DAY_MS = 24 * ONE_HOUR_MS
ONE_MONTH_MS = 30 * ONE_DAY_MS


def summarize_window(points: Iterable[MetricPoint], cutoff_ms: int) -> WindowSummary:
    """Mean and sum of the points at or after ``cutoff_ms``."""
    total = 0.0
    count = 0
    for point in points:
        if point.epoch_ms >= cutoff_ms:
            total += point.value
            count += 1
    if not count:
        return WindowSummary()
    return WindowSummary(average=total / count, total=total)


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation.

    Trailing windows are measured back from the newest point rather than the
    wall clock, so historical series aggregate reproducibly.
    """

    def __init__(self, limits: Optional[BucketLimits] = None) -> None:
        self.limits = limits or BucketLimits()

    def aggregate(self, points: Sequence[MetricPoint]) -> MetricAggregates:
        aggregates = MetricAggregates()
        if not points:
            return aggregates

        total = 0.0
        for point in points:
            value = point.value
            total += value
            if aggregates.min is None or value < aggregates.min:
                aggregates.min = value
            if aggregates.max is None or value > aggregates.max:
                aggregates.max = value

        latest = points[-1]
        aggregates.latest_value = latest.value
        aggregates.latest_timestamp = latest.timestamp
        aggregates.sample_count = len(points)
        aggregates.sum = total
        aggregates.average = total / len(points)

        reference_ms = latest.epoch_ms
        last_hour = summarize_window(points, reference_ms - ONE_HOUR_MS)
        last_day = summarize_window(points, reference_ms - ONE_DAY_MS)
        last_month = summarize_window(points, reference_ms - ONE_MONTH_MS)
        aggregates.last_hour_average = last_hour.average
        aggregates.last_hour_total = last_hour.total
        aggregates.last_day_average = last_day.average
        aggregates.last_day_total = last_day.total
        aggregates.last_month_average = last_month.average
        aggregates.last_month_total = last_month.total

        aggregates.hourly_buckets = build_buckets(
            points, BucketGranularity.hour, self.limits.hourly
        )
        aggregates.daily_buckets = build_buckets(
            points, BucketGranularity.day, self.limits.daily
        )
        aggregates.monthly_buckets = build_buckets(
            points, BucketGranularity.month, self.limits.monthly
        )
        return aggregates
