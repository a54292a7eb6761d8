"""Calendar-aligned bucketing of metric points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Tuple

from models.records import AggregateBucket, MetricPoint

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class BucketGranularity(str, Enum):
    hour = "hour"
    day = "day"
    month = "month"


@dataclass(frozen=True)
class BucketLimits:
    """How many of the most recent buckets to keep per granularity."""

    hourly: int = 12
    daily: int = 10
    monthly: int = 6


LabelFormatter = Callable[[datetime, BucketGranularity], str]


@dataclass
class _BucketAccumulator:
    start: datetime
    total: float = 0.0
    count: int = 0


def bucket_start(epoch_ms: int, granularity: BucketGranularity) -> datetime:
    """Truncate an instant to the start of its UTC hour, day or month."""
    moment = _EPOCH + timedelta(milliseconds=epoch_ms)
    if granularity is BucketGranularity.month:
        return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if granularity is BucketGranularity.day:
        return moment.replace(hour=0, minute=0, second=0, microsecond=0)
    return moment.replace(minute=0, second=0, microsecond=0)


def bucket_key(start: datetime, granularity: BucketGranularity) -> Tuple[int, ...]:
    if granularity is BucketGranularity.month:
        return (start.year, start.month)
    if granularity is BucketGranularity.day:
        return (start.year, start.month, start.day)
    return (start.year, start.month, start.day, start.hour)


def format_start_iso(start: datetime) -> str:
    return (
        f"{start.year:04d}-{start.month:02d}-{start.day:02d}"
        f"T{start.hour:02d}:{start.minute:02d}:{start.second:02d}.000Z"
    )


def format_bucket_label(start: datetime, granularity: BucketGranularity) -> str:
    month = _MONTH_ABBREVIATIONS[start.month - 1]
    if granularity is BucketGranularity.month:
        return f"{month} {start.year}"
    if granularity is BucketGranularity.day:
        return f"{month} {start.day}, {start.year}"
    return f"{month} {start.day}, {start.hour:02d}"


def build_buckets(
    points: Iterable[MetricPoint],
    granularity: BucketGranularity,
    limit: int,
    label_formatter: LabelFormatter = format_bucket_label,
) -> List[AggregateBucket]:
    """Group points into UTC calendar buckets, most recent bucket first.

    Only the newest ``limit`` buckets are returned.
    """
    if limit <= 0:
        return []

    accumulators: Dict[Tuple[int, ...], _BucketAccumulator] = {}
    for point in points:
        start = bucket_start(point.epoch_ms, granularity)
        key = bucket_key(start, granularity)
        accumulator = accumulators.get(key)
        if accumulator is None:
            accumulator = _BucketAccumulator(start=start)
            accumulators[key] = accumulator
        accumulator.total += point.value
        accumulator.count += 1

    ordered = sorted(accumulators.values(), key=lambda acc: acc.start, reverse=True)
    return [
        AggregateBucket(
            label=label_formatter(acc.start, granularity),
            start_iso=format_start_iso(acc.start),
            average=acc.total / acc.count if acc.count else None,
            total=acc.total if acc.count else None,
            count=acc.count,
        )
        for acc in ordered[:limit]
    ]
