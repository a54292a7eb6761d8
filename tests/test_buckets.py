from __future__ import annotations

from datetime import datetime, timezone

from models.records import MetricPoint
from services.buckets import (
    BucketGranularity,
    bucket_start,
    build_buckets,
    format_bucket_label,
)
from services.normalizer import parse_epoch_ms

HOUR_MS = 60 * 60 * 1000


def _point(timestamp: str, value: float = 1.0) -> MetricPoint:
    epoch_ms = parse_epoch_ms(timestamp)
    assert epoch_ms is not None
    return MetricPoint(timestamp=timestamp, epoch_ms=epoch_ms, value=value)


def _hourly_series(count: int) -> list[MetricPoint]:
    start = parse_epoch_ms("2024-01-01T00:00:00Z")
    assert start is not None
    return [
        MetricPoint(timestamp=str(start + index * HOUR_MS), epoch_ms=start + index * HOUR_MS, value=float(index))
        for index in range(count)
    ]


def test_hourly_buckets_are_limited_and_descending() -> None:
    points = _hourly_series(25) + [_point("2024-01-01T23:30:00Z", 100.0)]

    buckets = build_buckets(points, BucketGranularity.hour, limit=12)

    assert len(buckets) == 12
    starts = [bucket.start_iso for bucket in buckets]
    assert starts == sorted(starts, reverse=True)
    assert len(set(starts)) == len(starts)
    assert buckets[0].start_iso == "2024-01-02T00:00:00.000Z"
    assert buckets[0].count == 1
    assert buckets[1].start_iso == "2024-01-01T23:00:00.000Z"
    assert buckets[1].count == 2
    assert buckets[1].total == 123.0
    assert buckets[1].average == 61.5
    for bucket in buckets[2:]:
        assert bucket.count == 1


def test_bucket_counts_match_source_points() -> None:
    points = _hourly_series(25)

    buckets = build_buckets(points, BucketGranularity.hour, limit=100)

    assert len(buckets) == 25
    assert sum(bucket.count for bucket in buckets) == 25


def test_boundary_instant_belongs_to_the_bucket_it_starts() -> None:
    points = [
        _point("2024-01-01T23:59:59.999Z", 1.0),
        _point("2024-01-02T00:00:00.000Z", 2.0),
    ]

    daily = build_buckets(points, BucketGranularity.day, limit=10)
    hourly = build_buckets(points, BucketGranularity.hour, limit=10)

    assert [(bucket.start_iso, bucket.total) for bucket in daily] == [
        ("2024-01-02T00:00:00.000Z", 2.0),
        ("2024-01-01T00:00:00.000Z", 1.0),
    ]
    assert hourly[0].start_iso == "2024-01-02T00:00:00.000Z"
    assert hourly[0].count == 1


def test_monthly_buckets_do_not_collide_across_years() -> None:
    points = [
        _point("2023-01-15T12:00:00Z", 1.0),
        _point("2023-12-31T23:30:00Z", 2.0),
        _point("2024-01-01T00:30:00Z", 3.0),
        _point("2024-01-20T00:00:00Z", 4.0),
    ]

    buckets = build_buckets(points, BucketGranularity.month, limit=6)

    assert [bucket.start_iso for bucket in buckets] == [
        "2024-01-01T00:00:00.000Z",
        "2023-12-01T00:00:00.000Z",
        "2023-01-01T00:00:00.000Z",
    ]
    assert [bucket.label for bucket in buckets] == ["Jan 2024", "Dec 2023", "Jan 2023"]
    assert [bucket.count for bucket in buckets] == [2, 1, 1]
    assert buckets[0].average == 3.5


def test_empty_input_and_zero_limit() -> None:
    assert build_buckets([], BucketGranularity.day, limit=10) == []
    assert build_buckets([_point("2024-01-01T00:00:00Z")], BucketGranularity.day, limit=0) == []


def test_bucket_start_truncation() -> None:
    epoch_ms = parse_epoch_ms("2024-02-29T13:45:12.345Z")
    assert epoch_ms is not None

    assert bucket_start(epoch_ms, BucketGranularity.hour) == datetime(2024, 2, 29, 13, tzinfo=timezone.utc)
    assert bucket_start(epoch_ms, BucketGranularity.day) == datetime(2024, 2, 29, tzinfo=timezone.utc)
    assert bucket_start(epoch_ms, BucketGranularity.month) == datetime(2024, 2, 1, tzinfo=timezone.utc)


def test_default_labels() -> None:
    start = datetime(2024, 3, 5, 7, tzinfo=timezone.utc)

    assert format_bucket_label(start, BucketGranularity.hour) == "Mar 5, 07"
    assert format_bucket_label(start, BucketGranularity.day) == "Mar 5, 2024"
    assert format_bucket_label(start, BucketGranularity.month) == "Mar 2024"


def test_custom_label_formatter() -> None:
    points = [_point("2024-01-01T10:15:00Z")]

    buckets = build_buckets(
        points,
        BucketGranularity.hour,
        limit=1,
        label_formatter=lambda start, granularity: f"{granularity.value}@{start.isoformat()}",
    )

    assert buckets[0].label == "hour@2024-01-01T10:00:00+00:00"
