"""Conversion of raw feed records into validated metric points."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta, timezone
from operator import attrgetter
from typing import Iterable, List, Optional, Sequence

from models.metrics import FIELD_ACCESSORS, MetricDescriptor, MetricKind
from models.records import ChartValuePoint, MetricPoint, RawRecord, SensorSnapshot

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)
_FRACTION = re.compile(r"\.(\d+)")


def to_number(raw: Optional[str]) -> Optional[float]:
    """Parse a provider field value, returning ``None`` for anything non-finite."""
    if raw is None or "_" in raw:
        return None
    try:
        parsed = float(raw)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def parse_timestamp(value: str) -> datetime:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    candidate = _FRACTION.sub(
        lambda match: "." + (match.group(1) + "000000")[:6], candidate, count=1
    )

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def parse_epoch_ms(timestamp: Optional[str]) -> Optional[int]:
    """Milliseconds since the UNIX epoch, or ``None`` if unparseable."""
    if not timestamp:
        return None
    try:
        parsed = parse_timestamp(timestamp)
    except (ValueError, OverflowError):
        return None
    return (parsed - _EPOCH) // _ONE_MS


def extract_chart_points(
    records: Iterable[RawRecord], descriptor: MetricDescriptor
) -> List[ChartValuePoint]:
    accessor = FIELD_ACCESSORS[descriptor.key]
    return [
        ChartValuePoint(
            timestamp=record.created_at or None,
            value=to_number(accessor(record)),
        )
        for record in records
    ]


def build_metric_points(points: Iterable[ChartValuePoint]) -> List[MetricPoint]:
    """Drop unusable readings and sort the rest by time.

    A point is dropped when its timestamp is missing or unparseable, or its
    value is ``None`` or non-finite. The sort is stable, so readings sharing
    an instant keep their input order.
    """
    metric_points: List[MetricPoint] = []
    dropped = 0
    for point in points:
        value = point.value
        if not point.timestamp or value is None or not math.isfinite(value):
            dropped += 1
            continue
        epoch_ms = parse_epoch_ms(point.timestamp)
        if epoch_ms is None:
            dropped += 1
            continue
        metric_points.append(
            MetricPoint(timestamp=point.timestamp, epoch_ms=epoch_ms, value=float(value))
        )

    if dropped:
        logger.debug(
            "Dropped unusable readings",
            extra={"dropped_count": dropped, "sample_count": len(metric_points)},
        )

    metric_points.sort(key=attrgetter("epoch_ms"))
    return metric_points


def build_snapshot(records: Sequence[RawRecord]) -> SensorSnapshot:
    """Latest value of every sensor, read from the newest record."""
    if not records:
        return SensorSnapshot()

    latest = records[-1]
    return SensorSnapshot(
        temperature=to_number(FIELD_ACCESSORS[MetricKind.temperature](latest)),
        humidity=to_number(FIELD_ACCESSORS[MetricKind.humidity](latest)),
        motion_count=to_number(FIELD_ACCESSORS[MetricKind.motion](latest)),
        battery_voltage=to_number(FIELD_ACCESSORS[MetricKind.battery](latest)),
        timestamp=latest.created_at or None,
    )
