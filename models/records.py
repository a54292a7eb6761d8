"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True, slots=True)
class RawRecord:
    """A single feed entry as delivered by the telemetry channel.

    ``fields`` maps provider field names (``field1`` .. ``field8``) to the
    string-encoded reading, or ``None`` when the device sent nothing.
    """

    created_at: Optional[str]
    entry_id: Optional[int] = None
    fields: Dict[str, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChartValuePoint:
    """A loosely typed reading; ``None`` means "no reading"."""

    timestamp: Optional[str]
    value: Optional[float]


@dataclass(frozen=True, slots=True)
class MetricPoint:
    """A validated reading with its parsed epoch milliseconds."""

    timestamp: str
    epoch_ms: int
    value: float


@dataclass(frozen=True, slots=True)
class AggregateBucket:
    label: str
    start_iso: str
    average: Optional[float]
    total: Optional[float]
    count: int


@dataclass(frozen=True, slots=True)
class WindowSummary:
    """Mean and sum over a trailing window, both ``None`` when it is empty."""

    average: Optional[float] = None
    total: Optional[float] = None


@dataclass
class MetricAggregates:
    """Whole-series statistics, trailing windows and calendar buckets."""

    latest_value: Optional[float] = None
    latest_timestamp: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    average: Optional[float] = None
    sum: Optional[float] = None
    sample_count: int = 0
    last_hour_average: Optional[float] = None
    last_day_average: Optional[float] = None
    last_month_average: Optional[float] = None
    last_hour_total: Optional[float] = None
    last_day_total: Optional[float] = None
    last_month_total: Optional[float] = None
    hourly_buckets: List[AggregateBucket] = field(default_factory=list)
    daily_buckets: List[AggregateBucket] = field(default_factory=list)
    monthly_buckets: List[AggregateBucket] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Latest reading of every sensor taken from the newest feed entry."""

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    motion_count: Optional[float] = None
    battery_voltage: Optional[float] = None
    timestamp: Optional[str] = None
