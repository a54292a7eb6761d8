"""Pydantic schemas for the provider payload and the HTTP API layer."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.metrics import MetricKind
from models.records import RawRecord

_FIELD_NAMES = tuple(f"field{index}" for index in range(1, 9))


class TelemetryChannel(BaseModel):
    """Channel metadata returned alongside the feed."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: Optional[str] = None
    last_entry_id: Optional[int] = None


class TelemetryFeed(BaseModel):
    """One feed entry; field values arrive string-encoded or null."""

    model_config = ConfigDict(extra="allow")

    created_at: Optional[str] = None
    entry_id: Optional[int] = None
    field1: Optional[str] = None
    field2: Optional[str] = None
    field3: Optional[str] = None
    field4: Optional[str] = None
    field5: Optional[str] = None
    field6: Optional[str] = None
    field7: Optional[str] = None
    field8: Optional[str] = None

    @field_validator(*_FIELD_NAMES, mode="before")
    @classmethod
    def _stringify_numbers(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def to_record(self) -> RawRecord:
        return RawRecord(
            created_at=self.created_at,
            entry_id=self.entry_id,
            fields={name: getattr(self, name) for name in _FIELD_NAMES},
        )


class TelemetryResponse(BaseModel):
    """Payload of the channel feed endpoint."""

    model_config = ConfigDict(extra="allow")

    channel: Optional[TelemetryChannel] = None
    feeds: List[TelemetryFeed] = Field(default_factory=list)

    def to_records(self) -> List[RawRecord]:
        return [feed.to_record() for feed in self.feeds]


class MetricDescriptorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: MetricKind
    title: str
    unit: str
    decimals: int = Field(..., ge=0)
    field: str
    chart_label: str
    suggested_min: Optional[float] = None
    suggested_max: Optional[float] = None
    cumulative: bool = False


class ChartPoint(BaseModel):
    """A chart-ready reading; ``value`` is null where there was no reading."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: Optional[str] = None
    value: Optional[float] = None


class Bucket(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    start_iso: str
    average: Optional[float] = None
    total: Optional[float] = None
    count: int = Field(..., ge=0)


class Aggregates(BaseModel):
    """Summary statistics computed for a metric series."""

    model_config = ConfigDict(from_attributes=True)

    latest_value: Optional[float] = None
    latest_timestamp: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    average: Optional[float] = None
    sum: Optional[float] = None
    sample_count: int = Field(..., ge=0)
    last_hour_average: Optional[float] = None
    last_day_average: Optional[float] = None
    last_month_average: Optional[float] = None
    last_hour_total: Optional[float] = None
    last_day_total: Optional[float] = None
    last_month_total: Optional[float] = None
    hourly_buckets: List[Bucket] = Field(default_factory=list)
    daily_buckets: List[Bucket] = Field(default_factory=list)
    monthly_buckets: List[Bucket] = Field(default_factory=list)


class MetricReportResponse(BaseModel):
    """Full report for a single metric."""

    model_config = ConfigDict(from_attributes=True)

    metric: MetricDescriptorSchema
    channel_name: Optional[str] = None
    range_minutes: Optional[int] = Field(
        default=None, description="Trailing range applied to the series, if any."
    )
    clamp_negative: bool
    series: List[ChartPoint] = Field(default_factory=list)
    aggregates: Aggregates


class SnapshotResponse(BaseModel):
    """Latest reading of every sensor."""

    model_config = ConfigDict(from_attributes=True)

    temperature: Optional[float] = None
    humidity: Optional[float] = None
    motion_count: Optional[float] = None
    battery_voltage: Optional[float] = None
    timestamp: Optional[str] = None
