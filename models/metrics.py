"""Static registry of the metrics exposed by the telemetry channel."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from models.records import RawRecord


class MetricKind(str, Enum):
    temperature = "temperature"
    humidity = "humidity"
    motion = "motion"
    battery = "battery"


@dataclass(frozen=True)
class MetricDescriptor:
    """Display and processing semantics for one metric.

    ``cumulative`` marks signals whose raw value is a running counter; those
    are differenced before aggregation.
    """

    key: MetricKind
    title: str
    unit: str
    decimals: int
    field: str
    chart_label: str
    suggested_min: Optional[float] = None
    suggested_max: Optional[float] = None
    cumulative: bool = False


FieldAccessor = Callable[[RawRecord], Optional[str]]


METRIC_REGISTRY: Mapping[MetricKind, MetricDescriptor] = MappingProxyType(
    {
        MetricKind.temperature: MetricDescriptor(
            key=MetricKind.temperature,
            title="Temperature",
            unit="deg C",
            decimals=2,
            field="field4",
            chart_label="Temperature (deg C)",
        ),
        MetricKind.humidity: MetricDescriptor(
            key=MetricKind.humidity,
            title="Humidity",
            unit="%",
            decimals=1,
            field="field2",
            chart_label="Humidity (%)",
            suggested_min=0,
            suggested_max=100,
        ),
        MetricKind.motion: MetricDescriptor(
            key=MetricKind.motion,
            title="Motion Events",
            unit="count",
            decimals=0,
            field="field3",
            chart_label="Motion Events",
            cumulative=True,
        ),
        MetricKind.battery: MetricDescriptor(
            key=MetricKind.battery,
            title="Battery Voltage",
            unit="V",
            decimals=3,
            field="field1",
            chart_label="Battery Voltage (V)",
        ),
    }
)


def _field_accessor(field_name: str) -> FieldAccessor:
    def accessor(record: RawRecord) -> Optional[str]:
        return record.fields.get(field_name)

    return accessor


FIELD_ACCESSORS: Mapping[MetricKind, FieldAccessor] = MappingProxyType(
    {kind: _field_accessor(descriptor.field) for kind, descriptor in METRIC_REGISTRY.items()}
)


def get_metric_descriptor(slug: Optional[str]) -> Optional[MetricDescriptor]:
    """Resolve a metric slug case-insensitively; unknown slugs yield ``None``."""
    if not slug:
        return None
    try:
        kind = MetricKind(slug.strip().lower())
    except ValueError:
        return None
    return METRIC_REGISTRY[kind]
