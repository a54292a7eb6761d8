from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Optional

import typer

from models.metrics import METRIC_REGISTRY, MetricKind

_TRAILING_ZEROS = re.compile(r"(\.\d*?)0+$")
_BARE_POINT = re.compile(r"\.$")
_SNAPSHOT_FIELDS = (
    ("temperature", MetricKind.temperature),
    ("humidity", MetricKind.humidity),
    ("motion_count", MetricKind.motion),
    ("battery_voltage", MetricKind.battery),
)


def format_number(value: Optional[float], decimals: int, unit: str = "") -> str:
    """Render a reading with the metric's precision, ``--`` when missing."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "--"
    if decimals <= 0:
        formatted = str(math.floor(value + 0.5))
    elif float(value).is_integer():
        formatted = str(int(value))
    else:
        formatted = f"{value:.{decimals}f}"
        formatted = _BARE_POINT.sub("", _TRAILING_ZEROS.sub(r"\1", formatted))
    if not unit:
        return formatted
    if unit == "%":
        return f"{formatted}{unit}"
    return f"{formatted} {unit}"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_snapshot(payload: Dict[str, Any]) -> None:
    echo_heading("Latest Readings")
    pairs: List[tuple[str, Any]] = [("timestamp", payload.get("timestamp") or "--")]
    for key, kind in _SNAPSHOT_FIELDS:
        descriptor = METRIC_REGISTRY[kind]
        pairs.append((key, format_number(payload.get(key), descriptor.decimals, descriptor.unit)))
    echo_key_values(pairs)


def _render_buckets(title: str, buckets: List[Dict[str, Any]], use_total: bool, decimals: int, unit: str) -> None:
    typer.echo(f"{title}:")
    if not buckets:
        typer.echo("  No samples.")
        return
    for bucket in buckets:
        value = bucket.get("total") if use_total else bucket.get("average")
        typer.echo(
            f"  - {bucket.get('label')}: {format_number(value, decimals, unit)}"
            f" (samples: {bucket.get('count', 0)})"
        )


def render_metric_report(payload: Dict[str, Any]) -> None:
    metric = payload.get("metric") or {}
    aggregates = payload.get("aggregates") or {}
    unit = metric.get("unit", "")
    decimals = int(metric.get("decimals", 2))
    cumulative = bool(metric.get("cumulative"))

    echo_heading(metric.get("title") or "Metric")
    echo_key_values(
        [
            ("channel", payload.get("channel_name") or "--"),
            ("range_minutes", payload.get("range_minutes") or "all"),
            ("samples", aggregates.get("sample_count", 0)),
            ("latest_timestamp", aggregates.get("latest_timestamp") or "--"),
        ]
    )

    def fmt(key: str) -> str:
        return format_number(aggregates.get(key), decimals, unit)

    typer.echo()
    echo_heading("Summary")
    if cumulative:
        echo_key_values(
            [
                ("latest_increment", fmt("latest_value")),
                ("total_in_range", fmt("sum")),
                ("min_increment", fmt("min")),
                ("max_increment", fmt("max")),
            ]
        )
    else:
        echo_key_values(
            [
                ("current", fmt("latest_value")),
                ("average", fmt("average")),
                ("min", fmt("min")),
                ("max", fmt("max")),
            ]
        )

    typer.echo()
    echo_heading("Trailing Windows")
    window_field = "total" if cumulative else "average"
    echo_key_values(
        [
            ("last_hour", fmt(f"last_hour_{window_field}")),
            ("last_day", fmt(f"last_day_{window_field}")),
            ("last_month", fmt(f"last_month_{window_field}")),
        ]
    )

    typer.echo()
    echo_heading("Buckets")
    _render_buckets("hourly", aggregates.get("hourly_buckets") or [], cumulative, decimals, unit)
    _render_buckets("daily", aggregates.get("daily_buckets") or [], cumulative, decimals, unit)
    _render_buckets("monthly", aggregates.get("monthly_buckets") or [], cumulative, decimals, unit)
