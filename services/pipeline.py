"""Orchestration of fetch, normalization and aggregation per metric."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable, List, Optional

from app.schemas import TelemetryResponse
from models.metrics import MetricDescriptor, get_metric_descriptor
from models.records import ChartValuePoint, MetricAggregates, SensorSnapshot
from services.aggregator import Aggregator
from services.buckets import BucketLimits
from services.differential import derive_differential_series
from services.normalizer import (
    build_metric_points,
    build_snapshot,
    extract_chart_points,
    parse_epoch_ms,
)
from services.telemetry import TelemetryClient
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class MetricReport:
    """Chart series and aggregates for one metric from a single fetch."""

    metric: MetricDescriptor
    clamp_negative: bool
    aggregates: MetricAggregates
    series: List[ChartValuePoint] = field(default_factory=list)
    channel_name: Optional[str] = None
    range_minutes: Optional[int] = None


def filter_points_by_minutes(
    points: Iterable[ChartValuePoint], minutes: int, now_ms: int
) -> List[ChartValuePoint]:
    """Keep points stamped within the last ``minutes`` before ``now_ms``.

    A non-positive ``minutes`` keeps everything; points without a parseable
    timestamp are dropped otherwise.
    """
    if minutes <= 0:
        return list(points)
    cutoff_ms = now_ms - minutes * 60_000
    kept: List[ChartValuePoint] = []
    for point in points:
        epoch_ms = parse_epoch_ms(point.timestamp)
        if epoch_ms is not None and epoch_ms >= cutoff_ms:
            kept.append(point)
    return kept


class MetricService:
    """Coordinates telemetry fetches with the aggregation pipeline."""

    def __init__(
        self,
        client: TelemetryClient,
        aggregator: Aggregator,
        detail_range_minutes: int = 60 * 24 * 90,
        default_clamp_negative: bool = True,
    ) -> None:
        self.client = client
        self.aggregator = aggregator
        self.detail_range_minutes = detail_range_minutes
        self.default_clamp_negative = default_clamp_negative

    def feeds(
        self, results: Optional[int] = None, minutes: Optional[int] = None
    ) -> TelemetryResponse:
        return self.client.fetch_feeds(results=results, minutes=minutes)

    def snapshot(self) -> SensorSnapshot:
        response = self.client.fetch_feeds()
        return build_snapshot(response.to_records())

    def metric_report(
        self,
        slug: str,
        range_minutes: Optional[int] = None,
        clamp_negative: Optional[bool] = None,
        now_ms: Optional[int] = None,
    ) -> MetricReport:
        """Build the chart series and aggregates for ``slug``.

        Raises ``KeyError`` for an unknown metric. Telemetry errors propagate
        unchanged.
        """
        descriptor = get_metric_descriptor(slug)
        if descriptor is None:
            raise KeyError(f"Metric {slug!r} is not supported.")

        clamp = self.default_clamp_negative if clamp_negative is None else clamp_negative
        response = self.client.fetch_feeds(minutes=self.detail_range_minutes)
        series = self.build_series(descriptor, response, clamp)

        if range_minutes:
            if now_ms is None:
                now_ms = int(time.time() * 1000)
            series = filter_points_by_minutes(series, range_minutes, now_ms)

        points = build_metric_points(series)
        aggregates = self.aggregator.aggregate(points)
        logger.info(
            "Aggregated metric",
            extra={
                "metric": descriptor.key.value,
                "sample_count": aggregates.sample_count,
                "range_minutes": range_minutes,
                "clamp_negative": clamp if descriptor.cumulative else None,
            },
        )
        return MetricReport(
            metric=descriptor,
            clamp_negative=clamp,
            aggregates=aggregates,
            series=series,
            channel_name=response.channel.name if response.channel else None,
            range_minutes=range_minutes or None,
        )

    @staticmethod
    def build_series(
        descriptor: MetricDescriptor, response: TelemetryResponse, clamp_negative: bool
    ) -> List[ChartValuePoint]:
        series = extract_chart_points(response.to_records(), descriptor)
        if descriptor.cumulative:
            series = derive_differential_series(series, clamp_negative=clamp_negative)
        return series

    def shutdown(self) -> None:
        """Release the HTTP client during application shutdown."""
        self.client.close()


@lru_cache
def build_default_service(settings: Optional[Settings] = None) -> MetricService:
    """Factory that wires the service from environment settings."""
    settings = settings or get_settings()
    limits = BucketLimits(
        hourly=settings.hourly_bucket_limit,
        daily=settings.daily_bucket_limit,
        monthly=settings.monthly_bucket_limit,
    )
    return MetricService(
        client=TelemetryClient(settings),
        aggregator=Aggregator(limits),
        detail_range_minutes=settings.detail_range_minutes,
        default_clamp_negative=settings.clamp_negative,
    )
