"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    MetricDescriptorSchema,
    MetricReportResponse,
    SnapshotResponse,
    TelemetryResponse,
)
from models.metrics import METRIC_REGISTRY
from services.pipeline import MetricService, build_default_service
from services.telemetry import TelemetryConfigurationError, TelemetryError

router = APIRouter()


def get_service() -> MetricService:
    return build_default_service()


def _telemetry_http_error(exc: TelemetryError) -> HTTPException:
    if isinstance(exc, TelemetryConfigurationError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=str(exc),
    )


@router.get(
    "/feeds",
    response_model=TelemetryResponse,
    summary="Proxy the raw channel feed from the telemetry provider.",
)
def get_feeds(
    results: Optional[int] = Query(None, ge=1, description="Number of latest entries."),
    minutes: Optional[int] = Query(None, ge=1, description="Trailing minutes of entries."),
    service: MetricService = Depends(get_service),
) -> TelemetryResponse:
    try:
        return service.feeds(results=results, minutes=minutes)
    except TelemetryError as exc:
        raise _telemetry_http_error(exc) from exc


@router.get(
    "/snapshot",
    response_model=SnapshotResponse,
    summary="Latest reading of every sensor.",
)
def get_snapshot(service: MetricService = Depends(get_service)) -> SnapshotResponse:
    try:
        snapshot = service.snapshot()
    except TelemetryError as exc:
        raise _telemetry_http_error(exc) from exc
    return SnapshotResponse.model_validate(snapshot)


@router.get(
    "/metrics",
    response_model=List[MetricDescriptorSchema],
    summary="List the supported metrics.",
)
async def list_metrics() -> List[MetricDescriptorSchema]:
    return [MetricDescriptorSchema.model_validate(item) for item in METRIC_REGISTRY.values()]


@router.get(
    "/metrics/{slug}",
    response_model=MetricReportResponse,
    summary="Chart series and aggregates for a single metric.",
)
def get_metric_report(
    slug: str,
    range_minutes: Optional[int] = Query(
        None, ge=0, description="Restrict the series to the trailing minutes; 0 keeps all."
    ),
    clamp_negative: Optional[bool] = Query(
        None, description="Clamp counter resets instead of reporting negative deltas."
    ),
    service: MetricService = Depends(get_service),
) -> MetricReportResponse:
    try:
        report = service.metric_report(
            slug, range_minutes=range_minutes, clamp_negative=clamp_negative
        )
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except TelemetryError as exc:
        raise _telemetry_http_error(exc) from exc
    return MetricReportResponse.model_validate(report)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
