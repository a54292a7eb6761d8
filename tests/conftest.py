from __future__ import annotations

from typing import Any, Callable, Iterator, List

import httpx
import pytest

from services.aggregator import Aggregator
from services.pipeline import MetricService
from services.telemetry import TelemetryClient
from tests.helpers import RecordingHandler, build_settings


@pytest.fixture
def feed_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_service() -> Iterator[Callable[..., MetricService]]:
    services: List[MetricService] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], **overrides: Any) -> MetricService:
        settings = build_settings(**overrides)
        client = TelemetryClient(settings, transport=httpx.MockTransport(handler))
        service = MetricService(
            client=client,
            aggregator=Aggregator(),
            detail_range_minutes=settings.detail_range_minutes,
            default_clamp_negative=settings.clamp_negative,
        )
        services.append(service)
        return service

    yield factory

    for service in services:
        service.shutdown()
