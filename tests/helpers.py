"""Shared fixture data for the telemetry tests."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from settings import Settings

FEED_PAYLOAD: Dict[str, Any] = {
    "channel": {"id": 123, "name": "Greenhouse", "last_entry_id": 4},
    "feeds": [
        {
            "created_at": "2024-01-01T00:00:00Z",
            "entry_id": 1,
            "field1": "3.912",
            "field2": "40.5",
            "field3": "10",
            "field4": "21.25",
        },
        {
            "created_at": "2024-01-01T01:00:00Z",
            "entry_id": 2,
            "field1": "3.910",
            "field2": "42.5",
            "field3": "15",
            "field4": "22.75",
        },
        {
            "created_at": "2024-01-01T02:00:00Z",
            "entry_id": 3,
            "field1": "3.905",
            "field2": None,
            "field3": "12",
            "field4": "23.0",
        },
        {
            "created_at": "2024-01-01T03:00:00Z",
            "entry_id": 4,
            "field1": 3.9,
            "field2": "44.0",
            "field3": "20",
            "field4": None,
        },
    ],
}


def build_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = dict(
        telemetry_base_url="https://telemetry.test",
        channel_id="123",
        read_key="secret",
        default_results=50,
        detail_range_minutes=129600,
        request_timeout=5.0,
        hourly_bucket_limit=12,
        daily_bucket_limit=10,
        monthly_bucket_limit=6,
        clamp_negative=True,
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


class RecordingHandler:
    """``httpx.MockTransport`` handler that records requests."""

    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self.payload = FEED_PAYLOAD if payload is None else payload
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)
