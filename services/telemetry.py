"""HTTP client for the telemetry channel feed."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from app.schemas import TelemetryResponse
from settings import Settings

logger = logging.getLogger(__name__)


class TelemetryError(Exception):
    """Base class for failures talking to the telemetry provider."""


class TelemetryConfigurationError(TelemetryError):
    """Raised when the channel id or read key is missing."""


class TelemetryFetchError(TelemetryError):
    """Raised when the provider is unreachable or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TelemetryClient:
    """Pulls channel feeds; every call is an independent fetch."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.Client(
            base_url=settings.telemetry_base_url,
            timeout=settings.request_timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def fetch_feeds(
        self,
        results: Optional[int] = None,
        minutes: Optional[int] = None,
    ) -> TelemetryResponse:
        """Fetch either the last ``minutes`` of feeds or the last ``results`` entries."""
        channel_id = self._settings.channel_id
        read_key = self._settings.read_key
        if not channel_id or not read_key:
            raise TelemetryConfigurationError("Telemetry channel id or read key missing.")

        params: Dict[str, str] = {"api_key": read_key}
        if minutes is not None and minutes > 0:
            params["minutes"] = str(minutes)
        else:
            count = results if results is not None and results > 0 else self._settings.default_results
            params["results"] = str(count)

        try:
            response = self._client.get(f"/channels/{channel_id}/feeds.json", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Telemetry request failed", extra={"reason": str(exc)})
            raise TelemetryFetchError(f"Telemetry request failed: {exc}") from exc

        if response.is_error:
            logger.warning(
                "Telemetry provider returned an error",
                extra={"status_code": response.status_code},
            )
            raise TelemetryFetchError(
                f"Telemetry request failed with status {response.status_code}.",
                status_code=response.status_code,
            )

        try:
            payload = TelemetryResponse.model_validate(response.json())
        except ValueError as exc:
            raise TelemetryFetchError(
                "Telemetry provider returned an invalid payload.",
                status_code=response.status_code,
            ) from exc

        logger.info(
            "Fetched telemetry feeds",
            extra={
                "sample_count": len(payload.feeds),
                "results": params.get("results"),
                "minutes": params.get("minutes"),
            },
        )
        return payload
