from __future__ import annotations

import time
from typing import Any, Dict, Iterator, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the aggregation service."""

    def __init__(self, config: CLIConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url, timeout=config.http_timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def get_snapshot(self) -> Dict[str, Any]:
        return self._get("/snapshot")

    def get_metric(
        self,
        slug: str,
        range_minutes: Optional[int] = None,
        clamp_negative: Optional[bool] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if range_minutes is not None:
            params["range_minutes"] = range_minutes
        if clamp_negative is not None:
            params["clamp_negative"] = "true" if clamp_negative else "false"
        return self._get(
            f"/metrics/{slug}",
            params=params,
            not_found=f"Metric {slug} is not supported.",
        )

    def poll_metric(
        self,
        slug: str,
        interval: float,
        count: Optional[int] = None,
        range_minutes: Optional[int] = None,
        clamp_negative: Optional[bool] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Yield a fresh report every ``interval`` seconds, ``count`` times or forever."""
        fetched = 0
        while count is None or fetched < count:
            if fetched:
                time.sleep(interval)
            yield self.get_metric(slug, range_minutes=range_minutes, clamp_negative=clamp_negative)
            fetched += 1

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        not_found: Optional[str] = None,
    ) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
            if not_found is not None and response.status_code == 404:
                raise typer.BadParameter(not_found)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            self._handle_transport_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    @staticmethod
    def _handle_transport_error(exc: httpx.TransportError) -> None:
        typer.secho(f"Could not reach the service: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
