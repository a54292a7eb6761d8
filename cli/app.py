from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_metric_report, render_snapshot


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for inspecting aggregated sensor telemetry.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Aggregator API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, http_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("snapshot")
def snapshot_command(ctx: typer.Context) -> None:
    """Show the latest reading of every sensor."""
    state = _get_state(ctx)
    render_snapshot(state.client.get_snapshot())


@app.command("metric")
def metric_command(
    ctx: typer.Context,
    slug: str = typer.Argument(..., help="Metric to report: temperature, humidity, motion or battery."),
    range_minutes: Optional[int] = typer.Option(
        None,
        "--range-minutes",
        "-r",
        min=0,
        help="Only aggregate the trailing minutes of data.",
    ),
    clamp: Optional[bool] = typer.Option(
        None,
        "--clamp/--no-clamp",
        help="Clamp counter resets (default) or report raw negative deltas.",
    ),
) -> None:
    """Fetch aggregates and buckets for a single metric."""
    state = _get_state(ctx)
    payload = state.client.get_metric(slug, range_minutes=range_minutes, clamp_negative=clamp)
    render_metric_report(payload)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    slug: str = typer.Argument(..., help="Metric to poll."),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Seconds between refreshes (defaults to CLI_POLL_INTERVAL or 60).",
    ),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-n",
        min=1,
        help="Stop after this many refreshes; runs until interrupted otherwise.",
    ),
    range_minutes: Optional[int] = typer.Option(
        None,
        "--range-minutes",
        "-r",
        min=0,
        help="Only aggregate the trailing minutes of data.",
    ),
    clamp: Optional[bool] = typer.Option(
        None,
        "--clamp/--no-clamp",
        help="Clamp counter resets (default) or report raw negative deltas.",
    ),
) -> None:
    """Re-fetch a metric report on a fixed interval."""
    state = _get_state(ctx)
    poll_interval = interval if interval is not None else state.config.poll_interval
    typer.echo(f"Polling {slug} every {poll_interval}s from {state.config.base_url} ...")
    reports = state.client.poll_metric(
        slug,
        interval=poll_interval,
        count=count,
        range_minutes=range_minutes,
        clamp_negative=clamp,
    )
    for index, payload in enumerate(reports):
        if index:
            typer.echo()
        render_metric_report(payload)
