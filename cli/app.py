from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import typer

from cli.config import load_config
from cli.render import render_view
from logging_config import configure_logging
from models.query import FilterConfig, PageRequest, SortDirection, SortField
from services.connectivity import ConnectivityState
from services.dashboard import DashboardController
from services.errors import RainfallApiError
from services.rainfall_api import API_DOCS_PATH, SEARCH_PATH, RainfallApiClient
from settings import Settings


@dataclass
class CLIState:
    settings: Settings
    controller: DashboardController


app = typer.Typer(
    help="Query the rainfall records API and print dashboard views.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def build_controller(settings: Settings) -> DashboardController:
    api = RainfallApiClient(settings.api_base_url, timeout=settings.request_timeout)
    return DashboardController(api=api, settings=settings)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


def _connect(state: CLIState, demo: bool) -> None:
    """Probe the API; when unreachable, optionally show demo data, then exit 1."""
    dashboard = state.controller.check_connectivity()
    if dashboard.connectivity is ConnectivityState.connected:
        return
    if demo:
        render_view(state.controller.view())
    else:
        typer.secho(dashboard.error or "Rainfall API is unreachable.", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Rainfall API base URL (defaults to RAINFALL_API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a request to the API is abandoned.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests to stderr."),
) -> None:
    """Entry point for the CLI."""
    if verbose:
        configure_logging("DEBUG")
    settings = load_config(base_url=base_url, timeout=timeout)
    controller = build_controller(settings)
    ctx.obj = CLIState(settings=settings, controller=controller)
    ctx.call_on_close(controller.close)


@app.command("probe")
def probe_command(ctx: typer.Context) -> None:
    """Check whether the rainfall API is reachable."""
    state = _get_state(ctx)
    outcome = state.controller.probe.check()
    if outcome.reachable:
        typer.secho(f"connected: {state.settings.api_base_url}", fg=typer.colors.GREEN)
        return
    typer.secho(f"degraded: {outcome.error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("diagnose")
def diagnose_command(ctx: typer.Context) -> None:
    """Run the search probe and the API docs liveness check, reporting each."""
    state = _get_state(ctx)
    api = state.controller.api
    failures = 0

    try:
        body = api.probe(state.controller.builder.build_probe())
    except RainfallApiError as exc:
        failures += 1
        typer.secho(f"FAIL POST {SEARCH_PATH}: {exc}", fg=typer.colors.RED)
    else:
        records = body.get("data") if isinstance(body, dict) else None
        has_stats = isinstance(body, dict) and bool(body.get("statistics"))
        count = len(records) if isinstance(records, list) else 0
        typer.secho(
            f"OK   POST {SEARCH_PATH}: {count} record(s), statistics={'yes' if has_stats else 'no'}",
            fg=typer.colors.GREEN,
        )

    try:
        status_code = api.ping_docs()
    except RainfallApiError as exc:
        failures += 1
        typer.secho(f"FAIL GET  {API_DOCS_PATH}: {exc}", fg=typer.colors.RED)
    else:
        typer.secho(f"OK   GET  {API_DOCS_PATH}: status {status_code}", fg=typer.colors.GREEN)

    if failures:
        raise typer.Exit(code=1)


@app.command("search")
def search_command(
    ctx: typer.Context,
    agricultural_year: Optional[str] = typer.Option(None, "--year", "-y", help="Agricultural year, e.g. 2024-25."),
    start_date: Optional[datetime] = typer.Option(None, "--start", formats=["%Y-%m-%d"], help="Inclusive start date."),
    end_date: Optional[datetime] = typer.Option(None, "--end", formats=["%Y-%m-%d"], help="Inclusive end date."),
    min_precipitation: Optional[float] = typer.Option(None, "--min", min=0, help="Minimum precipitation (mm)."),
    max_precipitation: Optional[float] = typer.Option(None, "--max", min=0, help="Maximum precipitation (mm)."),
    sort_by: Optional[SortField] = typer.Option(None, "--sort-by", help="Field to sort by."),
    sort_dir: Optional[SortDirection] = typer.Option(None, "--sort-dir", help="Sort direction."),
    page: int = typer.Option(0, "--page", min=0, help="Zero-based page number."),
    size: Optional[int] = typer.Option(None, "--size", help="Page size (clamped to the configured maximum)."),
    demo: bool = typer.Option(True, "--demo/--no-demo", help="Show demo data when the API is unreachable."),
) -> None:
    """Search rainfall records and print the table, statistics and monthly chart."""
    if start_date and end_date and start_date > end_date:
        raise typer.BadParameter("--start must not be after --end.")
    if (
        min_precipitation is not None
        and max_precipitation is not None
        and min_precipitation > max_precipitation
    ):
        raise typer.BadParameter("--min must not exceed --max.")

    state = _get_state(ctx)
    _connect(state, demo)

    defaults = state.controller.default_filters()
    filters = FilterConfig(
        agricultural_year=agricultural_year,
        start_date=_as_date(start_date),
        end_date=_as_date(end_date),
        min_precipitation=min_precipitation,
        max_precipitation=max_precipitation,
        sort_by=sort_by or defaults.sort_by,
        sort_dir=sort_dir or defaults.sort_dir,
    )
    current = state.controller.state.page
    request = PageRequest(page=page, size=size if size is not None else current.size)
    view = state.controller.search(filters, request)
    render_view(view)
    if view.error:
        raise typer.Exit(code=1)


@app.command("years")
def years_command(ctx: typer.Context) -> None:
    """List the agricultural years present in the API's data."""
    state = _get_state(ctx)
    _connect(state, demo=False)
    years = state.controller.state.agricultural_years
    if not years:
        typer.echo("No agricultural years found.")
        return
    for year in years:
        typer.echo(year)
