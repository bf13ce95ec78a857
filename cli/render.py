from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

import typer

from services.aggregator import MonthlyAggregate
from services.dashboard import DashboardState, Notification, Severity
from services.demo_data import DEMO_RECORDS

_BAR_WIDTH = 40

_SEVERITY_COLORS = {
    Severity.success: typer.colors.GREEN,
    Severity.info: typer.colors.BLUE,
    Severity.warning: typer.colors.YELLOW,
    Severity.error: typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _mm(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.1f} mm"


def render_notification(notification: Optional[Notification]) -> None:
    if notification is None:
        return
    typer.secho(notification.message, fg=_SEVERITY_COLORS[notification.severity])


def render_monthly(monthly: Sequence[MonthlyAggregate]) -> None:
    echo_heading("Monthly Precipitation")
    if not monthly:
        typer.echo("No monthly data available.")
        return
    peak = max(item.total for item in monthly)
    for item in monthly:
        width = round(item.total / peak * _BAR_WIDTH) if peak > 0 else 0
        typer.echo(
            f"{item.month_key}  {_mm(item.total):>12}  "
            f"avg {_mm(item.average):>10}  days {item.count:>3}  {'#' * width}"
        )


def render_view(view: DashboardState) -> None:
    echo_heading("Rainfall Data Dashboard")
    if view.is_demo:
        typer.secho(
            f"Demo Mode - API Not Connected ({len(DEMO_RECORDS)} sample records)",
            fg=typer.colors.YELLOW,
            bold=True,
        )
    if view.error:
        typer.secho(view.error, fg=typer.colors.RED, err=True)
    render_notification(view.notification)

    typer.echo()
    echo_heading("Statistics")
    stats = view.statistics
    if stats is not None:
        echo_key_values(
            [
                ("total", _mm(stats.total_precipitation)),
                ("average", _mm(stats.average_precipitation)),
                ("max", _mm(stats.max_precipitation)),
                ("min", _mm(stats.min_precipitation)),
            ]
        )
    else:
        typer.echo("No statistics available.")

    typer.echo()
    render_monthly(view.monthly)

    typer.echo()
    echo_heading("Records")
    if view.records:
        typer.echo(f"{'id':>8}  {'date':<10}  {'year':<8}  {'precipitation':>14}")
        for record in view.records:
            typer.echo(
                f"{'-' if record.id is None else str(record.id):>8}  {record.date or '-':<10}  "
                f"{record.agricultural_year or '-':<8}  {_mm(record.precipitation_mm):>14}"
            )
    else:
        typer.echo("No records found.")

    page_number = view.page.page + 1
    if view.total_pages is not None:
        footer = f"Page {page_number} of {max(view.total_pages, 1)}"
    elif view.has_next_page:
        footer = f"Page {page_number} (more available)"
    else:
        footer = f"Page {page_number}"
    typer.echo(f"{footer} | {view.record_count} record(s) | page size {view.page.size}")
