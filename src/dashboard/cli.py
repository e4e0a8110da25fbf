"""Command-line interface for the fleet dashboard."""

import logging
from functools import partial

import click
import pandas as pd

from src.dashboard.formatting import format_metric, format_number, format_top
from src.dashboard.session import DashboardSession
from src.data.feeds import default_sources, load_fleet_data
from src.pipeline.time_series import GROUP_MODES, METRICS
from src.report.fleet_report import ANALYSIS_MODES, ReportGenerationError, ReportRequestError

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _open_session(data_dir, vehicles=(), months=()) -> DashboardSession:
    """Load feeds and apply the requested filters, failing the command on load errors."""
    session = DashboardSession()
    loader = partial(load_fleet_data, default_sources(data_dir))
    if not session.reload(loader):
        raise click.ClickException(session.load_error)
    try:
        for veh in vehicles:
            session.toggle("vehicle", veh)
        for month in months:
            session.toggle("month", month)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return session


def _filter_options(func):
    func = click.option("--month", "months", multiple=True, help="Restrict to month code (repeatable).")(func)
    func = click.option("--vehicle", "vehicles", multiple=True, help="Restrict to vehicle id (repeatable).")(func)
    func = click.option("--data-dir", default=None, type=click.Path(exists=True, file_okay=False),
                        help="Read CSV feeds from this directory instead of the published sheets.")(func)
    func = click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")(func)
    return func


@click.group()
def main():
    """Waste-collection fleet analytics."""


@main.command()
@_filter_options
@click.option("--group-by", type=click.Choice(GROUP_MODES), default="month", help="Time-series bucket.")
@click.option("--metric", type=click.Choice(METRICS), default="trips", help="Time-series value.")
@click.option("--sort", "vehicle_sort", default="veh", help="Vehicle table sort column.")
def summary(verbose, data_dir, vehicles, months, group_by, metric, vehicle_sort):
    """Print KPIs and the derived tables for the selected filters."""
    _setup_logging(verbose)
    session = _open_session(data_dir, vehicles, months)
    try:
        snap = session.snapshot(group_by=group_by, metric=metric, vehicle_sort=vehicle_sort)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    k = snap.kpis
    kpi_lines = [
        ("Total tons", format_number(k.total_tons)),
        ("Total trips", format_number(k.total_trips)),
        ("Fuel cost", format_number(k.total_fuel)),
        ("Maintenance cost", format_number(k.total_maint)),
        ("Avg tons / day", format_number(k.avg_tons_per_day, 1)),
        ("Operating days", format_number(k.days_count)),
        ("Active vehicles", format_number(k.active_vehicles)),
        ("Top vehicle (trips)", format_top(k.top_trips)),
        ("Top vehicle (tons)", format_top(k.top_tons, 1, "t")),
        ("Avg capacity (t)", format_number(k.avg_capacity, 1)),
    ]
    click.echo("== KPIs")
    for label, value in kpi_lines:
        click.echo(f"  {label:<22}{value}")

    click.echo("\n== Vehicles")
    table = pd.DataFrame([r.to_dict() for r in snap.vehicle_table])
    if not table.empty:
        for col, digits in (("cap_m3", 1), ("cap_ton", 1), ("tons", 1), ("fuel", 0), ("maint", 0)):
            table[col] = table[col].map(lambda x, d=digits: format_number(x, d))
        for col in ("cost_trip", "cost_ton"):
            table[col] = table[col].map(lambda x: format_metric(x, 2))
    click.echo(table.to_string(index=False) if not table.empty else "  (no trips)")

    click.echo("\n== Drivers")
    drivers = pd.DataFrame([r.to_dict() for r in snap.drivers])
    click.echo(drivers.round(1).to_string(index=False) if not drivers.empty else "  (no named drivers)")

    click.echo("\n== Utilization")
    util = pd.DataFrame([r.to_dict() for r in snap.utilization])
    click.echo(util.round(1).to_string(index=False) if not util.empty else "  (no vehicles)")

    click.echo("\n== Zones")
    for share in snap.areas:
        click.echo(f"  {share.zone:<20}{format_number(share.tons)}")

    click.echo(f"\n== {metric} by {group_by}")
    for point in snap.time_series:
        click.echo(f"  {point.name:<12}{format_number(point.value)}")


@main.command()
@_filter_options
@click.option("--mode", type=click.Choice(ANALYSIS_MODES), default="general", help="Analysis type.")
@click.option("--vehicle-id", default=None, help="Vehicle for the 'specific' mode.")
@click.option("--compare", multiple=True, help="Vehicle for the 'comparison' mode (repeatable).")
@click.option("--prompt", default="", help="Request text for the 'custom' mode.")
def report(verbose, data_dir, vehicles, months, mode, vehicle_id, compare, prompt):
    """Generate a narrative report with the Gemini model."""
    _setup_logging(verbose)
    session = _open_session(data_dir, vehicles, months)
    try:
        text = session.generate_report(mode, vehicle_id=vehicle_id, vehicle_ids=compare, custom_prompt=prompt)
    except ReportRequestError as exc:
        raise click.UsageError(str(exc)) from exc
    except ReportGenerationError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(text)


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind.")
@click.option("--port", default=8787, type=int, help="Port to bind.")
@click.option("--data-dir", default=None, type=click.Path(exists=True, file_okay=False),
              help="Read CSV feeds from this directory instead of the published sheets.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def serve(host, port, data_dir, verbose):
    """Serve the dashboard JSON API."""
    from src.web.fullstack_server import run_server

    _setup_logging(verbose)
    session = DashboardSession()
    if not session.reload(partial(load_fleet_data, default_sources(data_dir))):
        logger.warning("Starting with an empty dataset; see /api/health for the load error")
    run_server(session, host=host, port=port)


if __name__ == "__main__":
    main()
