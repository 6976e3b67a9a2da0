"""Command-line interface for the check-in clock."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .controller import StatusController
from .errors import CheckinClockError
from .paths import get_log_path
from .reporting import SummaryPrinter, format_duration
from .server_runner import run_dashboard
from .store import SqliteEventStore

app = typer.Typer(help="Personal check-in/check-out time tracker.")


@app.callback(no_args_is_help=True)
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    log_file: bool = typer.Option(
        False, "--log-file", help="Also write logs to the application data directory."
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if log_file:
        handler = logging.FileHandler(get_log_path(), encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger().addHandler(handler)


def _open_controller(db_path: Optional[Path]) -> StatusController:
    settings = TrackerSettings.from_options(db_path=db_path)
    store = SqliteEventStore(settings.resolved_db_path(), settings.record_name)
    controller = StatusController(store)
    try:
        controller.initialize()
    except CheckinClockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    return controller


def _parse_day(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM-DD") from exc


def _parse_month(value: Optional[str]) -> tuple[int, int]:
    if not value:
        today = date.today()
        return today.year, today.month
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM") from exc
    return parsed.year, parsed.month


@app.command()
def toggle(
    note: Optional[str] = typer.Option(None, "--note", help="Free-text note for the event."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
) -> None:
    """Check in when offline, check out when online."""
    controller = _open_controller(db_path)
    open_session = controller.status.open_session
    try:
        event = controller.toggle(notes=note)
    except CheckinClockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    verb = "Checked in" if event.is_check_in else "Checked out"
    typer.echo(f"{verb} at {event.timestamp.astimezone().strftime('%H:%M:%S')}")
    if open_session is not None:
        elapsed = event.timestamp - open_session.timestamp
        typer.echo(f"Session length: {format_duration(elapsed.total_seconds())}")


@app.command()
def status(
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
) -> None:
    """Show whether you are checked in and for how long."""
    SummaryPrinter(_open_controller(db_path)).print_status()


@app.command()
def day(
    date_value: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to summarize. Defaults to today.",
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
) -> None:
    """Print the events and worked time for a specific day."""
    target = _parse_day(date_value)
    SummaryPrinter(_open_controller(db_path)).print_daily_summary(target)


@app.command()
def month(
    month_value: Optional[str] = typer.Option(
        None,
        "--month",
        help="Month (YYYY-MM) to summarize. Defaults to the current month.",
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
) -> None:
    """Print the worked time for a month."""
    year, month_number = _parse_month(month_value)
    SummaryPrinter(_open_controller(db_path)).print_monthly_summary(year, month_number)


@app.command()
def calendar(
    month_value: Optional[str] = typer.Option(
        None,
        "--month",
        help="Month (YYYY-MM) to inspect. Defaults to the current month.",
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
) -> None:
    """List the days of a month that have any check-in or check-out."""
    year, month_number = _parse_month(month_value)
    days = _open_controller(db_path).active_days(year, month_number)
    if not days:
        typer.echo(f"No activity in {year:04d}-{month_number:02d}.")
        return
    typer.echo(" ".join(str(day_number) for day_number in days))


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the check-in SQLite database."
    ),
    poll_seconds: float = typer.Option(
        1.0,
        "--poll-interval",
        min=0.1,
        help="Refresh interval suggested to clients for the elapsed-time display.",
    ),
    open_browser: bool = typer.Option(
        False,
        "--open-browser/--no-open-browser",
        help="Open the API docs in your default browser.",
    ),
) -> None:
    """Serve the JSON API for a local front-end."""
    settings = TrackerSettings.from_options(db_path=db_path, poll_seconds=poll_seconds)
    try:
        run_dashboard(host=host, port=port, settings=settings, open_browser=open_browser)
    except CheckinClockError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
