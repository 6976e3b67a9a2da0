"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from .controller import StatusController
from .models import DayView, EventKind


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, controller: StatusController) -> None:
        self.controller = controller

    def print_status(self) -> None:
        status = self.controller.status
        if not status.is_online or status.open_session is None:
            print("Offline")
            return
        elapsed = self.controller.current_elapsed() or timedelta()
        since = status.open_session.timestamp.astimezone().strftime("%H:%M")
        print(f"Online since {since} ({format_duration(elapsed.total_seconds())})")

    def print_daily_summary(self, day: date) -> None:
        view = self.controller.query(day)
        print(f"Summary for {day.strftime('%Y-%m-%d')}")
        print("-" * 40)
        if not view.events:
            print("No activity recorded for this day.")
            return

        for line in describe_day(view):
            print(line)
        print()
        print(f"Total: {format_total(view.total)}")

    def print_monthly_summary(self, year: int, month: int) -> None:
        total = self.controller.query_month(year, month)
        days = self.controller.active_days(year, month)
        print(f"{format_hours(total)} worked in {year:04d}-{month:02d}")
        if days:
            print("Active days: " + ", ".join(str(day) for day in days))


def describe_day(view: DayView) -> list[str]:
    """One line per event; check-outs that close a session show its length."""
    closing = {session.check_out.id: session for session in view.sessions}
    lines = []
    for event in view.events:
        label = "Checked in " if event.kind is EventKind.CHECK_IN else "Checked out"
        line = f"  {label}  {event.timestamp.astimezone().strftime('%H:%M')}"
        session = closing.get(event.id)
        if session is not None:
            line += f"  ({session.duration.total_seconds() / 3600:.1f}h)"
        if event.notes:
            line += f"  {event.notes}"
        lines.append(line)
    return lines


def format_total(total: Optional[timedelta]) -> str:
    if total is None:
        return "-"
    return format_hours(total)


def format_hours(value: timedelta) -> str:
    total_minutes = int(round(value.total_seconds() / 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"


def format_duration(seconds: float) -> str:
    total_seconds = max(int(seconds), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
