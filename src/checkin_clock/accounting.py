"""Duration accounting over an event log.

Every function here is pure: it reads an ``EventLog`` snapshot and returns a
derived view. Calendar boundaries are taken in ``tz``, which defaults to the
local timezone of the running process.

Months are numbered 1 to 12 as in :mod:`datetime`, not 0 to 11 as in
JavaScript's ``Date``.
"""

from __future__ import annotations

from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta, tzinfo
from typing import Iterable, Optional

from .errors import ValidationError
from .models import ActivityStatus, DayView, Event, EventKind, EventLog, Session


def status_of(log: EventLog) -> ActivityStatus:
    """Online iff the last event by insertion order is a check-in."""
    if log and log[-1].kind is EventKind.CHECK_IN:
        return ActivityStatus.online(log[-1])
    return ActivityStatus.offline()


def pair_sessions(events: Iterable[Event]) -> tuple[list[Session], Optional[Event]]:
    """Pair each check-in with the next check-out in timestamp order.

    Returns the completed sessions and the trailing unmatched check-in, if
    any. A later check-in replaces a pending one; a check-out with nothing
    pending is skipped.
    """
    # sorted() is stable, so equal timestamps keep insertion order.
    ordered = sorted(events, key=lambda event: event.timestamp)
    sessions: list[Session] = []
    pending: Optional[Event] = None
    for event in ordered:
        if event.kind is EventKind.CHECK_IN:
            pending = event
        elif pending is not None:
            sessions.append(Session(check_in=pending, check_out=event))
            pending = None
    return sessions, pending


def day_view(log: EventLog, day: date, *, tz: Optional[tzinfo] = None) -> DayView:
    _validate_day(day)
    if isinstance(day, datetime):
        day = day.date()
    start = _local_midnight(day, tz)
    end = _end_of_day(day, tz)

    events = sorted(
        (event for event in log if start <= event.timestamp <= end),
        key=lambda event: event.timestamp,
    )
    sessions, pending = pair_sessions(events)

    total: Optional[timedelta] = None
    if events and (sessions or pending is None):
        total = sum((session.duration for session in sessions), timedelta())

    return DayView(
        date=day,
        events=tuple(events),
        sessions=tuple(sessions),
        total=total,
        open_session=pending,
    )


def monthly_total(
    log: EventLog,
    year: int,
    month: int,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> timedelta:
    """Sum completed sessions whose check-in falls in the given month.

    Only events up to ``now`` are considered, so a session still open at query
    time contributes nothing. Sessions spanning several days count once.
    """
    _validate_year_month(year, month)
    now = _aware(now, tz) if now is not None else _now(tz)
    month_start = _local_midnight(date(year, month, 1), tz)
    next_month = _first_of_next_month(year, month)
    month_end = _local_midnight(next_month, tz) if next_month else None

    window = [event for event in log if month_start <= event.timestamp <= now]
    sessions, _ = pair_sessions(window)
    return sum(
        (
            session.duration
            for session in sessions
            if month_end is None or session.check_in.timestamp < month_end
        ),
        timedelta(),
    )


def days_with_activity(
    log: EventLog, year: int, month: int, *, tz: Optional[tzinfo] = None
) -> list[int]:
    """Return the distinct days of ``month`` holding at least one event."""
    _validate_year_month(year, month)
    days = set()
    for event in log:
        local = event.timestamp.astimezone(tz)
        if local.year == year and local.month == month:
            days.add(local.day)
    return sorted(days)


def _local_midnight(day: date, tz: Optional[tzinfo]) -> datetime:
    return _aware(datetime.combine(day, time.min), tz)


def _aware(value: datetime, tz: Optional[tzinfo]) -> datetime:
    if value.tzinfo is None:
        if tz is not None:
            return value.replace(tzinfo=tz)
        # Naive values are wall-clock times in the local timezone.
        return value.astimezone()
    return value


def _now(tz: Optional[tzinfo]) -> datetime:
    if tz is not None:
        return datetime.now(tz)
    return datetime.now().astimezone()


def _end_of_day(day: date, tz: Optional[tzinfo]) -> datetime:
    if day == date.max:
        return _aware(datetime.combine(day, time.max), tz)
    return _local_midnight(day + timedelta(days=1), tz) - timedelta(microseconds=1)


def _first_of_next_month(year: int, month: int) -> Optional[date]:
    if month == 12:
        return date(year + 1, 1, 1) if year < MAXYEAR else None
    return date(year, month + 1, 1)


def _validate_day(day: object) -> None:
    if not isinstance(day, date):
        raise ValidationError(f"Expected a date, got {day!r}")


def _validate_year_month(year: object, month: object) -> None:
    for name, value in (("year", year), ("month", month)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"year out of range: {year}")
    if not 1 <= month <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {month}")
