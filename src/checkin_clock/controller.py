"""Stateful façade over the event store and duration accounting."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional, Protocol

from .accounting import day_view, days_with_activity, monthly_total, status_of
from .errors import PersistenceError
from .models import ActivityStatus, DayView, Event, EventKind, EventLog
from .store import append

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class EventStore(Protocol):
    def load(self) -> EventLog: ...

    def save(self, log: EventLog) -> None: ...


def local_now() -> datetime:
    return datetime.now().astimezone()


class StatusController:
    """Owns the live event log and derives the online/offline status from it.

    Status is never stored on its own: it is recomputed from the log after
    every load and every accepted toggle.
    """

    def __init__(
        self,
        store: EventStore,
        *,
        clock: Optional[Clock] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._store = store
        self._clock = clock or local_now
        self._tz = tz
        self._lock = threading.Lock()
        self._log: EventLog = ()
        self._status = ActivityStatus.offline()
        self._initialized = False

    def initialize(self) -> None:
        """Load the persisted log. Load errors propagate to the caller."""
        log = self._store.load()
        with self._lock:
            self._log = log
            self._status = status_of(log)
            self._initialized = True
        logger.info(
            "Loaded %d events; status is %s.", len(log), self._status.state.value
        )

    @property
    def log(self) -> EventLog:
        self._require_initialized()
        return self._log

    @property
    def status(self) -> ActivityStatus:
        self._require_initialized()
        return self._status

    def toggle(self, notes: Optional[str] = None) -> Event:
        """Check in when offline, check out when online.

        The new log is persisted before it becomes visible; on a failed save
        nothing changes and ``PersistenceError`` carries the rejected event.
        """
        self._require_initialized()
        with self._lock:
            kind = (
                EventKind.CHECK_OUT if self._status.is_online else EventKind.CHECK_IN
            )
            event = Event(kind=kind, timestamp=self._now(), notes=notes)
            updated = append(self._log, event)
            try:
                self._store.save(updated)
            except Exception as exc:
                logger.error("Toggle rejected, %s was not persisted: %s", kind.value, exc)
                raise PersistenceError(str(exc), event=event) from exc
            self._log = updated
            self._status = status_of(updated)
        logger.info("Recorded %s at %s", kind.value, event.timestamp.isoformat())
        return event

    def current_elapsed(self) -> Optional[timedelta]:
        status = self.status
        if not status.is_online or status.open_session is None:
            return None
        return self._now() - status.open_session.timestamp

    def query(self, day: date) -> DayView:
        return day_view(self.log, day, tz=self._tz)

    def query_month(self, year: int, month: int) -> timedelta:
        return monthly_total(self.log, year, month, now=self._now(), tz=self._tz)

    def active_days(self, year: int, month: int) -> list[int]:
        return days_with_activity(self.log, year, month, tz=self._tz)

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.astimezone()
        return now

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("StatusController.initialize() has not been called")
