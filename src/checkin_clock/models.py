"""Domain models for check-in/check-out tracking."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional


class EventKind(str, enum.Enum):
    CHECK_IN = "CheckIn"
    CHECK_OUT = "CheckOut"


@dataclass(frozen=True, slots=True)
class Event:
    """A single status change. Events are never modified once created."""

    kind: EventKind
    timestamp: datetime
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_check_in(self) -> bool:
        return self.kind is EventKind.CHECK_IN


# Insertion order is creation order, which is not necessarily timestamp order.
EventLog = tuple[Event, ...]


@dataclass(frozen=True, slots=True)
class Session:
    """A completed check-in/check-out pair."""

    check_in: Event
    check_out: Event

    @property
    def duration(self) -> timedelta:
        return self.check_out.timestamp - self.check_in.timestamp


@dataclass(frozen=True, slots=True)
class DayView:
    date: date
    events: tuple[Event, ...]
    sessions: tuple[Session, ...]
    total: Optional[timedelta]
    open_session: Optional[Event] = None


class ActivityState(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True, slots=True)
class ActivityStatus:
    state: ActivityState
    open_session: Optional[Event] = None

    @classmethod
    def offline(cls) -> "ActivityStatus":
        return cls(ActivityState.OFFLINE)

    @classmethod
    def online(cls, session: Event) -> "ActivityStatus":
        return cls(ActivityState.ONLINE, session)

    @property
    def is_online(self) -> bool:
        return self.state is ActivityState.ONLINE
