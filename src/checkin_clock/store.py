"""Durable storage for the check-in/check-out event log."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

import pydantic
from pydantic import AwareDatetime, BaseModel, ConfigDict, field_validator

from .db import database_connection, fetch_record, write_record
from .errors import CorruptStateError, PersistenceError
from .models import Event, EventKind, EventLog

logger = logging.getLogger(__name__)

DEFAULT_RECORD_NAME = "checkin-app-storage"


class EventRecord(BaseModel):
    """Persisted shape of a single event (schema v1)."""

    id: str
    kind: EventKind
    timestamp: AwareDatetime
    notes: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("timestamp", mode="before")
    @classmethod
    def _iso_timestamp_with_offset(cls, value: object) -> object:
        # Only ISO-8601 strings are accepted; numbers would parse as epoch seconds.
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError("timestamp must be an ISO-8601 string")
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            raise ValueError("timestamp must carry an explicit UTC offset")
        return parsed


class PersistedState(BaseModel):
    events: list[EventRecord]

    model_config = ConfigDict(extra="ignore")


def append(log: EventLog, event: Event) -> EventLog:
    """Return a new log with ``event`` at the end; ``log`` is left untouched."""
    return (*log, event)


def encode_log(log: EventLog) -> str:
    state = PersistedState(
        events=[
            EventRecord(
                id=event.id,
                kind=event.kind,
                timestamp=event.timestamp,
                notes=event.notes,
            )
            for event in log
        ]
    )
    return state.model_dump_json(exclude_none=True)


def decode_log(payload: str) -> EventLog:
    try:
        state = PersistedState.model_validate_json(payload)
    except pydantic.ValidationError as exc:
        raise CorruptStateError(f"Stored event log is invalid: {exc}") from exc

    seen: set[str] = set()
    events: list[Event] = []
    for record in state.events:
        if not record.id:
            raise CorruptStateError("Stored event has an empty id")
        if record.id in seen:
            raise CorruptStateError(f"Duplicate event id in stored log: {record.id}")
        seen.add(record.id)
        events.append(
            Event(
                id=record.id,
                kind=record.kind,
                timestamp=record.timestamp,
                notes=record.notes,
            )
        )
    return tuple(events)


class SqliteEventStore:
    """Keeps the whole event log in one named SQLite record."""

    def __init__(self, db_path: Path, record_name: str = DEFAULT_RECORD_NAME) -> None:
        self.db_path = Path(db_path)
        self.record_name = record_name

    def load(self) -> EventLog:
        if not self.db_path.exists():
            logger.debug("No database at %s; starting with an empty log.", self.db_path)
            return ()
        try:
            with database_connection(self.db_path) as conn:
                payload = fetch_record(conn, self.record_name)
        except sqlite3.Error as exc:
            logger.exception("Failed to read event log from %s", self.db_path)
            raise PersistenceError(f"Could not read {self.db_path}: {exc}") from exc
        if payload is None:
            return ()
        log = decode_log(payload)
        logger.debug("Loaded %d events from %s", len(log), self.db_path)
        return log

    def save(self, log: EventLog) -> None:
        try:
            payload = encode_log(log)
        except (ValueError, TypeError) as exc:
            raise PersistenceError(f"Could not serialize event log: {exc}") from exc
        try:
            with database_connection(self.db_path) as conn:
                write_record(conn, self.record_name, payload)
        except (sqlite3.Error, OSError) as exc:
            logger.exception("Failed to write event log to %s", self.db_path)
            raise PersistenceError(f"Could not write {self.db_path}: {exc}") from exc
        logger.debug("Saved %d events to %s", len(log), self.db_path)


class MemoryEventStore:
    """In-process store using the same encoding as the SQLite store."""

    def __init__(self, payload: Optional[str] = None) -> None:
        self.payload = payload

    def load(self) -> EventLog:
        if self.payload is None:
            return ()
        return decode_log(self.payload)

    def save(self, log: EventLog) -> None:
        try:
            self.payload = encode_log(log)
        except (ValueError, TypeError) as exc:
            raise PersistenceError(f"Could not serialize event log: {exc}") from exc

    @classmethod
    def from_json(cls, data: object) -> "MemoryEventStore":
        return cls(json.dumps(data))
