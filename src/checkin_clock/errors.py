"""Exceptions raised by the accounting engine."""

from __future__ import annotations

from typing import Optional

from .models import Event


class CheckinClockError(Exception):
    """Base class for all engine errors."""


class CorruptStateError(CheckinClockError):
    """Persisted state exists but does not match the expected schema."""


class PersistenceError(CheckinClockError):
    """Writing (or reading) the durable log failed."""

    def __init__(self, message: str, *, event: Optional[Event] = None) -> None:
        super().__init__(message)
        self.event = event


class ValidationError(CheckinClockError):
    """A query received malformed input."""
