"""Configuration models and helpers for the check-in clock."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from .paths import get_db_path
from .store import DEFAULT_RECORD_NAME


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration shared by the CLI and the web API."""

    db_path: Optional[Path] = None
    record_name: str = DEFAULT_RECORD_NAME
    poll_interval: timedelta = timedelta(seconds=1)

    @classmethod
    def from_options(
        cls,
        db_path: Optional[Path] = None,
        record_name: Optional[str] = None,
        poll_seconds: Optional[float] = None,
    ) -> "TrackerSettings":
        return cls(
            db_path=Path(db_path) if db_path is not None else None,
            record_name=record_name or DEFAULT_RECORD_NAME,
            poll_interval=timedelta(seconds=poll_seconds if poll_seconds is not None else 1.0),
        )

    def resolved_db_path(self) -> Path:
        return self.db_path or get_db_path()
