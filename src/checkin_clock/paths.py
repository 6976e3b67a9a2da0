"""Helpers for locating application directories."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "CheckinClock"
APP_AUTHOR = "CheckinClock"

# Overrides the default database location when set.
DB_PATH_ENV = "CHECKIN_CLOCK_DB"


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
    path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    override = os.environ.get(DB_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return get_data_dir() / "checkins.sqlite3"


def get_log_path() -> Path:
    return get_data_dir() / "checkin-clock.log"
