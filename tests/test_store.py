"""Tests for event log persistence."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from checkin_clock.db import database_connection, fetch_record, write_record
from checkin_clock.errors import CorruptStateError, PersistenceError
from checkin_clock.models import Event, EventKind
from checkin_clock.store import (
    DEFAULT_RECORD_NAME,
    MemoryEventStore,
    SqliteEventStore,
    append,
)


def sample_log():
    plus_five = timezone(timedelta(hours=5, minutes=30))
    return (
        Event(
            kind=EventKind.CHECK_IN,
            timestamp=datetime(2024, 1, 5, 9, 0, 0, 123456, tzinfo=timezone.utc),
            notes="standup",
        ),
        Event(
            kind=EventKind.CHECK_OUT,
            timestamp=datetime(2024, 1, 5, 17, 30, 0, 1000, tzinfo=plus_five),
        ),
        # Earlier timestamp than its predecessor; order must survive as-is.
        Event(
            kind=EventKind.CHECK_IN,
            timestamp=datetime(2024, 1, 5, 8, 0, tzinfo=timezone.utc),
        ),
    )


def write_raw(db_path, payload):
    with database_connection(db_path) as conn:
        write_record(conn, DEFAULT_RECORD_NAME, payload)


class TestAppend:
    def test_returns_new_log(self):
        original = sample_log()[:1]
        event = sample_log()[1]
        updated = append(original, event)
        assert updated == original + (event,)
        assert len(original) == 1


class TestSqliteEventStore:
    def test_missing_database_loads_empty(self, tmp_path):
        db_path = tmp_path / "checkins.sqlite3"
        assert SqliteEventStore(db_path).load() == ()
        assert not db_path.exists()

    def test_missing_record_loads_empty(self, tmp_path):
        db_path = tmp_path / "checkins.sqlite3"
        SqliteEventStore(db_path, record_name="other").save(sample_log())
        assert SqliteEventStore(db_path).load() == ()

    def test_round_trip(self, tmp_path):
        store = SqliteEventStore(tmp_path / "checkins.sqlite3")
        log = sample_log()
        store.save(log)
        loaded = store.load()
        assert loaded == log
        assert [e.id for e in loaded] == [e.id for e in log]
        assert all(a.timestamp == b.timestamp for a, b in zip(loaded, log))

    def test_round_trip_empty_log(self, tmp_path):
        store = SqliteEventStore(tmp_path / "checkins.sqlite3")
        store.save(())
        assert store.load() == ()

    def test_save_replaces_previous_log(self, tmp_path):
        store = SqliteEventStore(tmp_path / "checkins.sqlite3")
        log = sample_log()
        store.save(log[:1])
        store.save(log)
        assert store.load() == log

    def test_timestamps_stored_with_offset(self, tmp_path):
        db_path = tmp_path / "checkins.sqlite3"
        SqliteEventStore(db_path).save(sample_log())
        with database_connection(db_path) as conn:
            payload = json.loads(fetch_record(conn, DEFAULT_RECORD_NAME))
        stamps = [event["timestamp"] for event in payload["events"]]
        assert stamps[0].endswith("Z") or stamps[0].endswith("+00:00")
        assert stamps[1].endswith("+05:30")
        assert payload["events"][0]["kind"] == "CheckIn"
        assert payload["events"][0]["notes"] == "standup"
        assert "notes" not in payload["events"][1]

    def test_unknown_fields_are_ignored(self, tmp_path):
        db_path = tmp_path / "checkins.sqlite3"
        write_raw(
            db_path,
            json.dumps(
                {
                    "version": 1,
                    "events": [
                        {
                            "id": "a",
                            "kind": "CheckIn",
                            "timestamp": "2024-01-05T09:00:00+00:00",
                            "color": "blue",
                        }
                    ],
                }
            ),
        )
        (event,) = SqliteEventStore(db_path).load()
        assert event.id == "a"
        assert event.kind is EventKind.CHECK_IN
        assert event.timestamp == datetime(2024, 1, 5, 9, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            json.dumps([]),
            json.dumps({"records": []}),
            json.dumps({"events": [{"kind": "CheckIn", "timestamp": "2024-01-05T09:00:00Z"}]}),
            json.dumps({"events": [{"id": "", "kind": "CheckIn", "timestamp": "2024-01-05T09:00:00Z"}]}),
            json.dumps({"events": [{"id": "a", "kind": "check-in", "timestamp": "2024-01-05T09:00:00Z"}]}),
            json.dumps({"events": [{"id": "a", "kind": "CheckIn", "timestamp": "yesterday"}]}),
            json.dumps({"events": [{"id": "a", "kind": "CheckIn", "timestamp": "2024-01-05T09:00:00"}]}),
            json.dumps({"events": [{"id": "a", "kind": "CheckIn", "timestamp": 1704445200}]}),
            json.dumps({"events": [{"id": "a", "kind": "CheckIn", "timestamp": 1704445200.5}]}),
            json.dumps({"events": [{"id": "a", "kind": "CheckIn", "timestamp": "1704445200"}]}),
            json.dumps(
                {
                    "events": [
                        {"id": "a", "kind": "CheckIn", "timestamp": "2024-01-05T09:00:00Z"},
                        {"id": "a", "kind": "CheckOut", "timestamp": "2024-01-05T10:00:00Z"},
                    ]
                }
            ),
        ],
    )
    def test_corrupt_payload_raises(self, tmp_path, payload):
        db_path = tmp_path / "checkins.sqlite3"
        write_raw(db_path, payload)
        with pytest.raises(CorruptStateError):
            SqliteEventStore(db_path).load()

    def test_unwritable_location_raises_persistence_error(self, tmp_path):
        # A directory cannot be opened as a database file.
        store = SqliteEventStore(tmp_path)
        with pytest.raises(PersistenceError):
            store.save(sample_log())


class TestMemoryEventStore:
    def test_round_trip(self):
        store = MemoryEventStore()
        assert store.load() == ()
        log = sample_log()
        store.save(log)
        assert store.load() == log

    def test_corrupt_payload_raises(self):
        store = MemoryEventStore.from_json({"events": [{"id": "a", "kind": "Break"}]})
        with pytest.raises(CorruptStateError):
            store.load()

    def test_epoch_timestamp_is_corrupt(self):
        store = MemoryEventStore.from_json(
            {"events": [{"id": "a", "kind": "CheckIn", "timestamp": 1704445200}]}
        )
        with pytest.raises(CorruptStateError):
            store.load()
