"""
Tests for the acknowledged order store.
"""

import json
from datetime import timedelta

from kitchen_display.ack_store import AckStore
from tests.conftest import T0


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class TestAckStore:
    """Durable acknowledgments with retention."""

    def test_in_memory_store(self):
        store = AckStore()
        store.acknowledge(1)

        assert 1 in store
        assert store.is_acknowledged(1)
        assert not store.is_acknowledged(2)
        assert store.path is None

    def test_survives_restart(self, tmp_path):
        path = tmp_path / "acks.json"
        clock = Clock(T0)
        AckStore(path, clock=clock).acknowledge(42)

        reopened = AckStore(path, clock=clock)

        assert 42 in reopened
        assert json.loads(path.read_text())["42"] == T0.isoformat()

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "acks.json"

        AckStore(path).acknowledge(1)

        assert path.exists()
        assert not (path.parent / "acks.json.tmp").exists()

    def test_expired_entries_evicted_on_load(self, tmp_path):
        path = tmp_path / "acks.json"
        clock = Clock(T0)
        store = AckStore(path, retention=timedelta(hours=24), clock=clock)
        store.acknowledge(1)
        clock.now = T0 + timedelta(hours=20)
        store.acknowledge(2)

        clock.now = T0 + timedelta(hours=25)
        reopened = AckStore(path, retention=timedelta(hours=24), clock=clock)

        assert 1 not in reopened
        assert 2 in reopened
        assert list(json.loads(path.read_text())) == ["2"]

    def test_prune_returns_removed_count(self):
        clock = Clock(T0)
        store = AckStore(retention=timedelta(hours=1), clock=clock)
        store.acknowledge(1)
        store.acknowledge(2)

        clock.now = T0 + timedelta(hours=2)

        assert store.prune() == 2
        assert len(store) == 0

    def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "acks.json"
        path.write_text("{not json")

        store = AckStore(path)

        assert len(store) == 0
        store.acknowledge(5)
        assert json.loads(path.read_text()).keys() == {"5"}

    def test_timestamps_without_timezone_read_as_utc(self, tmp_path):
        path = tmp_path / "acks.json"
        path.write_text(json.dumps({"5": "2026-01-01T10:00:00", "6": "2025-12-30T10:00:00"}))

        store = AckStore(path, retention=timedelta(hours=24), clock=Clock(T0))

        assert 5 in store
        assert 6 not in store
        assert json.loads(path.read_text()) == {"5": "2026-01-01T10:00:00+00:00"}

    def test_non_string_timestamp_is_ignored(self, tmp_path):
        path = tmp_path / "acks.json"
        path.write_text(json.dumps({"5": 1700000000}))

        store = AckStore(path, clock=Clock(T0))

        assert len(store) == 0
