"""
Test polling loop.
"""

import logging
from threading import Event

from notion_mirror import SyncStats, run_daemon


class FakeEngine:
    def __init__(self, failures: int = 0, stop_event: Event | None = None):
        self.passes = 0
        self.failures = failures
        self.stop_event = stop_event

    def sync_all_databases(self) -> SyncStats:
        self.passes += 1

        if self.stop_event is not None:
            self.stop_event.set()

        if self.passes <= self.failures:
            raise RuntimeError("connection lost")

        return SyncStats(database_count=1, pull_count=2)


def test_max_passes(caplog):
    caplog.set_level(logging.INFO)
    engine = FakeEngine()

    passes = run_daemon(engine, 0.0, max_passes=3)  # type: ignore[arg-type]

    assert passes == 3
    assert engine.passes == 3
    assert "Synced 1 databases (2 pulled, 0 pushed)" in caplog.text


def test_error_continues(caplog):
    engine = FakeEngine(failures=1)

    passes = run_daemon(engine, 0.0, max_passes=2)  # type: ignore[arg-type]

    assert passes == 2
    assert engine.passes == 2
    assert "Sync pass failed: connection lost" in caplog.text


def test_stop_event():
    """
    A pass in progress completes before the loop observes the stop flag.
    """
    stop_event = Event()
    engine = FakeEngine(stop_event=stop_event)

    passes = run_daemon(
        engine, 3600.0, stop_event=stop_event  # type: ignore[arg-type]
    )

    assert passes == 1
    assert engine.passes == 1


def test_stopped():
    stop_event = Event()
    stop_event.set()
    engine = FakeEngine()

    passes = run_daemon(
        engine, 0.0, stop_event=stop_event  # type: ignore[arg-type]
    )

    assert passes == 0
    assert engine.passes == 0
