"""
Polling loop running sync passes at a fixed interval.
"""
from __future__ import annotations

import logging
import time
from logging import Logger
from threading import Event

from .engine import SyncEngine

__all__ = [
    "MIN_INTERVAL",
    "run_daemon",
]

MIN_INTERVAL = 10.0
"""
Minimum number of seconds between the start of consecutive passes.
"""


def run_daemon(
    engine: SyncEngine,
    interval: float,
    *,
    stop_event: Event | None = None,
    max_passes: int | None = None,
    logger: Logger | None = None,
) -> int:
    """
    Run full sync passes until `stop_event` is set or `max_passes` passes
    have run, returning the number of passes.

    The stop flag is only checked between passes; a pass in progress always
    runs to completion. Errors of a pass are logged and don't stop the loop.
    """
    logger = logger or logging.getLogger()
    stop_event = stop_event or Event()
    passes = 0

    while not stop_event.is_set():
        started = time.monotonic()

        try:
            stats = engine.sync_all_databases()
        except Exception as e:
            logger.error(f"Sync pass failed: {e}")
        else:
            logger.info(
                f"Synced {stats.database_count} databases "
                f"({stats.pull_count} pulled, {stats.push_count} pushed)"
            )

        passes += 1
        if max_passes is not None and passes >= max_passes:
            break

        elapsed = time.monotonic() - started
        stop_event.wait(max(0.0, interval - elapsed))

    return passes
