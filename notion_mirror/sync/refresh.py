"""
Keep the local mirror of a database from silently drifting.
"""
from __future__ import annotations

import logging
import time
from logging import Logger
from pathlib import Path
from typing import Callable

from ..core.session import Session
from ..core.utils import expand_path
from .engine import SyncEngine
from .state import read_state, write_state

__all__ = [
    "DEFAULT_REFRESH_TTL",
    "ensure_fresh",
]

DEFAULT_REFRESH_TTL = 60.0
"""
Seconds for which a refreshed database is considered fresh.
"""


def ensure_fresh(
    session: Session,
    database_id: str,
    *,
    root: str | Path,
    ttl: float = DEFAULT_REFRESH_TTL,
    logger: Logger | None = None,
    clock: Callable[[], float] = time.time,
) -> bool:
    """
    Sync a database unless it was refreshed within the last `ttl` seconds,
    returning whether a sync was performed.

    The refresh time is stamped even if the sync pulled nothing, so repeated
    invocations within the window don't trigger further syncs.
    """
    logger = logger or logging.getLogger()
    root = expand_path(root)
    now = clock()

    state = read_state(root, logger=logger)
    db_state = state.databases.get(database_id)

    if db_state and db_state.last_refresh_at is not None:
        if now - db_state.last_refresh_at < ttl:
            logger.debug(f"Database {database_id} is fresh, skipping refresh")
            return False

    logger.info(f"Refreshing local mirror of database {database_id}")
    SyncEngine(session, root, logger=logger).sync_database(database_id)

    # reload since the sync persisted its own updates
    state = read_state(root, logger=logger)
    state.database(database_id).last_refresh_at = now
    write_state(root, state)

    return True
