"""
Bidirectional sync between Notion databases and local Markdown files.
"""

from .daemon import run_daemon
from .engine import SyncEngine, SyncStats
from .refresh import ensure_fresh
from .state import DatabaseState, PageState, SyncState, read_state, write_state

__all__ = [
    "DatabaseState",
    "PageState",
    "SyncEngine",
    "SyncState",
    "SyncStats",
    "ensure_fresh",
    "read_state",
    "run_daemon",
    "write_state",
]
