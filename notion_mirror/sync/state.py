"""
Persisted sync checkpoints.

State is a single JSON document under the sync root, read once at the start
of a pass and rewritten wholesale at the end. Writes go through a temporary
file which is then renamed over the state file, so readers never observe a
partial document.
"""
from __future__ import annotations

import logging
import os
from logging import Logger
from pathlib import Path

from pydantic import BaseModel, ValidationError

__all__ = [
    "STATE_FILENAME",
    "DatabaseState",
    "PageState",
    "SyncState",
    "read_state",
    "write_state",
]

STATE_FILENAME = ".state.json"
"""
Name of state document under the sync root.
"""


class PageState(BaseModel):
    """
    Checkpoint of a single mirrored page.
    """

    page_id: str
    database_id: str | None = None

    local_file_path: str
    """
    Path of the Markdown file mirroring this page.
    """

    remote_last_modified: str
    """
    Page's `last_edited_time` as of the last pull or push.
    """

    local_file_modified_at: float
    """
    File mtime observed right after the file was last written or pushed;
    baseline for detecting local edits.
    """


class DatabaseState(BaseModel):
    """
    Checkpoint of a mirrored database.
    """

    last_pull_timestamp: str | None = None
    """
    Latest `last_edited_time` among pages pulled from this database, used as
    inclusive lower bound of the next pull.
    """

    last_refresh_at: float | None = None
    """
    Wall-clock time of the last refresh triggered by {obj}`ensure_fresh`.
    """


class SyncState(BaseModel):
    """
    Entire persisted state.
    """

    databases: dict[str, DatabaseState] = {}
    pages: dict[str, PageState] = {}

    def database(self, database_id: str) -> DatabaseState:
        """
        Get state of database, creating it if needed.
        """
        if database_id not in self.databases:
            self.databases[database_id] = DatabaseState()
        return self.databases[database_id]

    def pages_of(self, database_id: str) -> list[PageState]:
        return [p for p in self.pages.values() if p.database_id == database_id]


def read_state(root: Path, *, logger: Logger | None = None) -> SyncState:
    """
    Read state from sync root. A missing or unreadable document yields an
    empty state.
    """
    logger = logger or logging.getLogger()
    path = Path(root) / STATE_FILENAME

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return SyncState()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read sync state '{path}': {e}")
        return SyncState()

    try:
        return SyncState.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid sync state '{path}': {e}")
        return SyncState()


def write_state(root: Path, state: SyncState):
    """
    Atomically replace state document under sync root.
    """
    path = Path(root) / STATE_FILENAME
    tmp_path = path.with_name(path.name + ".tmp")

    tmp_path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    os.replace(tmp_path, path)
