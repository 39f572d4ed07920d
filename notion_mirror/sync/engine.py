"""
Bidirectional sync of Notion databases with a folder of Markdown files.

Each database is mirrored to `<root>/<database slug>/`, one file per page.
A pass over a database first pulls pages changed remotely since the last
checkpoint, then pushes files edited locally since they were last written.

Conflicts are resolved by last writer wins: a local edit is only pushed if
the file's modification time is strictly newer than the page's remote
`last_edited_time`, otherwise it's discarded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from logging import Logger
from pathlib import Path
from typing import Any

from ..core.blocks import fetch_blocks
from ..core.exceptions import MissingTitlePropertyError
from ..core.session import Session
from ..core.utils import (
    expand_path,
    id_suffix,
    parse_timestamp,
    slug,
    title_text,
)
from ..markdown import batch_blocks, parse_markdown, render_markdown
from .frontmatter import dump_frontmatter, parse_frontmatter, strip_title
from .state import PageState, SyncState, read_state, write_state

__all__ = [
    "SyncEngine",
    "SyncStats",
    "get_title_property",
    "get_page_title",
    "page_filename",
]


@dataclass(kw_only=True)
class SyncStats:
    """
    Encapsulates statistics for a sync pass.
    """

    database_count: int = 0

    pull_count: int = 0
    """
    Number of pages written to the filesystem.
    """

    push_count: int = 0
    """
    Number of pages whose remote content was replaced by local content.
    """

    discard_count: int = 0
    """
    Number of local edits discarded since the remote page was newer.
    """

    fail_count: int = 0
    """
    Number of pages whose push failed.
    """

    def __iadd__(self, other: SyncStats) -> SyncStats:
        self.database_count += other.database_count
        self.pull_count += other.pull_count
        self.push_count += other.push_count
        self.discard_count += other.discard_count
        self.fail_count += other.fail_count
        return self


class SyncEngine:
    """
    Mirrors databases visible to the integration under a root folder.
    """

    session: Session
    root: Path
    _logger: Logger

    def __init__(
        self,
        session: Session,
        root: str | Path,
        *,
        logger: Logger | None = None,
    ):
        self.session = session
        self.root = expand_path(root)
        self._logger = logger or logging.getLogger()

    def sync_all_databases(self) -> SyncStats:
        """
        Sync every database returned by search, in the order returned, and
        persist state once at the end.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        state = read_state(self.root, logger=self._logger)
        stats = SyncStats()

        for database in self.session.iter_databases():
            stats += self.sync_database(
                database["id"],
                title=title_text(database.get("title")) or None,
                state=state,
            )

        write_state(self.root, state)
        return stats

    def sync_database(
        self,
        database_id: str,
        *,
        title: str | None = None,
        state: SyncState | None = None,
    ) -> SyncStats:
        """
        Pull then push a single database.

        If `state` is provided, it's updated in place and the caller is
        responsible for persisting it. Otherwise state is read from and
        written back to the sync root.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        st = (
            state
            if state is not None
            else read_state(self.root, logger=self._logger)
        )

        database = self.session.retrieve_database(database_id)
        title_property = get_title_property(database)

        title = title or title_text(database.get("title")) or "database"
        folder = self.root / slug(title)
        folder.mkdir(parents=True, exist_ok=True)

        stats = SyncStats(database_count=1)

        self._logger.debug(f"Pulling database '{title}' ({database_id})")
        self._pull(database_id, title_property, folder, st, stats)

        self._logger.debug(f"Pushing database '{title}' ({database_id})")
        self._push(database_id, st, stats)

        if state is None:
            write_state(self.root, st)

        return stats

    def _pull(
        self,
        database_id: str,
        title_property: str,
        folder: Path,
        state: SyncState,
        stats: SyncStats,
    ):
        db_state = state.database(database_id)
        last = db_state.last_pull_timestamp
        latest = last

        query_filter = (
            {
                "timestamp": "last_edited_time",
                "last_edited_time": {"on_or_after": last},
            }
            if last
            else None
        )

        for page in self.session.iter_database_pages(
            database_id, filter=query_filter
        ):
            page_id: str = page["id"]
            edited: str = page["last_edited_time"]

            if not self._has_pending_edit(state.pages.get(page_id), edited):
                self._pull_page(
                    page, database_id, title_property, folder, state
                )
                stats.pull_count += 1

            if latest is None or (
                parse_timestamp(edited) > parse_timestamp(latest)
            ):
                latest = edited

        if latest:
            db_state.last_pull_timestamp = latest

    def _has_pending_edit(
        self, page_state: PageState | None, edited: str
    ) -> bool:
        """
        Check if the file was edited locally since it was last written while
        the remote page is unchanged. Such a page is left for push instead of
        being overwritten. Pages returned again with an unchanged timestamp
        are otherwise rewritten, since edits within the timestamp's
        precision don't advance it.
        """
        if page_state is None or page_state.remote_last_modified != edited:
            return False

        path = Path(page_state.local_file_path)
        return (
            path.is_file()
            and path.stat().st_mtime != page_state.local_file_modified_at
        )

    def _pull_page(
        self,
        page: dict[str, Any],
        database_id: str,
        title_property: str,
        folder: Path,
        state: SyncState,
    ):
        page_id: str = page["id"]
        title = get_page_title(page, title_property) or "Untitled"
        path = folder / page_filename(title, page_id)

        blocks = fetch_blocks(self.session, page_id, logger=self._logger)
        header = dump_frontmatter(
            {
                "page_id": page_id,
                "database_id": database_id,
                "notion_last_edited_time": page["last_edited_time"],
                "url": page.get("url"),
            }
        )
        content = f"{header}\n# {title}\n\n{render_markdown(blocks)}\n"

        path.write_text(content, encoding="utf-8")

        # remove file written under a previous title
        previous = state.pages.get(page_id)
        if previous is not None:
            previous_path = Path(previous.local_file_path)
            if previous_path != path and previous_path.is_file():
                previous_path.unlink()

        state.pages[page_id] = PageState(
            page_id=page_id,
            database_id=database_id,
            local_file_path=str(path),
            remote_last_modified=page["last_edited_time"],
            local_file_modified_at=path.stat().st_mtime,
        )

        self._logger.info(f"Pulled '{title}' -> '{path}'")

    def _push(self, database_id: str, state: SyncState, stats: SyncStats):
        for page_state in state.pages_of(database_id):
            try:
                pushed = self._push_page(page_state)
            except Exception as e:
                self._logger.warning(
                    f"Push skipped for page {page_state.page_id}: {e}"
                )
                stats.fail_count += 1
                continue

            if pushed is True:
                stats.push_count += 1
            elif pushed is False:
                stats.discard_count += 1

    def _push_page(self, page_state: PageState) -> bool | None:
        """
        Push local edits of a page, returning `None` if there were none,
        `True` if pushed or `False` if discarded since remote is newer.
        """
        path = Path(page_state.local_file_path)
        mtime = path.stat().st_mtime

        if mtime == page_state.local_file_modified_at:
            return None

        _, body = parse_frontmatter(path.read_text(encoding="utf-8"))
        body = strip_title(body)

        page = self.session.retrieve_page(page_state.page_id)
        remote = parse_timestamp(page["last_edited_time"])

        if mtime <= remote.timestamp():
            self._logger.info(
                f"Discarding local edit of '{path}': remote page is newer"
            )
            return False

        self._replace_content(page_state.page_id, body)

        page_state.local_file_modified_at = mtime
        page_state.remote_last_modified = self.session.retrieve_page(
            page_state.page_id
        )["last_edited_time"]

        self._logger.info(f"Pushed '{path}'")
        return True

    def _replace_content(self, page_id: str, body: str):
        """
        Replace page's top-level blocks with blocks parsed from Markdown.
        """
        children = list(self.session.iter_block_children(page_id))

        for child in children:
            try:
                self.session.delete_block(child["id"])
            except Exception as e:
                self._logger.debug(
                    f"Could not delete block {child.get('id')}: {e}"
                )

        blocks = parse_markdown(body)
        for batch in batch_blocks(blocks):
            self.session.append_block_children(
                page_id, [block.to_api() for block in batch]
            )


def get_title_property(database: dict[str, Any]) -> str:
    """
    Get name of database's title property.
    """
    for name, prop in (database.get("properties") or {}).items():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return name

    raise MissingTitlePropertyError(database.get("id", "<unknown>"))


def get_page_title(page: dict[str, Any], title_property: str) -> str | None:
    prop = (page.get("properties") or {}).get(title_property) or {}
    return title_text(prop.get("title")) or None


def page_filename(title: str, page_id: str) -> str:
    return f"{slug(title)}-{id_suffix(page_id)}.md"
