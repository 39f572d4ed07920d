import datetime
import itertools
import logging
from types import SimpleNamespace
from typing import Any

from pytest import fixture

from notion_mirror import RetryPolicy, Session

logging.basicConfig(level=logging.WARNING)

PAGE_SIZE = 2
"""
Number of results per page returned by the fake API, small enough that
pagination is exercised.
"""


def iso(ts: float) -> str:
    """
    Format epoch seconds as API timestamp.
    """
    dt = datetime.datetime.fromtimestamp(ts, tz=datetime.timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def rich_text(text: str, **annotations) -> list[dict[str, Any]]:
    return [
        {
            "type": "text",
            "text": {"content": text},
            "plain_text": text,
            "annotations": annotations,
            "href": None,
        }
    ]


def raw_block(block_type: str, text: str | None = None, **payload) -> dict:
    """
    Create raw block as returned by the API.
    """
    if text is not None:
        payload["rich_text"] = rich_text(text)
    return {"object": "block", "type": block_type, block_type: payload}


class FakeError(Exception):
    """
    Error carrying an HTTP status, like the SDK's response errors.
    """

    def __init__(self, status: int, headers: dict | None = None):
        super().__init__(f"status {status}")
        self.status = status
        self.headers = headers or {}


class FakeNotion:
    """
    In-memory stand-in for `notion_client.Client` recording every call.
    """

    def __init__(self):
        self.database_data: dict[str, dict] = {}
        self.page_data: dict[str, dict] = {}
        self.block_children: dict[str, list[dict]] = {}
        self.failing_children: set[str] = set()
        self.failing_pages: set[str] = set()
        self.calls: list[tuple[str, dict]] = []
        self.now = "2030-01-01T00:00:00.000Z"
        self._ids = itertools.count(1)

        self.databases = SimpleNamespace(
            retrieve=self._retrieve_database, query=self._query_database
        )
        self.pages = SimpleNamespace(
            create=self._create_page,
            retrieve=self._retrieve_page,
            update=self._update_page,
        )
        self.blocks = SimpleNamespace(
            delete=self._delete_block,
            children=SimpleNamespace(
                list=self._list_children, append=self._append_children
            ),
        )
        self.users = SimpleNamespace(me=self._me)

    # setup helpers

    def add_database(
        self,
        database_id: str,
        title: str,
        *,
        title_property: str | None = "Name",
    ) -> dict:
        properties: dict[str, Any] = {"Tags": {"type": "multi_select"}}
        if title_property:
            properties[title_property] = {"type": "title"}

        database = {
            "object": "database",
            "id": database_id,
            "title": rich_text(title),
            "properties": properties,
        }
        self.database_data[database_id] = database
        return database

    def add_page(
        self,
        database_id: str,
        page_id: str,
        title: str,
        edited: str,
        blocks: list[dict] | None = None,
    ) -> dict:
        page = {
            "object": "page",
            "id": page_id,
            "parent": {"type": "database_id", "database_id": database_id},
            "url": f"https://www.notion.so/{page_id.replace('-', '')}",
            "last_edited_time": edited,
            "properties": {
                "Name": {"type": "title", "title": rich_text(title)},
            },
        }
        self.page_data[page_id] = page
        self.set_children(page_id, blocks or [])
        return page

    def set_children(self, block_id: str, blocks: list[dict]):
        children = []
        for block in blocks:
            block = dict(block)
            nested = block.pop("children", None)
            block.setdefault("id", f"block-{next(self._ids)}")
            block["has_children"] = bool(nested)
            if nested:
                self.set_children(block["id"], nested)
            children.append(block)
        self.block_children[block_id] = children

    def calls_to(self, name: str) -> list[dict]:
        return [kwargs for call, kwargs in self.calls if call == name]

    # API

    def search(self, **kwargs):
        self.calls.append(("search", kwargs))
        results = list(self.database_data.values())
        return self._paginate(results, kwargs.get("start_cursor"))

    def _retrieve_database(self, **kwargs):
        self.calls.append(("databases.retrieve", kwargs))
        return self.database_data[kwargs["database_id"]]

    def _query_database(self, **kwargs):
        self.calls.append(("databases.query", kwargs))
        database_id = kwargs["database_id"]
        pages = [
            p
            for p in self.page_data.values()
            if p["parent"]["database_id"] == database_id
        ]

        query_filter = kwargs.get("filter")
        if query_filter:
            lower = _ts(query_filter["last_edited_time"]["on_or_after"])
            pages = [p for p in pages if _ts(p["last_edited_time"]) >= lower]

        return self._paginate(pages, kwargs.get("start_cursor"))

    def _retrieve_page(self, **kwargs):
        self.calls.append(("pages.retrieve", kwargs))
        page_id = kwargs["page_id"]
        if page_id in self.failing_pages:
            raise FakeError(400)
        return dict(self.page_data[page_id])

    def _create_page(self, **kwargs):
        self.calls.append(("pages.create", kwargs))
        page_id = f"page-{next(self._ids)}"
        page = {
            "object": "page",
            "id": page_id,
            "parent": {
                "type": "database_id",
                "database_id": kwargs["parent"]["database_id"],
            },
            "url": f"https://www.notion.so/{page_id}",
            "last_edited_time": self.now,
            "properties": kwargs["properties"],
        }
        self.page_data[page_id] = page
        self.block_children[page_id] = []
        return page

    def _update_page(self, **kwargs):
        self.calls.append(("pages.update", kwargs))
        page = self.page_data[kwargs["page_id"]]
        for key, value in kwargs.items():
            if key == "properties":
                page["properties"].update(value)
            elif key != "page_id":
                page[key] = value
        return page

    def _list_children(self, **kwargs):
        self.calls.append(("blocks.children.list", kwargs))
        block_id = kwargs["block_id"]
        if block_id in self.failing_children:
            raise FakeError(400)
        return self._paginate(
            self.block_children.get(block_id, []), kwargs.get("start_cursor")
        )

    def _append_children(self, **kwargs):
        self.calls.append(("blocks.children.append", kwargs))
        block_id = kwargs["block_id"]
        assert len(kwargs["children"]) <= 100

        for child in kwargs["children"]:
            stored = dict(child, has_children=False)
            stored["id"] = f"block-{next(self._ids)}"
            self.block_children.setdefault(block_id, []).append(stored)

        if block_id in self.page_data:
            self.page_data[block_id]["last_edited_time"] = self.now

        return {"results": kwargs["children"]}

    def _delete_block(self, **kwargs):
        self.calls.append(("blocks.delete", kwargs))
        block_id = kwargs["block_id"]
        for children in self.block_children.values():
            children[:] = [c for c in children if c["id"] != block_id]
        return {"id": block_id, "archived": True}

    def _me(self, **kwargs):
        self.calls.append(("users.me", kwargs))
        return {"object": "user", "id": "bot-1", "name": "Mirror Bot"}

    def _paginate(self, results: list, cursor: str | None) -> dict:
        start = int(cursor) if cursor else 0
        end = start + PAGE_SIZE
        has_more = end < len(results)
        return {
            "object": "list",
            "results": results[start:end],
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }


def _ts(value: str) -> float:
    dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt.timestamp()


@fixture
def fake_notion() -> FakeNotion:
    return FakeNotion()


@fixture
def session(fake_notion: FakeNotion) -> Session:
    return Session(
        client=fake_notion,  # type: ignore[arg-type]
        policy=RetryPolicy(sleep=lambda _: None),
    )
