"""
Implementation of session functionality.
"""

from __future__ import annotations

import logging
from logging import Logger
from typing import Any, Iterator

from notion_client import Client
from notion_client.helpers import iterate_paginated_api

from .exceptions import ConfigError
from .retry import RetryPolicy, with_retry

__all__ = [
    "Session",
    "DEFAULT_BASE_URL",
    "DEFAULT_NOTION_VERSION",
]

DEFAULT_NOTION_VERSION = "2022-06-28"
"""
Notion API version sent with each request unless overridden.
"""

DEFAULT_BASE_URL = "https://api.notion.com"
"""
Notion API base URL, without the `/v1` suffix.
"""


class Session:
    """
    Interface to the Notion API.

    Each method maps to a single endpoint and is retried according to the
    session's {obj}`RetryPolicy`. Methods return the raw response dicts.
    Paginated endpoints additionally have an `iter_*` variant which follows
    cursors until exhausted, retrying each page request individually.
    """

    _client: Client
    """
    SDK client object.
    """

    _policy: RetryPolicy
    """
    Backoff parameters for every call.
    """

    _logger: Logger
    """
    Logger for retries and diagnostics.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        notion_version: str = DEFAULT_NOTION_VERSION,
        base_url: str = DEFAULT_BASE_URL,
        client: Client | None = None,
        policy: RetryPolicy | None = None,
        logger: Logger | None = None,
    ):
        """
        :param token: Integration token, required unless `client` is given
        :param notion_version: API version header
        :param base_url: API base URL
        :param client: Preconfigured client, primarily for testing
        :param policy: Retry policy, or `None` for defaults
        :param logger: Logger to use, or `None` to use default logger
        """
        if client is None:
            if not token:
                raise ConfigError("Notion integration token is required")

            client = Client(
                auth=token,
                notion_version=notion_version,
                base_url=base_url,
            )

        self._client = client
        self._policy = policy or RetryPolicy()
        self._logger = logger or logging.getLogger()

    def __repr__(self):
        return f"Session(policy={self._policy})"

    @property
    def client(self) -> Client:
        """
        Underlying SDK client.
        """
        return self._client

    def me(self) -> dict[str, Any]:
        """
        Get the bot user associated with the token.
        """
        return self._call("users.me", self._client.users.me)

    def search(self, **kwargs) -> dict[str, Any]:
        return self._call("search", self._client.search, **kwargs)

    def retrieve_database(self, database_id: str) -> dict[str, Any]:
        return self._call(
            "databases.retrieve",
            self._client.databases.retrieve,
            database_id=database_id,
        )

    def query_database(self, database_id: str, **kwargs) -> dict[str, Any]:
        return self._call(
            "databases.query",
            self._client.databases.query,
            database_id=database_id,
            **kwargs,
        )

    def retrieve_page(self, page_id: str) -> dict[str, Any]:
        return self._call(
            "pages.retrieve", self._client.pages.retrieve, page_id=page_id
        )

    def create_page(
        self, database_id: str, properties: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Create a page in a database.
        """
        return self._call(
            "pages.create",
            self._client.pages.create,
            parent={"database_id": database_id},
            properties=properties,
        )

    def update_page(self, page_id: str, **kwargs) -> dict[str, Any]:
        return self._call(
            "pages.update",
            self._client.pages.update,
            page_id=page_id,
            **kwargs,
        )

    def list_block_children(self, block_id: str, **kwargs) -> dict[str, Any]:
        return self._call(
            "blocks.children.list",
            self._client.blocks.children.list,
            block_id=block_id,
            **kwargs,
        )

    def append_block_children(
        self, block_id: str, children: list[dict[str, Any]]
    ) -> dict[str, Any]:
        return self._call(
            "blocks.children.append",
            self._client.blocks.children.append,
            block_id=block_id,
            children=children,
        )

    def delete_block(self, block_id: str) -> dict[str, Any]:
        return self._call(
            "blocks.delete", self._client.blocks.delete, block_id=block_id
        )

    def iter_search(self, **kwargs) -> Iterator[dict[str, Any]]:
        """
        Iterate over all search results.
        """
        return iterate_paginated_api(self.search, **kwargs)

    def iter_databases(self) -> Iterator[dict[str, Any]]:
        """
        Iterate over all databases shared with the integration.
        """
        return self.iter_search(
            filter={"property": "object", "value": "database"}
        )

    def iter_database_pages(
        self, database_id: str, **kwargs
    ) -> Iterator[dict[str, Any]]:
        """
        Iterate over all pages returned by a database query.
        """
        return iterate_paginated_api(
            self.query_database, database_id=database_id, **kwargs
        )

    def iter_block_children(self, block_id: str) -> Iterator[dict[str, Any]]:
        """
        Iterate over the direct children of a block or page.
        """
        return iterate_paginated_api(
            self.list_block_children, block_id=block_id
        )

    def _call(self, name: str, func, **kwargs) -> Any:
        # drop unset cursors and filters
        kwargs = {k: v for k, v in kwargs.items() if v is not None}

        return with_retry(
            lambda: func(**kwargs),
            policy=self._policy,
            logger=self._logger,
            name=name,
        )
