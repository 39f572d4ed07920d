"""
Interface to configuration as persisted in .yaml file or provided through
the environment.
"""
from __future__ import annotations

from logging import Logger
from pathlib import Path
from typing import Any

from pydantic import BaseModel, field_serializer, field_validator

from ..core import Session
from ..core.session import DEFAULT_BASE_URL, DEFAULT_NOTION_VERSION
from ..sync.refresh import DEFAULT_REFRESH_TTL
from .yaml_model import BaseYamlModel

__all__ = [
    "Config",
    "InstanceConfig",
    "DEFAULT_SYNC_DIR",
]

DEFAULT_SYNC_DIR = "~/notion-sync"
"""
Default root folder of the local mirror.
"""


class InstanceConfig(BaseModel):
    """
    Encapsulates info for accessing a Notion workspace and mirroring it.
    """

    token: str
    """
    Integration token.
    """

    notion_version: str = DEFAULT_NOTION_VERSION
    base_url: str = DEFAULT_BASE_URL

    sync_dir: Path = Path(DEFAULT_SYNC_DIR)
    """
    Root folder of the local mirror.
    """

    refresh_ttl: float = DEFAULT_REFRESH_TTL
    """
    Seconds for which a database refreshed by on-demand commands is
    considered fresh.
    """

    @field_validator("token")
    @classmethod
    def validate_token(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token must not be empty")
        return value.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        # the SDK appends /v1 itself
        value = value.rstrip("/")
        if value.endswith("/v1"):
            value = value[: -len("/v1")]
        return value

    @field_validator("sync_dir", mode="before")
    @classmethod
    def validate_sync_dir(cls, value: Any) -> Any:
        if isinstance(value, (str, Path)):
            return Path(value).expanduser()
        return value

    @field_serializer("sync_dir")
    def serialize_sync_dir(self, value: Path) -> str:
        return str(value)

    def create_session(self, *, logger: Logger) -> Session:
        """
        Get session from this instance's fields.
        """
        return Session(
            self.token,
            notion_version=self.notion_version,
            base_url=self.base_url,
            logger=logger,
        )


class Config(BaseYamlModel):
    """
    Encapsulates configuration for use in tools.
    """

    instances: dict[str, InstanceConfig]
    """
    Mapping of instance names to configs, e.g. one per workspace.
    """
