"""
Utilities specific to CLI functionality.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from click import Parameter
from rich.console import Console
from rich.logging import RichHandler
from typer import Context, Exit, Typer

from ...core.utils import title_text
from ...sync.refresh import ensure_fresh

if TYPE_CHECKING:
    from .main import RootContext


console = Console()

rich_handler = RichHandler(
    console=console,
    rich_tracebacks=True,
    show_level=True,
    show_time=True,
    show_path=False,
)
rich_handler.setFormatter(logging.Formatter("%(message)s"))

logger = logging.getLogger("notion-mirror")
logger.setLevel(logging.INFO)
logger.addHandler(rich_handler)
logger.propagate = False


class MainTyper(Typer):
    """
    Typer app with preconfigured settings.
    """

    def __init__(self, name: str, *, help: str):
        return super().__init__(
            name=name,
            help=help,
            rich_markup_mode="markdown",
            no_args_is_help=True,
            add_completion=False,
        )


def get_root_context(ctx: Context) -> RootContext:
    from .main import RootContext

    root_context = ctx.obj
    assert isinstance(root_context, RootContext)
    return root_context


def lookup_param(ctx: Context, name: str) -> Parameter:
    """
    Lookup param by name.
    """
    param = next((p for p in ctx.command.params if p.name == name), None)
    assert param, f"Could not find param with name: {name}"
    return param


def print_json(obj: Any):
    """
    Print object as indented JSON, bypassing rich markup.
    """
    console.print_json(json.dumps(obj, default=str))


def refresh(ctx: Context, database_id: str, *, no_refresh: bool):
    """
    Refresh the local mirror of a database before running a command on it,
    unless disabled.
    """
    if no_refresh:
        return

    root_context = get_root_context(ctx)

    try:
        ensure_fresh(
            root_context.session,
            database_id,
            root=root_context.instance.sync_dir,
            ttl=root_context.instance.refresh_ttl,
            logger=logger,
        )
    except Exception as e:
        logger.error(f"Failed to refresh database {database_id}: {e}")
        raise Exit(code=1)


def database_title(database: dict[str, Any]) -> str:
    return title_text(database.get("title")) or "database"


def load_properties(path: Path | None) -> dict[str, Any]:
    """
    Load page properties from a JSON file, exiting if it doesn't hold an
    object.
    """
    if path is None:
        return {}

    try:
        properties = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read properties from '{path}': {e}")
        raise Exit(code=1)

    if not isinstance(properties, dict):
        logger.error(f"Properties in '{path}' must be a JSON object")
        raise Exit(code=1)

    return properties


def title_value(title: str) -> dict[str, Any]:
    """
    Get property value setting a title.
    """
    return {"title": [{"type": "text", "text": {"content": title}}]}
