"""
Database commands.
"""
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from typer import Context, Exit, Option

from ...core.blocks import fetch_blocks
from ...core.exceptions import MissingTitlePropertyError
from ...core.utils import slug
from ...markdown import batch_blocks, parse_markdown, render_markdown
from ...sync.engine import get_page_title, get_title_property, page_filename
from ._utils import (
    MainTyper,
    database_title,
    get_root_context,
    load_properties,
    logger,
    print_json,
    refresh,
    title_value,
)

app = MainTyper(
    "db",
    help="Database commands",
)


class ExportFormat(str, Enum):
    markdown = "markdown"
    json = "json"


@app.command("list")
def list_(
    ctx: Context,
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    List databases shared with the integration
    """
    session = get_root_context(ctx).session

    items = [
        {"id": database["id"], "title": database_title(database)}
        for database in session.iter_databases()
    ]

    if json_:
        print_json(items)
    else:
        for item in items:
            logger.info(f"Database {item['id']}: {item['title']}")


@app.command()
def schema(
    ctx: Context,
    database_id: str = Option(..., "--id", help="Database id"),
    json_: bool = Option(False, "--json", help="Output JSON"),
    no_refresh: bool = Option(
        False, "--no-refresh", help="Skip refreshing the local mirror"
    ),
):
    """
    Show database properties and their types
    """
    refresh(ctx, database_id, no_refresh=no_refresh)

    database = get_root_context(ctx).session.retrieve_database(database_id)
    properties = {
        name: prop.get("type")
        for name, prop in (database.get("properties") or {}).items()
    }

    if json_:
        print_json(
            {
                "id": database_id,
                "title": database_title(database),
                "properties": properties,
            }
        )
    else:
        logger.info(f"Database {database_id}: {database_title(database)}")
        for name, prop_type in properties.items():
            logger.info(f"  {name}: {prop_type}")


@app.command()
def pull(
    ctx: Context,
    database_id: str = Option(..., "--id", help="Database id"),
    out: Path
    | None = Option(
        None, "--out", help="Write pages to this file", dir_okay=False
    ),
    no_refresh: bool = Option(
        False, "--no-refresh", help="Skip refreshing the local mirror"
    ),
):
    """
    Query all pages of a database as JSON
    """
    refresh(ctx, database_id, no_refresh=no_refresh)

    session = get_root_context(ctx).session
    pages = list(session.iter_database_pages(database_id))

    if out is None:
        print_json(pages)
    else:
        out.write_text(json.dumps(pages, indent=2), encoding="utf-8")
        logger.info(f"Wrote {len(pages)} pages to '{out}'")


@app.command()
def create(
    ctx: Context,
    database_id: str = Option(..., "--id", help="Database id"),
    title: str = Option(..., "--title", help="Page title"),
    props: Path
    | None = Option(
        None,
        "--props",
        help="JSON file with additional page properties",
        exists=True,
        dir_okay=False,
    ),
    content: Path
    | None = Option(
        None,
        "--content",
        help="Markdown file to append as page content",
        exists=True,
        dir_okay=False,
    ),
    no_refresh: bool = Option(
        False, "--no-refresh", help="Skip refreshing the local mirror"
    ),
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    Create a page in a database
    """
    refresh(ctx, database_id, no_refresh=no_refresh)

    session = get_root_context(ctx).session
    database = session.retrieve_database(database_id)

    try:
        title_property = get_title_property(database)
    except MissingTitlePropertyError as e:
        logger.error(str(e))
        raise Exit(code=1)

    properties: dict[str, Any] = {title_property: title_value(title)}
    properties.update(load_properties(props))

    page = session.create_page(database_id, properties)

    if content is not None:
        blocks = parse_markdown(content.read_text(encoding="utf-8"))
        for batch in batch_blocks(blocks):
            session.append_block_children(
                page["id"], [block.to_api() for block in batch]
            )

    if json_:
        print_json(page)
    else:
        logger.info(f"Created page {page['id']}: {title}")


@app.command()
def export(
    ctx: Context,
    database_id: str = Option(..., "--id", help="Database id"),
    dest: Path = Option(
        Path("notion_export"),
        "--dir",
        help="Output folder",
        file_okay=False,
    ),
    fmt: ExportFormat = Option(
        ExportFormat.markdown, "--format", help="Output format"
    ),
    no_refresh: bool = Option(
        False, "--no-refresh", help="Skip refreshing the local mirror"
    ),
):
    """
    Export database pages to files, without sync metadata
    """
    refresh(ctx, database_id, no_refresh=no_refresh)

    session = get_root_context(ctx).session
    database = session.retrieve_database(database_id)

    try:
        title_property = get_title_property(database)
    except MissingTitlePropertyError as e:
        logger.error(str(e))
        raise Exit(code=1)

    out_dir = dest / slug(database_title(database))
    out_dir.mkdir(parents=True, exist_ok=True)

    count = 0
    for page in session.iter_database_pages(database_id):
        title = get_page_title(page, title_property) or "Untitled"
        path = out_dir / page_filename(title, page["id"])

        if fmt is ExportFormat.json:
            path = path.with_suffix(".json")
            path.write_text(json.dumps(page, indent=2), encoding="utf-8")
        else:
            blocks = fetch_blocks(session, page["id"], logger=logger)
            path.write_text(
                f"# {title}\n\n{render_markdown(blocks)}\n", encoding="utf-8"
            )

        count += 1

    logger.info(f"Exported {count} pages to '{out_dir}' ({fmt.value})")
