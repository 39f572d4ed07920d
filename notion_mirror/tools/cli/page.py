"""
Page commands.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from typer import Context, Exit, Option

from ...core.utils import title_text
from ...markdown import batch_blocks, parse_markdown
from ._utils import (
    MainTyper,
    get_root_context,
    load_properties,
    logger,
    print_json,
    title_value,
)

app = MainTyper(
    "page",
    help="Page commands",
)


@app.command()
def get(
    ctx: Context,
    page_id: str = Option(..., "--id", help="Page id"),
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    Show page information
    """
    page = get_root_context(ctx).session.retrieve_page(page_id)

    if json_:
        print_json(page)
        return

    title = next(
        (
            title_text(prop.get("title"))
            for prop in (page.get("properties") or {}).values()
            if prop.get("type") == "title"
        ),
        "Untitled",
    )
    edited = page.get("last_edited_time")
    logger.info(f"Page {page['id']}: {title} (edited {edited})")


@app.command()
def append(
    ctx: Context,
    page_id: str = Option(..., "--id", help="Page id"),
    content: Path = Option(
        ...,
        "--content",
        help="Markdown file to append as page content",
        exists=True,
        dir_okay=False,
    ),
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    Append Markdown content to a page
    """
    session = get_root_context(ctx).session
    blocks = parse_markdown(content.read_text(encoding="utf-8"))

    for batch in batch_blocks(blocks):
        session.append_block_children(
            page_id, [block.to_api() for block in batch]
        )

    if json_:
        print_json({"success": True, "id": page_id, "blocks": len(blocks)})
    else:
        logger.info(f"Appended {len(blocks)} blocks to page {page_id}")


@app.command()
def archive(
    ctx: Context,
    page_id: str = Option(..., "--id", help="Page id"),
):
    """
    Archive (trash) a page
    """
    get_root_context(ctx).session.update_page(page_id, archived=True)
    logger.info(f"Archived page {page_id}")


@app.command()
def restore(
    ctx: Context,
    page_id: str = Option(..., "--id", help="Page id"),
):
    """
    Restore an archived page
    """
    get_root_context(ctx).session.update_page(page_id, archived=False)
    logger.info(f"Restored page {page_id}")


@app.command()
def update(
    ctx: Context,
    page_id: str = Option(..., "--id", help="Page id"),
    title: str | None = Option(None, "--title", help="New page title"),
    props: Path
    | None = Option(
        None,
        "--props",
        help="JSON file with page properties to set",
        exists=True,
        dir_okay=False,
    ),
    json_: bool = Option(False, "--json", help="Output JSON"),
):
    """
    Update page title or properties
    """
    session = get_root_context(ctx).session
    properties: dict[str, Any] = {}

    if title is not None:
        page = session.retrieve_page(page_id)
        title_property = next(
            (
                name
                for name, prop in (page.get("properties") or {}).items()
                if prop.get("type") == "title"
            ),
            None,
        )

        if title_property is None:
            logger.error(f"Page {page_id} has no title property")
            raise Exit(code=1)

        properties[title_property] = title_value(title)

    properties.update(load_properties(props))

    if not properties:
        logger.error("No properties to update, provide --title or --props")
        raise Exit(code=1)

    page = session.update_page(page_id, properties=properties)

    if json_:
        print_json(page)
    else:
        logger.info(f"Updated page {page_id}: {', '.join(properties)}")
