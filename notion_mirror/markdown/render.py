"""
Render block trees to Markdown.

Rendering is lossy but total: every block renders to something, and block
types without a Markdown equivalent become an HTML comment naming the type.
"""
from __future__ import annotations

from typing import Any

from ..core.blocks import (
    Block,
    Breadcrumb,
    BulletedListItem,
    Callout,
    Code,
    Column,
    ColumnList,
    Divider,
    Equation,
    Heading,
    Media,
    NumberedListItem,
    Paragraph,
    Quote,
    RichText,
    SyncedBlock,
    Table,
    TableOfContents,
    ToDo,
    Toggle,
    UnsupportedBlock,
    parse_block,
)

__all__ = [
    "render_markdown",
    "render_rich_text",
    "render_table",
]

INDENT_STEP = 2
"""
Spaces added per nesting level of list items and toggles.
"""


def render_markdown(
    blocks: list[Block | dict[str, Any]], indent: int = 0
) -> str:
    """
    Render blocks to Markdown. Raw API objects are accepted in place of
    {obj}`Block` instances.
    """
    lines: list[str] = []

    for item in blocks:
        block = item if isinstance(item, Block) else parse_block(item)
        lines.extend(_render_block(block, indent))

    return "\n".join(line for line in lines if line)


def render_rich_text(spans: list[RichText]) -> str:
    """
    Render spans with inline Markdown styling. Styles nest in a fixed order:
    code innermost, then bold, italic, strikethrough, and link outermost.
    """
    parts: list[str] = []

    for span in spans:
        s = span.text
        if span.code:
            s = f"`{s}`"
        if span.bold:
            s = f"**{s}**"
        if span.italic:
            s = f"_{s}_"
        if span.strikethrough:
            s = f"~~{s}~~"
        if span.href:
            s = f"[{s}]({span.href})"
        parts.append(s)

    return "".join(parts)


def render_table(table: Table) -> str:
    """
    Render table as a pipe table. Without a column header, header cells are
    synthesized as `Col N`.
    """
    matrix = [
        [render_rich_text(cell) for cell in row.cells] for row in table.rows
    ]
    if not matrix:
        return ""

    width = max(len(row) for row in matrix)
    for row in matrix:
        row.extend([""] * (width - len(row)))

    if table.has_column_header:
        header, data = matrix[0], matrix[1:]
    else:
        header, data = [f"Col {i + 1}" for i in range(width)], matrix

    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join(" --- " for _ in header) + "|",
    ]

    for row in data:
        cells = [
            f"**{c}**" if table.has_row_header and i == 0 else c
            for i, c in enumerate(row)
        ]
        lines.append("| " + " | ".join(cells) + " |")

    return "\n".join(lines)


def _render_block(block: Block, indent: int) -> list[str]:
    pref = " " * indent
    nested = indent + INDENT_STEP

    # containers whose children could not be fetched have nothing to render
    if (
        isinstance(block, (Table, ColumnList, SyncedBlock))
        and block.has_children
        and not block.children
    ):
        return [f"{pref}<!-- unsupported block: {block.block_type} -->"]

    if isinstance(block, Paragraph):
        return [pref + render_rich_text(block.rich_text)]

    if isinstance(block, Heading):
        marker = "#" * min(max(block.level, 1), 3)
        return [f"{marker} {render_rich_text(block.rich_text)}"]

    if isinstance(block, BulletedListItem):
        return [
            f"{pref}- {render_rich_text(block.rich_text)}",
            _render_children(block, nested),
        ]

    if isinstance(block, NumberedListItem):
        return [
            f"{pref}1. {render_rich_text(block.rich_text)}",
            _render_children(block, nested),
        ]

    if isinstance(block, ToDo):
        box = "x" if block.checked else " "
        return [
            f"{pref}- [{box}] {render_rich_text(block.rich_text)}",
            _render_children(block, nested),
        ]

    if isinstance(block, Quote):
        return [f"{pref}> {render_rich_text(block.rich_text)}"]

    if isinstance(block, Code):
        return [f"```{block.language or ''}", block.text, "```"]

    if isinstance(block, Divider):
        return ["---"]

    if isinstance(block, Toggle):
        summary = render_rich_text(block.rich_text)
        return [
            f"{pref}<details><summary>{summary}</summary>",
            _render_children(block, nested),
            f"{pref}</details>",
        ]

    if isinstance(block, Callout):
        return [
            f"{pref}> {render_rich_text(block.rich_text)}",
            _render_children(block, nested),
        ]

    if isinstance(block, Media):
        return [pref + _render_media(block)]

    if isinstance(block, Equation):
        return [f"$${block.expression}$$"]

    if isinstance(block, TableOfContents):
        return ["[TOC]"]

    if isinstance(block, Breadcrumb):
        return []

    if isinstance(block, SyncedBlock):
        return [_render_children(block, indent)]

    if isinstance(block, ColumnList):
        return _render_columns(block, indent)

    if isinstance(block, Table):
        return [render_table(block)]

    if (
        isinstance(block, UnsupportedBlock)
        and block.type_name == "transcription"
    ):
        return [
            f"{pref}<!-- transcription block not accessible via Notion API -->"
        ]

    return [f"{pref}<!-- unsupported block: {block.block_type} -->"]


def _render_children(block: Block, indent: int) -> str:
    return render_markdown(list(block.children), indent)


def _render_media(block: Media) -> str:
    url = block.url or ""

    if block.kind == "image":
        return f"![image]({url})"
    if block.kind == "bookmark":
        return f"[{url}]({url})"
    return f"[{block.kind}]({url})"


def _render_columns(block: ColumnList, indent: int) -> list[str]:
    """
    Render each column in sequence; side-by-side layout is not preserved.
    """
    lines: list[str] = []

    for column in block.children:
        children = column.children if isinstance(column, Column) else [column]
        lines.append(render_markdown(list(children), indent))

    # empty entries are dropped by the caller, so separate columns explicitly
    return ["\n\n".join(line for line in lines if line)]
