"""
Conversion between Notion blocks and Markdown.

The two directions are intentionally asymmetric: rendering handles every
block type, while parsing recovers only gross structure (headings, lists,
quotes, code and dividers) with unstyled text.
"""

from .parse import APPEND_BATCH_SIZE, batch_blocks, parse_markdown
from .render import render_markdown, render_rich_text, render_table

__all__ = [
    "APPEND_BATCH_SIZE",
    "batch_blocks",
    "parse_markdown",
    "render_markdown",
    "render_rich_text",
    "render_table",
]
