"""
Parse Markdown into blocks.

This is a line-oriented scanner covering the structural subset produced by
{obj}`render_markdown`: fenced code, horizontal rules, headings, quotes and
lists. Inline syntax is not interpreted, so every text body becomes a single
unstyled span. Anything else is a paragraph, so there is no invalid input.
"""
from __future__ import annotations

import re

from ..core.blocks import (
    Block,
    BulletedListItem,
    Code,
    Divider,
    Heading,
    NumberedListItem,
    Paragraph,
    Quote,
    RichText,
    ToDo,
)

__all__ = [
    "APPEND_BATCH_SIZE",
    "batch_blocks",
    "parse_markdown",
]

APPEND_BATCH_SIZE = 90
"""
Number of blocks sent per append request; the API accepts at most 100.
"""

_FENCE = re.compile(r"^```(.*)$")
_RULE = re.compile(r"^---+$")
_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
_QUOTE = re.compile(r"^>\s?(.*)$")
_TODO = re.compile(r"^\s*-\s*\[( |x|X)\]\s+(.*)$")
_BULLET = re.compile(r"^\s*-\s+(.*)$")
_ORDERED = re.compile(r"^\s*\d+\.\s+(.*)$")


def parse_markdown(text: str) -> list[Block]:
    """
    Parse Markdown text into an ordered list of blocks. Blank lines only
    separate blocks; every other line is consumed into exactly one block.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    blocks: list[Block] = []
    i = 0

    while i < len(lines):
        line = lines[i]

        if not line.strip():
            i += 1
            continue

        if m := _FENCE.match(line):
            language = m.group(1).strip() or "plain text"
            i += 1
            body: list[str] = []
            while i < len(lines) and not lines[i].startswith("```"):
                body.append(lines[i])
                i += 1

            # consume closing fence if present
            if i < len(lines):
                i += 1

            blocks.append(Code(language=language, text="\n".join(body)))
            continue

        if _RULE.match(line.strip()):
            blocks.append(Divider())
            i += 1
            continue

        if m := _HEADING.match(line):
            blocks.append(
                Heading(level=len(m.group(1)), rich_text=_text(m.group(2)))
            )
            i += 1
            continue

        if m := _QUOTE.match(line):
            quoted = [m.group(1)]
            i += 1
            while i < len(lines) and lines[i].startswith(">"):
                quoted.append(_QUOTE.sub(r"\1", lines[i]))
                i += 1

            blocks.append(Quote(rich_text=_text("\n".join(quoted))))
            continue

        if _TODO.match(line):
            while i < len(lines) and (m := _TODO.match(lines[i])):
                blocks.append(
                    ToDo(
                        checked=m.group(1).lower() == "x",
                        rich_text=_text(m.group(2)),
                    )
                )
                i += 1
            continue

        if _BULLET.match(line):
            while (
                i < len(lines)
                and not _TODO.match(lines[i])
                and (m := _BULLET.match(lines[i]))
            ):
                blocks.append(BulletedListItem(rich_text=_text(m.group(1))))
                i += 1
            continue

        if _ORDERED.match(line):
            while i < len(lines) and (m := _ORDERED.match(lines[i])):
                blocks.append(NumberedListItem(rich_text=_text(m.group(1))))
                i += 1
            continue

        # paragraph: greedy until blank line
        paragraph = [line]
        i += 1
        while i < len(lines) and lines[i].strip():
            paragraph.append(lines[i])
            i += 1

        blocks.append(Paragraph(rich_text=_text("\n".join(paragraph))))

    return blocks


def batch_blocks(
    blocks: list[Block], size: int = APPEND_BATCH_SIZE
) -> list[list[Block]]:
    """
    Split blocks into consecutive batches for append requests.
    """
    assert size > 0
    return [blocks[i : i + size] for i in range(0, len(blocks), size)]


def _text(content: str) -> list[RichText]:
    return [RichText(text=content)]
