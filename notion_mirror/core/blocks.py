"""
Typed representation of Notion content blocks.

Each supported block type maps to a dataclass deriving from {obj}`Block`.
Any other type, including those added to the API after this module was
written, maps to {obj}`UnsupportedBlock` carrying the raw type and payload.
Conversion from raw API objects never raises.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import Logger
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from .session import Session

__all__ = [
    "RICH_TEXT_LIMIT",
    "RichText",
    "Block",
    "TextBlock",
    "Paragraph",
    "Heading",
    "BulletedListItem",
    "NumberedListItem",
    "ToDo",
    "Quote",
    "Toggle",
    "Callout",
    "Code",
    "Divider",
    "Media",
    "Equation",
    "Table",
    "TableRow",
    "ColumnList",
    "Column",
    "SyncedBlock",
    "TableOfContents",
    "Breadcrumb",
    "UnsupportedBlock",
    "MEDIA_TYPES",
    "plain_text",
    "parse_block",
    "parse_blocks",
    "fetch_blocks",
]

RICH_TEXT_LIMIT = 2000
"""
Maximum number of characters the API accepts in a single rich text object.
"""

MEDIA_TYPES = (
    "image",
    "video",
    "audio",
    "file",
    "pdf",
    "bookmark",
    "embed",
)
"""
Block types rendered as a single link to their content.
"""


@dataclass(kw_only=True)
class RichText:
    """
    Run of text with independent style flags and an optional link.
    """

    text: str = ""
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    href: str | None = None

    @property
    def styled(self) -> bool:
        return self.bold or self.italic or self.strikethrough or self.code

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> RichText:
        text = raw.get("plain_text")
        if text is None:
            text = (raw.get("text") or {}).get("content", "")

        annotations = raw.get("annotations") or {}

        return RichText(
            text=text or "",
            bold=bool(annotations.get("bold")),
            italic=bool(annotations.get("italic")),
            strikethrough=bool(annotations.get("strikethrough")),
            code=bool(annotations.get("code")),
            href=raw.get("href"),
        )

    def to_api(self) -> list[dict[str, Any]]:
        """
        Get API objects for this span, split into chunks the API accepts.
        """
        objs: list[dict[str, Any]] = []
        chunks = [
            self.text[i : i + RICH_TEXT_LIMIT]
            for i in range(0, len(self.text), RICH_TEXT_LIMIT)
        ] or [""]

        for chunk in chunks:
            text: dict[str, Any] = {"content": chunk}
            if self.href:
                text["link"] = {"url": self.href}

            obj: dict[str, Any] = {"type": "text", "text": text}
            if self.styled:
                obj["annotations"] = {
                    "bold": self.bold,
                    "italic": self.italic,
                    "strikethrough": self.strikethrough,
                    "code": self.code,
                }

            objs.append(obj)

        return objs


def plain_text(spans: list[RichText]) -> str:
    """
    Get visible text of a sequence of spans.
    """
    return "".join(span.text for span in spans)


def _rich_text_to_api(spans: list[RichText]) -> list[dict[str, Any]]:
    return [obj for span in spans for obj in span.to_api()]


def _rich_text_from_api(raw: Any) -> list[RichText]:
    if not isinstance(raw, list):
        return []
    return [RichText.from_api(r) for r in raw if isinstance(r, dict)]


@dataclass(kw_only=True)
class Block:
    """
    Base class of all block variants.
    """

    _block_type: ClassVar[str]

    block_id: str | None = None
    """
    Block id, `None` for blocks not yet created remotely.
    """

    has_children: bool = False
    """
    Whether the API reported children which must be fetched separately.
    """

    children: list[Block] = field(default_factory=list)
    """
    Fetched child blocks, in order.
    """

    @property
    def block_type(self) -> str:
        return self._block_type

    def to_api(self) -> dict[str, Any]:
        """
        Get object accepted by the append children endpoint.
        """
        payload = self._payload()
        if self.children:
            payload["children"] = [c.to_api() for c in self.children]

        return {
            "object": "block",
            "type": self.block_type,
            self.block_type: payload,
        }

    def _payload(self) -> dict[str, Any]:
        return {}


@dataclass(kw_only=True)
class TextBlock(Block):
    """
    Block whose payload is primarily a rich text sequence.
    """

    rich_text: list[RichText] = field(default_factory=list)

    @property
    def text(self) -> str:
        return plain_text(self.rich_text)

    def _payload(self) -> dict[str, Any]:
        return {"rich_text": _rich_text_to_api(self.rich_text)}


@dataclass(kw_only=True)
class Paragraph(TextBlock):
    _block_type = "paragraph"


@dataclass(kw_only=True)
class Heading(TextBlock):
    level: int = 1

    @property
    def block_type(self) -> str:
        return f"heading_{self.level}"


@dataclass(kw_only=True)
class BulletedListItem(TextBlock):
    _block_type = "bulleted_list_item"


@dataclass(kw_only=True)
class NumberedListItem(TextBlock):
    _block_type = "numbered_list_item"


@dataclass(kw_only=True)
class ToDo(TextBlock):
    _block_type = "to_do"

    checked: bool = False

    def _payload(self) -> dict[str, Any]:
        return super()._payload() | {"checked": self.checked}


@dataclass(kw_only=True)
class Quote(TextBlock):
    _block_type = "quote"


@dataclass(kw_only=True)
class Toggle(TextBlock):
    _block_type = "toggle"


@dataclass(kw_only=True)
class Callout(TextBlock):
    _block_type = "callout"


@dataclass(kw_only=True)
class Code(Block):
    _block_type = "code"

    language: str = "plain text"
    text: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "rich_text": RichText(text=self.text).to_api(),
        }


@dataclass(kw_only=True)
class Divider(Block):
    _block_type = "divider"


@dataclass(kw_only=True)
class Media(Block):
    """
    Image, video, audio, file, pdf, bookmark or embed.
    """

    kind: str = "image"
    url: str | None = None

    @property
    def block_type(self) -> str:
        return self.kind

    def _payload(self) -> dict[str, Any]:
        if self.kind in ("bookmark", "embed"):
            return {"url": self.url or ""}
        return {"type": "external", "external": {"url": self.url or ""}}


@dataclass(kw_only=True)
class Equation(Block):
    _block_type = "equation"

    expression: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"expression": self.expression}


@dataclass(kw_only=True)
class Table(Block):
    """
    Table whose children are {obj}`TableRow` blocks.
    """

    _block_type = "table"

    has_column_header: bool = False
    has_row_header: bool = False

    @property
    def rows(self) -> list[TableRow]:
        return [c for c in self.children if isinstance(c, TableRow)]

    def _payload(self) -> dict[str, Any]:
        width = max((len(r.cells) for r in self.rows), default=0)
        return {
            "table_width": width,
            "has_column_header": self.has_column_header,
            "has_row_header": self.has_row_header,
        }


@dataclass(kw_only=True)
class TableRow(Block):
    _block_type = "table_row"

    cells: list[list[RichText]] = field(default_factory=list)

    def _payload(self) -> dict[str, Any]:
        return {"cells": [_rich_text_to_api(cell) for cell in self.cells]}


@dataclass(kw_only=True)
class ColumnList(Block):
    _block_type = "column_list"


@dataclass(kw_only=True)
class Column(Block):
    _block_type = "column"


@dataclass(kw_only=True)
class SyncedBlock(Block):
    _block_type = "synced_block"


@dataclass(kw_only=True)
class TableOfContents(Block):
    _block_type = "table_of_contents"


@dataclass(kw_only=True)
class Breadcrumb(Block):
    _block_type = "breadcrumb"


@dataclass(kw_only=True)
class UnsupportedBlock(Block):
    """
    Block of a type without a dedicated variant, or whose payload couldn't
    be interpreted.
    """

    type_name: str = "unknown"
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def block_type(self) -> str:
        return self.type_name

    def _payload(self) -> dict[str, Any]:
        return dict(self.payload)


_TEXT_BLOCKS: dict[str, type[TextBlock]] = {
    "paragraph": Paragraph,
    "bulleted_list_item": BulletedListItem,
    "numbered_list_item": NumberedListItem,
    "quote": Quote,
    "toggle": Toggle,
    "callout": Callout,
}

_EMPTY_BLOCKS: dict[str, type[Block]] = {
    "divider": Divider,
    "column_list": ColumnList,
    "column": Column,
    "synced_block": SyncedBlock,
    "table_of_contents": TableOfContents,
    "breadcrumb": Breadcrumb,
}


def parse_block(raw: dict[str, Any]) -> Block:
    """
    Convert a raw API block, including any fetched `children`, to its
    variant. Never raises; anything unrecognized or malformed becomes an
    {obj}`UnsupportedBlock`.
    """
    block_type = raw.get("type") if isinstance(raw, dict) else None
    if not isinstance(block_type, str):
        return UnsupportedBlock()

    payload = raw.get(block_type)
    if not isinstance(payload, dict):
        payload = {}

    children = raw.get("children")
    common: dict[str, Any] = {
        "block_id": raw.get("id"),
        "has_children": bool(raw.get("has_children")),
        "children": (
            parse_blocks(children) if isinstance(children, list) else []
        ),
    }

    try:
        return _parse_variant(block_type, payload, common)
    except (AttributeError, KeyError, TypeError, ValueError):
        return UnsupportedBlock(type_name=block_type, payload=payload, **common)


def parse_blocks(raws: list[dict[str, Any]]) -> list[Block]:
    return [parse_block(raw) for raw in raws]


def _parse_variant(
    block_type: str, payload: dict[str, Any], common: dict[str, Any]
) -> Block:
    rich_text = _rich_text_from_api(payload.get("rich_text"))

    if block_type in _TEXT_BLOCKS:
        return _TEXT_BLOCKS[block_type](rich_text=rich_text, **common)

    if block_type in _EMPTY_BLOCKS:
        return _EMPTY_BLOCKS[block_type](**common)

    if block_type in ("heading_1", "heading_2", "heading_3"):
        return Heading(level=int(block_type[-1]), rich_text=rich_text, **common)

    if block_type == "to_do":
        return ToDo(
            checked=bool(payload.get("checked")), rich_text=rich_text, **common
        )

    if block_type == "code":
        return Code(
            language=payload.get("language") or "",
            text=plain_text(rich_text),
            **common,
        )

    if block_type in MEDIA_TYPES:
        return Media(kind=block_type, url=_media_url(payload), **common)

    if block_type == "equation":
        return Equation(expression=payload.get("expression") or "", **common)

    if block_type == "table":
        return Table(
            has_column_header=bool(payload.get("has_column_header")),
            has_row_header=bool(payload.get("has_row_header")),
            **common,
        )

    if block_type == "table_row":
        cells = payload.get("cells") or []
        return TableRow(
            cells=[_rich_text_from_api(cell) for cell in cells], **common
        )

    return UnsupportedBlock(type_name=block_type, payload=payload, **common)


def _media_url(payload: dict[str, Any]) -> str | None:
    """
    Get first available external or hosted URL.
    """
    for key in ("external", "file"):
        source = payload.get(key)
        if isinstance(source, dict) and source.get("url"):
            return source["url"]
    return payload.get("url") or None


def fetch_blocks(
    session: Session,
    block_id: str,
    *,
    logger: Logger | None = None,
) -> list[Block]:
    """
    Fetch the block tree under a page or block.

    Children of each block reporting `has_children` are fetched with a
    separate request. If that request fails, the block is kept with no
    children rather than failing the whole tree.
    """
    logger = logger or logging.getLogger()
    raws = list(session.iter_block_children(block_id))
    return [_fetch_children(session, raw, logger) for raw in raws]


def _fetch_children(
    session: Session, raw: dict[str, Any], logger: Logger
) -> Block:
    block = parse_block(raw)

    if block.has_children and block.block_id:
        try:
            block.children = fetch_blocks(
                session, block.block_id, logger=logger
            )
        except Exception as e:
            logger.debug(
                f"Could not fetch children of {block.block_type} block "
                f"{block.block_id}: {e}"
            )
            block.children = []

    return block
