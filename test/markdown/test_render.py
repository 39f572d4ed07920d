"""
Test rendering of blocks to Markdown.
"""

from pytest import mark

from notion_mirror import (
    BulletedListItem,
    RichText,
    Table,
    TableRow,
    parse_block,
    render_markdown,
    render_rich_text,
)

from conftest import raw_block, rich_text


def _table(rows: list[list[str]], **flags) -> Table:
    return Table(
        children=[
            TableRow(cells=[[RichText(text=c)] for c in row]) for row in rows
        ],
        **flags,
    )


def test_empty():
    assert render_markdown([]) == ""


def test_basic_blocks():
    blocks = [
        raw_block("heading_1", "Title"),
        raw_block("paragraph", "Some text"),
        raw_block("heading_2", "Section"),
        raw_block("heading_3", "Subsection"),
        raw_block("quote", "Quoted"),
        raw_block("divider"),
        raw_block("code", "x = 1\ny = 2", language="python"),
        raw_block("equation", expression="e = mc^2"),
        raw_block("table_of_contents"),
        raw_block("breadcrumb"),
    ]

    assert render_markdown(blocks) == "\n".join(
        [
            "# Title",
            "Some text",
            "## Section",
            "### Subsection",
            "> Quoted",
            "---",
            "```python",
            "x = 1",
            "y = 2",
            "```",
            "$$e = mc^2$$",
            "[TOC]",
        ]
    )


def test_lists():
    parent = raw_block("bulleted_list_item", "Parent")
    parent["children"] = [
        raw_block("numbered_list_item", "Child"),
        raw_block("to_do", "Done", checked=True),
    ]

    blocks = [parent, raw_block("to_do", "Open", checked=False)]

    assert render_markdown(blocks) == "\n".join(
        [
            "- Parent",
            "  1. Child",
            "  - [x] Done",
            "- [ ] Open",
        ]
    )


def test_toggle_and_callout():
    toggle = raw_block("toggle", "More")
    toggle["children"] = [raw_block("paragraph", "Hidden")]

    callout = raw_block("callout", "Note", icon={"emoji": "!"})
    callout["children"] = [raw_block("paragraph", "Details")]

    assert render_markdown([toggle, callout]) == "\n".join(
        [
            "<details><summary>More</summary>",
            "  Hidden",
            "</details>",
            "> Note",
            "  Details",
        ]
    )


def test_media():
    blocks = [
        raw_block("image", type="external", external={"url": "https://x/i"}),
        raw_block("video", type="file", file={"url": "https://x/v.mp4"}),
        raw_block("audio", type="external", external={"url": "https://x/a"}),
        raw_block("file", type="file", file={"url": "https://x/f.zip"}),
        raw_block("pdf", type="external", external={"url": "https://x/d.pdf"}),
        raw_block("bookmark", url="https://example.com"),
        raw_block("embed", url="https://embed.example.com"),
    ]

    assert render_markdown(blocks).split("\n") == [
        "![image](https://x/i)",
        "[video](https://x/v.mp4)",
        "[audio](https://x/a)",
        "[file](https://x/f.zip)",
        "[pdf](https://x/d.pdf)",
        "[https://example.com](https://example.com)",
        "[embed](https://embed.example.com)",
    ]


def test_columns():
    """
    Columns are rendered one after another, separated by a blank line.
    """
    column_1 = raw_block("column")
    column_1["children"] = [raw_block("paragraph", "Left")]
    column_2 = raw_block("column")
    column_2["children"] = [raw_block("paragraph", "Right")]

    column_list = raw_block("column_list")
    column_list["children"] = [column_1, column_2]

    assert render_markdown([column_list]) == "Left\n\nRight"


def test_synced_block():
    synced = raw_block("synced_block", synced_from=None)
    synced["children"] = [raw_block("paragraph", "Shared")]

    assert render_markdown([synced]) == "Shared"


def test_table_column_header():
    table = _table([["A", "B"], ["1", "2"]], has_column_header=True)

    assert render_markdown([table]) == "\n".join(
        [
            "| A | B |",
            "| --- | --- |",
            "| 1 | 2 |",
        ]
    )


def test_table_no_header():
    table = _table([["A", "B"], ["1", "2"]])

    assert render_markdown([table]) == "\n".join(
        [
            "| Col 1 | Col 2 |",
            "| --- | --- |",
            "| A | B |",
            "| 1 | 2 |",
        ]
    )


def test_table_row_header():
    table = _table(
        [["", "Q1"], ["Sales", "10"], ["Costs"]],
        has_column_header=True,
        has_row_header=True,
    )

    assert render_markdown([table]) == "\n".join(
        [
            "|  | Q1 |",
            "| --- | --- |",
            "| **Sales** | 10 |",
            "| **Costs** |  |",
        ]
    )


@mark.parametrize(
    "span,expected",
    [
        (RichText(text="plain"), "plain"),
        (RichText(text="x", code=True), "`x`"),
        (RichText(text="x", bold=True), "**x**"),
        (RichText(text="x", italic=True), "_x_"),
        (RichText(text="x", strikethrough=True), "~~x~~"),
        (
            RichText(
                text="x", code=True, bold=True, italic=True, strikethrough=True
            ),
            "~~_**`x`**_~~",
        ),
        (
            RichText(text="x", bold=True, href="https://e.com"),
            "[**x**](https://e.com)",
        ),
    ],
)
def test_rich_text(span: RichText, expected: str):
    assert render_rich_text([span]) == expected


def test_rich_text_concatenation():
    spans = [
        RichText(text="a "),
        RichText(text="b", italic=True),
        RichText(text=" c"),
    ]
    assert render_rich_text(spans) == "a _b_ c"


def test_unsupported():
    blocks = [
        raw_block("child_page", title="Sub page"),
        raw_block("transcription"),
        {"type": "link_to_page"},
    ]

    assert render_markdown(blocks).split("\n") == [
        "<!-- unsupported block: child_page -->",
        "<!-- transcription block not accessible via Notion API -->",
        "<!-- unsupported block: link_to_page -->",
    ]


def test_unfetched_children():
    """
    Containers whose children couldn't be fetched render as placeholders.
    """
    raw = {**raw_block("table", table_width=2), "has_children": True}
    table = parse_block(raw)
    assert render_markdown([table]) == "<!-- unsupported block: table -->"


@mark.parametrize(
    "raw",
    [
        {},
        {"type": None},
        {"type": "paragraph", "paragraph": None},
        {"type": "paragraph", "paragraph": {"rich_text": "not a list"}},
        {"type": "to_do", "to_do": {"rich_text": [None, 5]}},
        {"type": "image", "image": {"type": "external"}},
        {"type": "table", "table": {}, "children": [{"type": "table_row"}]},
        {"type": "column_list", "children": "broken"},
        {
            "type": "heading_1",
            "heading_1": {"rich_text": [{"annotations": None}]},
        },
    ],
)
def test_never_raises(raw: dict):
    assert isinstance(render_markdown([raw]), str)


def test_nested_indent():
    leaf = BulletedListItem(rich_text=[RichText(text="c")])
    middle = BulletedListItem(rich_text=[RichText(text="b")], children=[leaf])
    root = BulletedListItem(rich_text=[RichText(text="a")], children=[middle])

    assert render_markdown([root]) == "- a\n  - b\n    - c"
