"""
Frontmatter header of mirrored Markdown files.

The header is a block of `key: <JSON value>` lines between `---` delimiters
at the very top of the file.
"""
from __future__ import annotations

import json
import re
from typing import Any

__all__ = [
    "dump_frontmatter",
    "parse_frontmatter",
    "strip_title",
]

_FRONTMATTER = re.compile(r"\A---\n(.*?)\n---\n?", re.DOTALL)


def dump_frontmatter(meta: dict[str, Any]) -> str:
    lines = [f"{key}: {json.dumps(value)}" for key, value in meta.items()]
    return "---\n" + "\n".join(lines) + "\n---\n"


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split file content into metadata and body. Content without a header is
    returned unchanged as the body. Values which aren't valid JSON are kept
    as raw strings.
    """
    content = content.replace("\r\n", "\n")

    m = _FRONTMATTER.match(content)
    if not m:
        return {}, content

    meta: dict[str, Any] = {}
    for line in m.group(1).split("\n"):
        key, sep, value = line.partition(":")
        if not sep:
            continue

        value = value.strip()
        try:
            meta[key.strip()] = json.loads(value)
        except ValueError:
            meta[key.strip()] = value

    return meta, content[m.end() :]


def strip_title(body: str, title: str | None = None) -> str:
    """
    Remove the leading `# Title` line written above the rendered content.
    If `title` is given, the heading is only removed if it matches.
    """
    stripped = body.lstrip("\n")
    first, _, rest = stripped.partition("\n")

    if not first.startswith("# "):
        return body
    if title is not None and first[2:].strip() != title.strip():
        return body

    return rest.lstrip("\n")
