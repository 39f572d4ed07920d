"""
Common utilities.
"""

import datetime
import re
from pathlib import Path
from typing import Any

__all__ = [
    "SLUG_MAX_LEN",
    "ID_SUFFIX_LEN",
    "expand_path",
    "id_suffix",
    "parse_timestamp",
    "slug",
    "title_text",
]

SLUG_MAX_LEN = 64
"""
Maximum number of characters in a filename slug.
"""

ID_SUFFIX_LEN = 8
"""
Number of trailing hex characters of a page id appended to filenames.
"""


def slug(s: str) -> str:
    """
    Lowercase and replace runs of non-alphanumeric characters with `-`.
    """
    result = re.sub(r"[^a-z0-9]+", "-", s.lower()).strip("-")[:SLUG_MAX_LEN]
    return result or "untitled"


def id_suffix(object_id: str) -> str:
    """
    Get short suffix of an id for disambiguating filenames.
    """
    return object_id.replace("-", "")[-ID_SUFFIX_LEN:]


def expand_path(path: str | Path) -> Path:
    return Path(path).expanduser()


def parse_timestamp(value: str) -> datetime.datetime:
    """
    Parse API timestamp, e.g. `2024-01-01T10:00:00.000Z`.
    """
    dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def title_text(rich_text: Any) -> str:
    """
    Concatenate plain text of a raw rich text array.
    """
    if not isinstance(rich_text, list):
        return ""
    return "".join(
        t.get("plain_text", "") for t in rich_text if isinstance(t, dict)
    )
