"""
notion-mirror: mirror Notion databases to local Markdown files and back.
"""

from pyrollup import rollup

from . import core, markdown, sync
from .core import *  # noqa
from .markdown import *  # noqa
from .sync import *  # noqa

__all__ = rollup(core, markdown, sync)

__canonical_children__ = [
    "core",
    "markdown",
    "sync",
]
