"""
Notion API access and the typed block model.
"""

from pyrollup import rollup

from . import blocks, exceptions, retry, session
from .blocks import *  # noqa
from .exceptions import *  # noqa
from .retry import *  # noqa
from .session import *  # noqa

__all__ = rollup(blocks, exceptions, retry, session)
