"""Confluence storage format rendering.

This package provides the lenient storage format parser and the plain-text
and Markdown renderers that walk its tree.
"""

from .markdown import render_markup_to_markdown
from .parser import MarkupNode, StorageParser
from .plain_text import render_markup_to_plain_text

__all__ = [
    "MarkupNode",
    "StorageParser",
    "render_markup_to_markdown",
    "render_markup_to_plain_text",
]
