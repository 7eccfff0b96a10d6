"""Atlassian Document Format rendering.

This package provides the typed ADF node model and its plain-text and
Markdown renderers.
"""

from .markdown import render_tree_to_markdown
from .plain_text import render_tree_to_plain_text

__all__ = ["render_tree_to_markdown", "render_tree_to_plain_text"]
