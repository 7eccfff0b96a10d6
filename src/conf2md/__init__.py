"""Render Confluence and Jira rich text as plain text or Markdown.

Two source formats are supported: Confluence storage format (XHTML with
macro elements) and the Atlassian Document Format JSON tree used by Jira.
Every render function is pure and total: it never raises and never
performs I/O.
"""

from .adf.markdown import render_tree_to_markdown
from .adf.plain_text import render_tree_to_plain_text
from .attachments import resolve_attachment_path
from .options import Placeholders, RenderOptions
from .storage.markdown import render_markup_to_markdown
from .storage.plain_text import render_markup_to_plain_text
from .text import collapse_whitespace, decode_entities

__all__ = [
    "Placeholders",
    "RenderOptions",
    "collapse_whitespace",
    "decode_entities",
    "render_markup_to_markdown",
    "render_markup_to_plain_text",
    "render_tree_to_markdown",
    "render_tree_to_plain_text",
    "resolve_attachment_path",
]
