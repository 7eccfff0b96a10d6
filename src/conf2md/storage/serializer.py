"""Serialize ``MarkupNode`` trees as standard HTML.

Confluence content carries editor bookkeeping that means nothing outside
Confluence. The serializer drops it on the way: bookkeeping attributes and
table layout styling are dropped, column groups are skipped, and elements
that are not standard HTML are unwrapped to their content. Subclasses
rewrite Confluence elements by overriding ``_rewrite``.
"""

import logging

from conf2md.markdown import escape_attribute, escape_text
from conf2md.options import DEFAULT_MAX_DEPTH
from conf2md.storage.parser import VOID_TAGS, MarkupNode
from conf2md.text import decode_entities

logger = logging.getLogger(__name__)

# Editor bookkeeping with no meaning outside Confluence
DROPPED_ATTRIBUTES = frozenset(
    {
        "data-highlight-colour",
        "local-id",
        "data-local-id",
        "data-layout",
        "data-table-width",
        "data-table-display-mode",
    }
)

TABLE_TAGS = frozenset({"table", "thead", "tbody", "tfoot", "tr", "th", "td"})
# Layout attributes stripped from table elements
TABLE_LAYOUT_ATTRIBUTES = frozenset({"style", "width", "class"})
# Attributes read as integers downstream, kept only as short digit strings
NUMERIC_ATTRIBUTES = frozenset({"colspan", "rowspan", "start"})
SKIPPED_TAGS = frozenset({"colgroup", "col"})

# Elements written out as they are; any other element is unwrapped
HTML_TAGS = (
    TABLE_TAGS
    | frozenset({f"h{level}" for level in range(1, 7)})
    | frozenset(
        {
            "p",
            "div",
            "section",
            "article",
            "blockquote",
            "pre",
            "hr",
            "br",
            "ul",
            "ol",
            "li",
            "dl",
            "dt",
            "dd",
            "a",
            "img",
            "figure",
            "figcaption",
            "caption",
            "strong",
            "b",
            "em",
            "i",
            "u",
            "s",
            "del",
            "strike",
            "code",
            "kbd",
            "samp",
            "sub",
            "sup",
            "span",
        }
    )
)


class MarkupSerializer:
    """Serialize a ``MarkupNode`` tree to standard HTML."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.max_depth = max_depth

    def serialize(self, node: MarkupNode) -> str:
        """Convert a node and its descendants, without its tail, to HTML.

        Args:
            node: Subtree to serialize; a parse root is unwrapped

        Returns:
            HTML string
        """
        parts: list[str] = []
        self._write(node, parts, 0)
        return "".join(parts)

    def _text(self, text: str) -> str:
        """Decode source-form text and escape it for HTML."""
        return escape_text(decode_entities(text))

    def _attributes(self, node: MarkupNode) -> str:
        attrs = []
        for name, value in node.attrs.items():
            if ":" in name or name in DROPPED_ATTRIBUTES:
                continue
            if node.tag in TABLE_TAGS and name in TABLE_LAYOUT_ATTRIBUTES:
                continue
            if name in NUMERIC_ATTRIBUTES:
                value = value.strip()
                if not (value.isascii() and value.isdigit() and len(value) < 10):
                    continue
            attrs.append(f' {name}="{escape_attribute(value)}"')
        return "".join(attrs)

    def _write(self, node: MarkupNode, parts: list[str], depth: int) -> None:
        if node.tag in SKIPPED_TAGS:
            return
        if depth > self.max_depth:
            logger.debug(f"Markup nesting deeper than {self.max_depth}, flattening")
            parts.append(self._text(node.text_content()))
            return
        if self._rewrite(node, parts, depth):
            return
        if node.tag not in HTML_TAGS:
            self._write_children(node, parts, depth)
            return

        attrs = self._attributes(node)
        if node.tag in VOID_TAGS:
            parts.append(f"<{node.tag}{attrs} />")
            return

        parts.append(f"<{node.tag}{attrs}>")
        self._write_children(node, parts, depth)
        parts.append(f"</{node.tag}>")

    def _rewrite(self, node: MarkupNode, parts: list[str], depth: int) -> bool:
        """Write an element that needs special handling.

        Returns:
            True when the element was written
        """
        return False

    def _write_children(self, node: MarkupNode, parts: list[str], depth: int) -> None:
        parts.append(self._text(node.text))
        for child in node.children:
            self._write(child, parts, depth + 1)
            parts.append(self._text(child.tail))
