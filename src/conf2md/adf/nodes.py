"""Typed node model for Atlassian Document Format trees.

Raw ADF arrives as untyped JSON. ``parse_document`` converts it once into
dataclasses, reading every field through type-checked accessors so that
missing or wrong-typed fields fall back to defaults. Node kinds that are not
recognized become ``UnknownNode`` and keep their children.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from conf2md.options import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)


@dataclass
class Mark:
    """Inline style mark attached to a text node."""

    kind: str
    href: str | None = None


@dataclass
class Node:
    """Base class for all ADF nodes."""

    children: list[Node] = field(default_factory=list)


@dataclass
class Document(Node):
    """Root ``doc`` node."""


@dataclass
class Paragraph(Node):
    """Paragraph of inline content."""


@dataclass
class Heading(Node):
    """Heading with a level from 1 to 6."""

    level: int = 1


@dataclass
class Text(Node):
    """Text leaf with optional marks."""

    text: str = ""
    marks: list[Mark] = field(default_factory=list)


@dataclass
class HardBreak(Node):
    """Line break inside a block."""


@dataclass
class BulletList(Node):
    """Unordered list."""


@dataclass
class OrderedList(Node):
    """Ordered list."""

    start: int = 1


@dataclass
class ListItem(Node):
    """List item."""


@dataclass
class Table(Node):
    """Table of rows."""


@dataclass
class TableRow(Node):
    """Table row of cells."""


@dataclass
class TableCell(Node):
    """Table cell; ``header`` is set for ``tableHeader`` cells."""

    header: bool = False


@dataclass
class CodeBlock(Node):
    """Code block with an optional language."""

    language: str | None = None


@dataclass
class Blockquote(Node):
    """Quoted block."""


@dataclass
class Panel(Node):
    """Callout panel such as info or warning."""

    panel_type: str = "info"


@dataclass
class Rule(Node):
    """Horizontal rule."""


@dataclass
class Mention(Node):
    """User mention.

    ``has_attrs`` records whether the node carried an attrs object at all,
    which decides between the unknown-user placeholder and empty output.
    """

    text: str | None = None
    has_attrs: bool = False


@dataclass
class Emoji(Node):
    """Emoji with optional display text and short name."""

    text: str | None = None
    short_name: str | None = None
    has_attrs: bool = False


@dataclass
class Media(Node):
    """Attachment reference."""

    id: str | None = None
    alt: str | None = None


@dataclass
class MediaContainer(Node):
    """``mediaSingle`` or ``mediaGroup`` wrapper around media nodes."""


@dataclass
class UnknownNode(Node):
    """Node of an unrecognized kind; rendered as a transparent container."""


def _get_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _get_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    # bool is an int subclass but never a meaningful level or start
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def _get_attrs(data: dict[str, Any]) -> dict[str, Any] | None:
    attrs = data.get("attrs")
    return attrs if isinstance(attrs, dict) else None


def _parse_marks(data: dict[str, Any]) -> list[Mark]:
    raw_marks = data.get("marks")
    if not isinstance(raw_marks, list):
        return []
    marks = []
    for raw_mark in raw_marks:
        if not isinstance(raw_mark, dict):
            continue
        kind = _get_str(raw_mark, "type")
        if kind is None:
            continue
        attrs = _get_attrs(raw_mark) or {}
        marks.append(Mark(kind=kind, href=_get_str(attrs, "href")))
    return marks


def is_document(value: object) -> bool:
    """Check whether a raw value is an ADF document root.

    Returns:
        True for a mapping with ``type == "doc"`` and a list ``content``
    """
    return (
        isinstance(value, dict)
        and value.get("type") == "doc"
        and isinstance(value.get("content"), list)
    )


def flatten_text(value: object) -> str:
    """Collect the ``text`` leaves of a raw subtree without recursion.

    Used once the depth ceiling is reached, so arbitrarily deep input
    still yields its text.
    """
    parts: list[str] = []
    stack: list[object] = [value]
    while stack:
        current = stack.pop()
        if not isinstance(current, dict):
            continue
        if current.get("type") == "text":
            text = _get_str(current, "text")
            if text:
                parts.append(text)
        content = current.get("content")
        if isinstance(content, list):
            stack.extend(reversed(content))
    return "".join(parts)


def parse_node(data: object, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Convert a raw JSON value into a typed node.

    Args:
        data: Raw node value
        depth: Nesting depth of this node
        max_depth: Depth after which the subtree is flattened to a text leaf

    Returns:
        Typed node; ``UnknownNode`` for anything not recognized
    """
    if not isinstance(data, dict):
        return UnknownNode()

    if depth > max_depth:
        logger.debug(f"ADF nesting deeper than {max_depth}, flattening subtree")
        return Text(text=flatten_text(data))

    content = data.get("content")
    children = (
        [parse_node(child, depth + 1, max_depth) for child in content]
        if isinstance(content, list)
        else []
    )
    kind = _get_str(data, "type")
    attrs = _get_attrs(data)

    if kind == "doc":
        return Document(children=children)
    if kind == "paragraph":
        return Paragraph(children=children)
    if kind == "heading":
        level = _get_int(attrs or {}, "level", 1)
        return Heading(children=children, level=min(max(level, 1), 6))
    if kind == "text":
        return Text(text=_get_str(data, "text") or "", marks=_parse_marks(data))
    if kind == "hardBreak":
        return HardBreak()
    if kind == "bulletList":
        return BulletList(children=children)
    if kind == "orderedList":
        return OrderedList(children=children, start=_get_int(attrs or {}, "order", 1))
    if kind == "listItem":
        return ListItem(children=children)
    if kind == "table":
        return Table(children=children)
    if kind == "tableRow":
        return TableRow(children=children)
    if kind in ("tableCell", "tableHeader"):
        return TableCell(children=children, header=kind == "tableHeader")
    if kind == "codeBlock":
        return CodeBlock(children=children, language=_get_str(attrs or {}, "language"))
    if kind == "blockquote":
        return Blockquote(children=children)
    if kind == "panel":
        panel_type = _get_str(attrs or {}, "panelType") or "info"
        return Panel(children=children, panel_type=panel_type)
    if kind == "rule":
        return Rule()
    if kind == "mention":
        return Mention(
            text=_get_str(attrs or {}, "text"),
            has_attrs=attrs is not None,
        )
    if kind == "emoji":
        return Emoji(
            text=_get_str(attrs or {}, "text"),
            short_name=_get_str(attrs or {}, "shortName"),
            has_attrs=attrs is not None,
        )
    if kind == "media":
        return Media(id=_get_str(attrs or {}, "id"), alt=_get_str(attrs or {}, "alt"))
    if kind in ("mediaSingle", "mediaGroup"):
        return MediaContainer(children=children)
    return UnknownNode(children=children)


def parse_document(value: object, max_depth: int = DEFAULT_MAX_DEPTH) -> Document | None:
    """Parse a raw document value into a typed ``Document``.

    Args:
        value: ADF document as a mapping
        max_depth: Depth ceiling passed to ``parse_node``

    Returns:
        Document, or None when the value is not a document root
    """
    if not is_document(value):
        return None
    node = parse_node(value, 0, max_depth)
    return node if isinstance(node, Document) else None


def load_document(value: str) -> object:
    """Decode a serialized ADF document.

    Returns:
        The decoded JSON value, or None when the string is not valid JSON
    """
    try:
        return json.loads(value)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Input is not JSON, passing it through: {e}")
        return None
