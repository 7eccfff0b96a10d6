"""Plain-text rendering of Atlassian Document Format trees."""

import logging

from conf2md.adf.nodes import (
    Document,
    Emoji,
    HardBreak,
    ListItem,
    Media,
    Mention,
    Node,
    TableCell,
    TableRow,
    Text,
    load_document,
    parse_document,
)
from conf2md.options import DEFAULT_OPTIONS, RenderOptions

logger = logging.getLogger(__name__)


class PlainTextWalker:
    """Walk a typed ADF tree and produce plain text.

    Leaf text is emitted exactly as stored: ADF carries literal text, so no
    entity decoding is applied.
    """

    def __init__(self, options: RenderOptions = DEFAULT_OPTIONS) -> None:
        self.options = options

    def render_document(self, document: Document) -> str:
        """Render top-level blocks joined by single newlines.

        Blocks that render to nothing are skipped so they do not leave
        stray empty lines.
        """
        texts = (self.render(child) for child in document.children)
        return "\n".join(text for text in texts if text)

    def render(self, node: Node) -> str:
        """Render one node and its descendants."""
        if isinstance(node, Text):
            return node.text
        if isinstance(node, HardBreak):
            return "\n"
        if isinstance(node, Mention):
            return self._render_mention(node)
        if isinstance(node, Emoji):
            return self._render_emoji(node)
        if isinstance(node, Media):
            return self.options.placeholders.attachment

        inner = "".join(self.render(child) for child in node.children)
        if isinstance(node, ListItem):
            return f"{inner}\n"
        if isinstance(node, TableCell):
            return f"{inner}\t"
        if isinstance(node, TableRow):
            return f"{inner.rstrip()}\n"
        # Paragraphs, headings, lists, tables, panels, code blocks, media
        # containers and unknown kinds concatenate their children.
        return inner

    def _render_mention(self, node: Mention) -> str:
        if node.text:
            return node.text
        if node.has_attrs:
            return self.options.placeholders.mention
        return ""

    def _render_emoji(self, node: Emoji) -> str:
        if node.text is not None:
            return node.text
        if node.short_name is not None:
            return node.short_name
        return ""


def render_tree_to_plain_text(value: object, options: RenderOptions | None = None) -> str:
    """Convert an ADF document to plain text.

    Accepts a document mapping, its JSON serialization, or anything else.
    Strings that do not decode to a document are returned unchanged; other
    unrecognized values produce an empty string. Never raises.

    Args:
        value: ADF document (mapping or JSON string), or any other value
        options: Render options; defaults apply when omitted

    Returns:
        Plain text
    """
    options = options or DEFAULT_OPTIONS
    if value is None:
        return ""

    raw = value
    if isinstance(value, str):
        raw = load_document(value)

    document = parse_document(raw, options.max_depth)
    if document is None:
        if isinstance(value, str):
            return value
        logger.debug(f"Not an ADF document: {type(value).__name__}")
        return ""

    return PlainTextWalker(options).render_document(document)
