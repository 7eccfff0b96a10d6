"""Markdown rendering of Atlassian Document Format trees.

The typed tree is written out as standard HTML and converted with the same
``markdownify`` rules as storage format. Media nodes reference attachments
by ID; the caller's attachment map translates those IDs into the paths the
files were saved under.
"""

import logging
from collections.abc import Mapping

from conf2md.adf.nodes import (
    Blockquote,
    BulletList,
    CodeBlock,
    Emoji,
    HardBreak,
    Heading,
    ListItem,
    Media,
    Mention,
    Node,
    OrderedList,
    Panel,
    Paragraph,
    Rule,
    Table,
    TableCell,
    TableRow,
    Text,
    load_document,
    parse_document,
)
from conf2md.attachments import resolve_attachment_path
from conf2md.markdown import ALERT_TYPES, escape_attribute, escape_text, html_to_markdown
from conf2md.options import DEFAULT_OPTIONS, RenderOptions

logger = logging.getLogger(__name__)

_CONTAINER_TAGS = {
    Paragraph: "p",
    BulletList: "ul",
    ListItem: "li",
    Table: "table",
    TableRow: "tr",
    Blockquote: "blockquote",
}

# Applied innermost first; links wrap everything
_MARK_TAGS = (("code", "code"), ("strike", "del"), ("em", "em"), ("strong", "strong"))


class HtmlWriter:
    """Write a typed ADF tree as HTML for Markdown conversion."""

    def __init__(
        self,
        attachment_paths: Mapping[str, str] | None = None,
        options: RenderOptions = DEFAULT_OPTIONS,
    ) -> None:
        self.attachment_paths = attachment_paths
        self.options = options

    def write(self, node: Node) -> str:
        parts: list[str] = []
        self._write(node, parts)
        return "".join(parts)

    def _write_children(self, nodes: list[Node], parts: list[str]) -> None:
        for child in nodes:
            self._write(child, parts)

    def _wrap(self, tag: str, attrs: str, nodes: list[Node], parts: list[str]) -> None:
        parts.append(f"<{tag}{attrs}>")
        self._write_children(nodes, parts)
        parts.append(f"</{tag}>")

    def _write(self, node: Node, parts: list[str]) -> None:
        tag = _CONTAINER_TAGS.get(type(node))
        if tag == "li":
            self._write_list_item(node, parts)
        elif tag is not None:
            self._wrap(tag, "", node.children, parts)
        elif isinstance(node, Text):
            parts.append(self._text(node))
        elif isinstance(node, Heading):
            self._wrap(f"h{node.level}", "", node.children, parts)
        elif isinstance(node, OrderedList):
            # Markdown list numbers have at most nine digits
            attrs = f' start="{node.start}"' if 0 <= node.start < 10**9 else ""
            self._wrap("ol", attrs, node.children, parts)
        elif isinstance(node, TableCell):
            self._wrap("th" if node.header else "td", "", node.children, parts)
        elif isinstance(node, CodeBlock):
            code = "".join(child.text for child in node.children if isinstance(child, Text))
            language = (node.language or "").strip()
            attrs = f' data-language="{escape_attribute(language)}"' if language else ""
            parts.append(f"<pre><code{attrs}>{escape_text(code)}</code></pre>")
        elif isinstance(node, Panel):
            alert = ALERT_TYPES.get(node.panel_type, "NOTE")
            self._wrap("blockquote", f' data-alert="{alert}"', node.children, parts)
        elif isinstance(node, Rule):
            parts.append("<hr />")
        elif isinstance(node, HardBreak):
            parts.append("<br />")
        elif isinstance(node, Mention):
            if node.text:
                parts.append(escape_text(node.text))
            elif node.has_attrs:
                parts.append(escape_text(self.options.placeholders.mention))
        elif isinstance(node, Emoji):
            text = node.text if node.text is not None else node.short_name
            parts.append(escape_text(text or ""))
        elif isinstance(node, Media):
            parts.append(self._media(node))
        else:
            # Documents, media containers and unknown nodes keep their content
            self._write_children(node.children, parts)

    def _write_list_item(self, node: Node, parts: list[str]) -> None:
        """Write a list item; its first paragraph is unwrapped to keep the list tight."""
        parts.append("<li>")
        children = node.children
        if children and isinstance(children[0], Paragraph):
            self._write_children(children[0].children, parts)
            children = children[1:]
        self._write_children(children, parts)
        parts.append("</li>")

    def _text(self, node: Text) -> str:
        kinds = {mark.kind for mark in node.marks}
        content = escape_text(node.text)
        for kind, tag in _MARK_TAGS:
            if kind in kinds:
                content = f"<{tag}>{content}</{tag}>"
        for mark in node.marks:
            if mark.kind == "link" and mark.href:
                return f'<a href="{escape_attribute(mark.href)}">{content}</a>'
        return content

    def _media(self, node: Media) -> str:
        if not node.id:
            return escape_text(self.options.placeholders.attachment)
        src = resolve_attachment_path(node.id, self.attachment_paths)
        alt = node.alt or "attachment"
        return f'<img src="{escape_attribute(src)}" alt="{escape_attribute(alt)}" />'


def render_tree_to_markdown(
    value: object,
    attachment_paths: Mapping[str, str] | None = None,
    options: RenderOptions | None = None,
) -> str:
    """Convert an ADF document to Markdown.

    Input handling matches ``render_tree_to_plain_text``: strings that are
    not serialized documents pass through unchanged, other unrecognized
    values produce an empty string. Never raises.

    Args:
        value: ADF document (mapping or JSON string), or any other value
        attachment_paths: Attachment ID to saved relative path
        options: Render options; defaults apply when omitted

    Returns:
        Markdown text
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

    html = HtmlWriter(attachment_paths, options).write(document)
    return html_to_markdown(html, options)
