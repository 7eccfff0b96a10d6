"""Plain-text rendering of Confluence storage format."""

import logging
import re

from conf2md.options import DEFAULT_OPTIONS, RenderOptions
from conf2md.storage.parser import MarkupNode, parse_storage
from conf2md.text import decode_entities, normalize_lines

logger = logging.getLogger(__name__)

# Elements whose content sits on lines of its own
LINE_TAGS = frozenset(
    {
        "p",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "li",
        "tr",
        "blockquote",
        "div",
        "pre",
        "table",
        "ul",
        "ol",
        "dl",
        "dt",
        "dd",
        "hr",
        "section",
        "figure",
        "figcaption",
    }
)

CELL_TAGS = frozenset({"td", "th"})

# Formatting elements that add no boundary, so "<b>重要</b>です" stays one word
INLINE_TAGS = frozenset(
    {
        "a",
        "abbr",
        "b",
        "big",
        "cite",
        "code",
        "del",
        "em",
        "font",
        "i",
        "ins",
        "kbd",
        "mark",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strike",
        "strong",
        "sub",
        "sup",
        "time",
        "u",
        "var",
        "ac:inline-comment-marker",
        "ac:link",
        "ac:link-body",
        "ac:plain-text-link-body",
    }
)

DROPPED_TAGS = frozenset({"ac:emoticon", "colgroup", "col", "ac:caption"})

_TAG = re.compile(r"<[^>]*>")


def _source_form(text: str) -> str:
    """Encode generated text so the final entity decoding restores it."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class PlainTextRenderer:
    """Render a parsed storage format tree as plain text.

    The walk emits text in source form; tags left over by recovery are
    stripped, entities are decoded once and whitespace is normalized at
    the end.
    """

    def __init__(self, options: RenderOptions = DEFAULT_OPTIONS) -> None:
        self.options = options

    def render(self, root: MarkupNode) -> str:
        raw = self._children(root, 0)
        text = decode_entities(_TAG.sub(" ", raw))
        return normalize_lines(text).strip()

    def _children(self, node: MarkupNode, depth: int) -> str:
        parts = [node.text]
        for child in node.children:
            parts.append(self._element(child, depth + 1))
            parts.append(child.tail)
        return "".join(parts)

    def _element(self, node: MarkupNode, depth: int) -> str:
        tag = node.tag
        if depth > self.options.max_depth:
            logger.debug(f"Markup nesting deeper than {self.options.max_depth}, flattening")
            return f" {node.text_content()} "

        if tag == "br":
            return "\n"
        if tag == "ac:image":
            return self._image(node)
        if tag == "ac:link" and node.find("ri:user") is not None:
            return _source_form(self.options.placeholders.user)
        if tag == "ac:parameter":
            # Status and similar macros carry their visible label as a title
            if node.get("ac:name") == "title":
                return f" {node.text_content()} "
            return ""
        if tag in DROPPED_TAGS or tag.startswith("ri:"):
            return ""

        inner = self._children(node, depth)
        if tag in INLINE_TAGS:
            return inner
        if tag in CELL_TAGS:
            return f"{inner}\t"
        if tag in LINE_TAGS:
            return f"\n{inner}\n"
        return f" {inner} "

    def _image(self, node: MarkupNode) -> str:
        attachment = node.find("ri:attachment")
        if attachment is not None:
            # An attachment reference always yields a placeholder, even unnamed
            filename = attachment.get("ri:filename") or ""
            return _source_form(self.options.placeholders.image_for(filename))
        url = node.find("ri:url")
        if url is None or not url.get("ri:value"):
            return ""
        return _source_form(self.options.placeholders.image_for(url.get("ri:value") or ""))


def render_markup_to_plain_text(
    markup: str | None, options: RenderOptions | None = None
) -> str:
    """Convert storage format to plain text.

    Images become ``[image: <filename>]``, user links become ``[user]``
    and line breaks, paragraphs and table rows become newlines. Every line
    is trimmed and empty lines are dropped. Never raises.

    Args:
        markup: Storage format markup, or None
        options: Render options; defaults apply when omitted

    Returns:
        Plain text
    """
    if not markup or not isinstance(markup, str):
        return ""
    options = options or DEFAULT_OPTIONS
    logger.debug(f"Rendering {len(markup)} characters of markup as plain text")
    return PlainTextRenderer(options).render(parse_storage(markup))
