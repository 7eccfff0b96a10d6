"""Markdown rendering of Confluence storage format.

The parsed tree is rewritten into standard HTML first: images become
``img`` elements (inside a ``figure`` when captioned), ``code`` and
``noformat`` macros become ``pre`` blocks, admonitions become alert block
quotes, other macros contribute their body, and links and emoticons become
their text. ``markdownify`` then converts that HTML with the rules in
``conf2md.markdown``.
"""

import logging
from collections.abc import Mapping

from conf2md.attachments import resolve_attachment_path
from conf2md.markdown import ALERT_TYPES, escape_attribute, escape_text, html_to_markdown
from conf2md.options import DEFAULT_OPTIONS, RenderOptions
from conf2md.storage.parser import MarkupNode, parse_storage
from conf2md.storage.serializer import MarkupSerializer
from conf2md.text import decode_entities

logger = logging.getLogger(__name__)

CODE_MACROS = frozenset({"code", "noformat"})
ALERT_MACROS = frozenset({"info", "note", "tip", "warning"})
# Confluence elements that only carry data for their parent
_DATA_TAGS = frozenset({"ac:parameter", "ac:caption"})


class HtmlRewriter(MarkupSerializer):
    """Serialize a storage format tree as HTML that Markdown can express."""

    def __init__(
        self,
        attachment_paths: Mapping[str, str] | None = None,
        options: RenderOptions = DEFAULT_OPTIONS,
    ) -> None:
        super().__init__(options.max_depth)
        self.attachment_paths = attachment_paths
        self.options = options

    def _rewrite(self, node: MarkupNode, parts: list[str], depth: int) -> bool:
        tag = node.tag
        if node.is_macro():
            self._write_macro(node, parts, depth)
        elif tag == "ac:image":
            self._write_image(node, parts, depth)
        elif tag == "ac:link":
            self._write_link(node, parts, depth)
        elif tag == "ac:emoticon":
            parts.append(escape_text(node.get("ac:emoji-fallback") or ""))
        elif tag == "li":
            return self._write_list_item(node, parts, depth)
        elif tag not in _DATA_TAGS and not tag.startswith("ri:"):
            return False
        return True

    def _write_list_item(self, node: MarkupNode, parts: list[str], depth: int) -> bool:
        """Write a list item whose leading paragraph is unwrapped to keep the list tight."""
        first = node.children[0] if node.children else None
        if first is None or first.tag != "p" or decode_entities(node.text).strip():
            return False
        parts.append(f"<li{self._attributes(node)}>")
        self._write_children(first, parts, depth + 1)
        parts.append(self._text(first.tail))
        for child in node.children[1:]:
            self._write(child, parts, depth + 1)
            parts.append(self._text(child.tail))
        parts.append("</li>")
        return True

    def _write_macro(self, node: MarkupNode, parts: list[str], depth: int) -> None:
        name = node.macro_name
        if name in CODE_MACROS:
            body = node.child("ac:plain-text-body")
            code = self._text(body.text_content()) if body is not None else ""
            language = decode_entities(node.parameter("language") or "").strip()
            attrs = f' data-language="{escape_attribute(language)}"' if language else ""
            parts.append(f"<pre><code{attrs}>{code}</code></pre>")
            return

        rich_body = node.child("ac:rich-text-body")
        if name in ALERT_MACROS:
            parts.append(f'<blockquote data-alert="{ALERT_TYPES[name]}">')
            if rich_body is not None:
                self._write_children(rich_body, parts, depth + 1)
            parts.append("</blockquote>")
            return
        if rich_body is not None:
            self._write_children(rich_body, parts, depth + 1)
            return

        plain_body = node.child("ac:plain-text-body")
        if plain_body is not None:
            parts.append(f"<pre>{self._text(plain_body.text_content())}</pre>")
            return
        # Inline macros such as status show their title
        title = node.parameter("title")
        if title:
            parts.append(self._text(title))

    def _write_image(self, node: MarkupNode, parts: list[str], depth: int) -> None:
        attachment = node.find("ri:attachment")
        if attachment is not None:
            filename = attachment.get("ri:filename") or ""
            if not filename:
                parts.append(escape_text(self.options.placeholders.attachment))
                return
            src = resolve_attachment_path(filename, self.attachment_paths)
            alt = filename
        else:
            url = node.find("ri:url")
            src = (url.get("ri:value") or "") if url is not None else ""
            if not src:
                return
            alt = node.get("ac:alt") or ""

        image = f'<img src="{escape_attribute(src)}" alt="{escape_attribute(alt)}" />'
        caption = node.child("ac:caption")
        if caption is None:
            parts.append(image)
            return
        parts.append(f"<figure>{image}<figcaption>")
        self._write_children(caption, parts, depth + 1)
        parts.append("</figcaption></figure>")

    def _write_link(self, node: MarkupNode, parts: list[str], depth: int) -> None:
        if node.find("ri:user") is not None:
            parts.append(escape_text(self.options.placeholders.user))
            return
        body = node.child("ac:link-body")
        if body is not None:
            self._write_children(body, parts, depth + 1)
            return
        plain_body = node.child("ac:plain-text-link-body")
        if plain_body is not None:
            parts.append(self._text(plain_body.text_content()))
            return
        page = node.find("ri:page")
        if page is not None and page.get("ri:content-title"):
            parts.append(escape_text(page.get("ri:content-title") or ""))
            return
        attachment = node.find("ri:attachment")
        if attachment is not None and attachment.get("ri:filename"):
            filename = attachment.get("ri:filename") or ""
            href = resolve_attachment_path(filename, self.attachment_paths)
            parts.append(f'<a href="{escape_attribute(href)}">{escape_text(filename)}</a>')


def render_markup_to_markdown(
    markup: str | None,
    attachment_paths: Mapping[str, str] | None = None,
    options: RenderOptions | None = None,
) -> str:
    """Convert storage format to Markdown.

    Never raises; malformed markup is recovered as far as possible and
    unknown elements contribute their content.

    Args:
        markup: Storage format markup, or None
        attachment_paths: Attachment filename to saved relative path
        options: Render options; defaults apply when omitted

    Returns:
        Markdown text with blocks separated by one blank line
    """
    if not markup or not isinstance(markup, str):
        return ""
    options = options or DEFAULT_OPTIONS
    logger.debug(f"Rendering {len(markup)} characters of markup as Markdown")
    html = HtmlRewriter(attachment_paths, options).serialize(parse_storage(markup))
    return html_to_markdown(html, options)
