"""Markdown conversion shared by the ADF and storage format renderers.

Both renderers first rewrite their input into standard HTML and then hand
it to ``markdownify``. ``ConfluenceMarkdownConverter`` adds the rules that
Confluence content needs on top of the stock ones: admonitions become
GitHub alerts, captioned images become an image followed by an emphasized
caption, coloured text stays HTML, and tables Markdown cannot express
(merged cells, block content in cells) are kept as HTML.
"""

import logging
import re

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

from conf2md.options import DEFAULT_OPTIONS, RenderOptions

logger = logging.getLogger(__name__)

# GitHub alert marker per admonition kind
ALERT_TYPES = {
    "info": "NOTE",
    "note": "NOTE",
    "tip": "TIP",
    "success": "TIP",
    "warning": "WARNING",
    "error": "CAUTION",
}

# Content that makes a table cell impossible to express in a pipe table
CELL_BLOCK_TAGS = [
    "br",
    "table",
    "pre",
    "blockquote",
    "hr",
    "ul",
    "ol",
    "figure",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
]
SPAN_ATTRIBUTES = ("colspan", "rowspan")

_COLOR_STYLE = re.compile(r"(?:^|;)\s*color\s*:", re.IGNORECASE)
_LANGUAGE_CLASS = re.compile(r"^lang(?:uage)?-(.+)$")


def escape_text(text: str) -> str:
    """Escape text for an HTML text node."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_attribute(value: str) -> str:
    """Escape a value for a double-quoted HTML attribute."""
    return escape_text(value).replace('"', "&quot;")


def _classes(el) -> list[str]:
    value = el.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def code_language(el) -> str | None:
    """Find the info string for a ``pre`` block.

    Looks at ``data-language`` and ``language-*`` / ``lang-*`` classes on the
    ``pre`` element and then on its ``code`` child.
    """
    for candidate in (el, el.find("code")):
        if candidate is None:
            continue
        language = " ".join((candidate.get("data-language") or "").split())
        if language:
            return language
        for name in _classes(candidate):
            match = _LANGUAGE_CLASS.match(name)
            if match:
                return match.group(1)
    return None


def is_complex_table(el) -> bool:
    """Check whether a table needs HTML: merged cells or block content in cells."""
    for cell in el.find_all(["td", "th"]):
        if any(cell.has_attr(name) for name in SPAN_ATTRIBUTES):
            return True
        if cell.find(CELL_BLOCK_TAGS) is not None:
            return True
        if len(cell.find_all("p")) > 1:
            return True
    return False


class ConfluenceMarkdownConverter(MarkdownConverter):
    """``markdownify`` converter with the rules Confluence content needs."""

    def __init__(self, options: RenderOptions = DEFAULT_OPTIONS) -> None:
        super().__init__(
            autolinks=False,
            bullets=options.bullet_marker or "-",
            code_language_callback=code_language,
            heading_style=ATX,
            table_infer_header=True,
            wrap=True,
            wrap_width=None,
        )

    convert_strike = MarkdownConverter.convert_del

    def convert_blockquote(self, el, text, parent_tags):
        markdown = super().convert_blockquote(el, text, parent_tags)
        alert = el.get("data-alert")
        if not alert or "_inline" in parent_tags:
            return markdown
        body = markdown.strip("\n")
        marker = f"> [!{alert}]"
        if not body:
            return f"\n\n{marker}\n\n"
        return f"\n\n{marker}\n{body}\n\n"

    def convert_figure(self, el, text, parent_tags):
        text = text.strip()
        if "_inline" in parent_tags:
            return f" {text} "
        return f"\n\n{text}\n\n" if text else ""

    def convert_figcaption(self, el, text, parent_tags):
        caption = " ".join(text.split())
        if not caption:
            return ""
        if "_inline" in parent_tags:
            return f" *{caption}* "
        return f"\n\n*{caption}*\n\n"

    def convert_img(self, el, text, parent_tags):
        # Images stay images inside headings and table cells
        return super().convert_img(el, text, parent_tags - {"_inline"})

    def convert_span(self, el, text, parent_tags):
        if "_noformat" not in parent_tags and _COLOR_STYLE.search(el.get("style") or ""):
            return str(el)
        return text

    def convert_table(self, el, text, parent_tags):
        if is_complex_table(el):
            logger.debug("Table has merged cells or block content, keeping HTML")
            return f"\n\n{el}\n\n"
        return super().convert_table(el, text, parent_tags)

    def convert_td(self, el, text, parent_tags):
        return super().convert_td(el, text.replace("|", r"\|"), parent_tags)

    def convert_th(self, el, text, parent_tags):
        return super().convert_th(el, text.replace("|", r"\|"), parent_tags)


def html_to_markdown(html: str, options: RenderOptions = DEFAULT_OPTIONS) -> str:
    """Convert standard HTML to Markdown.

    Args:
        html: HTML produced by one of the renderers
        options: Render options; the bullet marker applies here

    Returns:
        Markdown text without leading or trailing blank lines
    """
    try:
        markdown = ConfluenceMarkdownConverter(options).convert(html)
    except RecursionError:
        logger.debug("HTML nested too deeply for Markdown conversion, keeping text")
        markdown = BeautifulSoup(html, "html.parser").get_text()
    return markdown.strip()
