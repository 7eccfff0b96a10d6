"""Lenient parser for Confluence storage format.

Storage format is an XHTML fragment with namespaced macro elements
(``ac:structured-macro``, ``ri:attachment`` ...) and no namespace
declarations. The fragment is wrapped in a root element declaring the
Confluence namespaces and parsed with lxml in recovery mode, so
unterminated or mismatched tags never abort parsing.

Text in the resulting tree stays in source form: apart from the named HTML
entities XML lacks, entities are not decoded, so every renderer decodes
exactly once, through ``conf2md.text``. To get there, ampersands are
escaped before parsing and CDATA sections are turned into entity-encoded
text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from lxml import etree

from conf2md.text import decode_entities

logger = logging.getLogger(__name__)

# Confluence XML namespaces
NAMESPACES = {
    "ac": "http://www.atlassian.com/schema/confluence/4/ac/",
    "ri": "http://www.atlassian.com/schema/confluence/4/ri/",
    "at": "http://www.atlassian.com/schema/confluence/4/at/",
}
_PREFIX_BY_URI = {uri: prefix for prefix, uri in NAMESPACES.items()}

# HTML elements that never have content; recovery mode may still nest
# the following siblings inside them when they are not self-closed.
VOID_TAGS = frozenset({"br", "hr", "col", "img", "wbr", "input"})

MACRO_TAGS = frozenset({"ac:structured-macro", "ac:macro"})

# Named HTML entities that XML does not define, mapped to their characters.
# "nbsp" is absent: it decodes to a plain space with the other fixed entities.
HTML_ENTITIES = {
    "mdash": "—",
    "ndash": "–",
    "ldquo": "“",
    "rdquo": "”",
    "lsquo": "‘",
    "rsquo": "’",
    "bull": "•",
    "hellip": "…",
    "rarr": "→",
    "larr": "←",
    "harr": "↔",
    "uarr": "↑",
    "darr": "↓",
    "le": "≤",
    "ge": "≥",
    "ne": "≠",
    "plusmn": "±",
    "times": "×",
    "divide": "÷",
    "copy": "©",
    "reg": "®",
    "trade": "™",
    "euro": "€",
    "pound": "£",
    "yen": "¥",
    "cent": "¢",
    "deg": "°",
    "para": "¶",
    "sect": "§",
    "dagger": "†",
    "Dagger": "‡",
    "laquo": "«",
    "raquo": "»",
    "middot": "·",
}

_NAMED_ENTITY = re.compile(r"&([a-zA-Z]+);")
_CDATA = re.compile(r"<!\[CDATA\[(.*?)]]>", re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
# "<" that cannot open a tag, comment or declaration is text
_BARE_LESS_THAN = re.compile(r"<(?![A-Za-z_:/!?])")
# Characters XML 1.0 cannot carry, plus lone surrogates
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass
class MarkupNode:
    """Element of a parsed storage format document.

    Tag and attribute names use their prefixed form (``ac:image``,
    ``ri:filename``); HTML names are lower-cased. ``text`` and ``tail`` are
    in source form, attribute values are decoded.
    """

    tag: str  # Prefixed element name
    text: str = ""  # Text before the first child
    tail: str = ""  # Text after this element, inside the parent
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[MarkupNode] = field(default_factory=list)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return an attribute value."""
        return self.attrs.get(name, default)

    def iter(self) -> Iterator[MarkupNode]:
        """Iterate over this node and its descendants in document order."""
        stack: list[MarkupNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, tag: str) -> MarkupNode | None:
        """Find the first descendant with the given tag."""
        for node in self.iter():
            if node is not self and node.tag == tag:
                return node
        return None

    def text_content(self) -> str:
        """Concatenate the text of this node and all descendants, without its tail."""
        parts = [self.text]
        stack: list[tuple[MarkupNode, bool]] = [
            (child, False) for child in reversed(self.children)
        ]
        while stack:
            node, closing = stack.pop()
            if closing:
                parts.append(node.tail)
                continue
            parts.append(node.text)
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))
        return "".join(parts)

    def is_macro(self) -> bool:
        """Check if this is a structured macro element."""
        return self.tag in MACRO_TAGS

    @property
    def macro_name(self) -> str:
        """Lower-cased ``ac:name`` of a macro, or an empty string."""
        return (self.get("ac:name") or "").strip().lower()

    def parameter(self, name: str) -> str | None:
        """Return the source-form text of a direct ``ac:parameter`` child."""
        for child in self.children:
            if child.tag == "ac:parameter" and child.get("ac:name") == name:
                return child.text_content()
        return None

    def child(self, tag: str) -> MarkupNode | None:
        """Return the first direct child with the given tag."""
        for child in self.children:
            if child.tag == tag:
                return child
        return None


def _qualified_name(name: str) -> str:
    """Map an lxml ``{uri}local`` name back to its ``prefix:local`` form."""
    if name.startswith("{"):
        uri, _, local = name[1:].partition("}")
        prefix = _PREFIX_BY_URI.get(uri)
        return f"{prefix}:{local}" if prefix else local.lower()
    return name.lower()


def _encode_cdata(match: re.Match[str]) -> str:
    content = match.group(1)
    return content.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _convert_html_entities(markup: str) -> str:
    """Convert named HTML entities to characters, keeping unknown ones as-is."""

    def replace_entity(match: re.Match[str]) -> str:
        return HTML_ENTITIES.get(match.group(1), match.group(0))

    return _NAMED_ENTITY.sub(replace_entity, markup)


class StorageParser:
    """Parse Confluence storage format into a ``MarkupNode`` tree."""

    def parse(self, markup: str) -> MarkupNode:
        """Parse markup into a tree rooted at a synthetic ``root`` node.

        Never raises: when recovery fails completely the root holds the
        markup with its tags stripped.

        Args:
            markup: Storage format fragment

        Returns:
            Root node whose children are the fragment's top-level elements
        """
        sanitized = _INVALID_XML_CHARS.sub("", markup)
        source_form = _convert_html_entities(_CDATA.sub(_encode_cdata, sanitized))
        source_form = _BARE_LESS_THAN.sub("&lt;", source_form)
        escaped = source_form.replace("&", "&amp;")

        namespace_decls = " ".join(
            f'xmlns:{prefix}="{uri}"' for prefix, uri in NAMESPACES.items()
        )
        wrapped = f"<root {namespace_decls}>{escaped}</root>"

        # Parsers keep state, so each call gets its own
        parser = etree.XMLParser(
            recover=True,
            remove_comments=True,
            remove_pis=True,
            resolve_entities=False,
            no_network=True,
        )
        try:
            root = etree.fromstring(wrapped.encode("utf-8"), parser)
        except (etree.XMLSyntaxError, ValueError) as e:
            logger.debug(f"Storage format recovery failed: {e}")
            root = None

        if root is None:
            return MarkupNode(tag="root", text=_TAG.sub(" ", source_form))

        if parser.error_log:
            logger.debug(f"Recovered from {len(parser.error_log)} markup errors")
        return self._convert(root)

    def _convert(self, elem: etree._Element) -> MarkupNode:
        """Recursively convert an lxml element to a ``MarkupNode``."""
        node = MarkupNode(
            tag=_qualified_name(elem.tag),
            text=elem.text or "",
            attrs={
                _qualified_name(name): decode_entities(value)
                for name, value in elem.attrib.items()
            },
        )
        for child in elem:
            if not isinstance(child.tag, str):
                self._append_text(node, child.tail)
                continue

            converted = self._convert(child)
            if converted.tag in VOID_TAGS and (converted.text or converted.children):
                # Content swallowed by an unclosed void element belongs after it
                converted.tail = converted.text
                hoisted = converted.children
                converted.text, converted.children = "", []
                node.children.append(converted)
                node.children.extend(hoisted)
            else:
                node.children.append(converted)
            self._append_text(node, child.tail)
        return node

    def _append_text(self, node: MarkupNode, text: str | None) -> None:
        if not text:
            return
        if node.children:
            node.children[-1].tail += text
        else:
            node.text += text


def parse_storage(markup: str) -> MarkupNode:
    """Parse storage format markup with a fresh ``StorageParser``."""
    return StorageParser().parse(markup)
