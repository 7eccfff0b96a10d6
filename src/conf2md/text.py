"""Entity decoding and whitespace normalization shared by all renderers."""

import re

# Order matters: "&amp;" runs before the other named entities, so
# "&amp;lt;" decodes to "<" while "&amp;nbsp;" stays "&nbsp;".
_NAMED_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
)

_NUMERIC_ENTITY = re.compile(r"&#(?:(\d+)|[xX]([0-9a-fA-F]+));")
_INLINE_WHITESPACE = re.compile(r"[^\S\n]+")


def _decode_numeric(match: re.Match[str]) -> str:
    decimal, hexadecimal = match.groups()
    try:
        code_point = int(decimal) if decimal is not None else int(hexadecimal, 16)
    except ValueError:
        return match.group(0)
    if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
        return match.group(0)
    return chr(code_point)


def decode_entities(text: str) -> str:
    """Decode the fixed set of markup entities.

    Named entities are replaced one after another in a fixed order, then
    decimal and hexadecimal character references are converted to their
    code points. References that do not name a valid code point are left
    as they are.

    Args:
        text: Text possibly containing entities

    Returns:
        Decoded text
    """
    for entity, replacement in _NAMED_ENTITIES:
        text = text.replace(entity, replacement)
    return _NUMERIC_ENTITY.sub(_decode_numeric, text)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs inside each line and trim every line.

    Newlines are kept; every other run of whitespace becomes one space.
    """
    return "\n".join(
        _INLINE_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")
    )


def normalize_lines(text: str) -> str:
    """Collapse whitespace per line and drop lines left empty."""
    lines = collapse_whitespace(text).split("\n")
    return "\n".join(line for line in lines if line)
