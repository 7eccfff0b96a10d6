"""Attachment path resolution."""

from collections.abc import Mapping


def resolve_attachment_path(key: str, mapping: Mapping[str, str] | None = None) -> str:
    """Resolve a logical attachment key to the path it was saved under.

    The key is an attachment ID or a filename, depending on the caller.
    When the mapping has no usable entry the key itself is returned, so
    the raw filename serves as a best-effort relative path.

    Args:
        key: Attachment ID or filename
        mapping: Key to saved relative path, supplied by the caller

    Returns:
        Mapped path, or the key unchanged
    """
    if mapping:
        path = mapping.get(key)
        if isinstance(path, str) and path:
            return path
    return key
