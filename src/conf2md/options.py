"""Render options passed explicitly into every renderer."""

from dataclasses import dataclass, field

DEFAULT_MAX_DEPTH = 200


@dataclass(frozen=True)
class Placeholders:
    """Fixed strings emitted where content cannot be rendered as text."""

    attachment: str = "[attachment]"
    mention: str = "@user"
    image: str = "[image: {filename}]"
    user: str = "[user]"

    def image_for(self, filename: str) -> str:
        """Format the image placeholder for a filename."""
        return self.image.replace("{filename}", filename)


@dataclass(frozen=True)
class RenderOptions:
    """Options shared by the plain-text and Markdown renderers.

    Attributes:
        placeholders: Placeholder strings for attachments, mentions and users
        bullet_marker: Marker for unordered list items in Markdown
        max_depth: Nesting depth after which subtrees are flattened to text
    """

    placeholders: Placeholders = field(default_factory=Placeholders)
    bullet_marker: str = "-"
    max_depth: int = DEFAULT_MAX_DEPTH


DEFAULT_OPTIONS = RenderOptions()
