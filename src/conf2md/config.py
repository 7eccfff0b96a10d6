"""Configuration management for conf2md.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from conf2md.options import DEFAULT_MAX_DEPTH, Placeholders, RenderOptions

CONFIG_FILENAME = "conf2md.toml"


@dataclass
class MarkdownConfig:
    """Markdown output configuration."""

    bullet_marker: str = "-"


@dataclass
class LimitsConfig:
    """Traversal limits configuration."""

    max_depth: int = DEFAULT_MAX_DEPTH


@dataclass
class Config:
    """Application configuration."""

    placeholders: Placeholders = field(default_factory=Placeholders)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for conf2md.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        return cls(
            placeholders=cls._parse_placeholders(data.get("placeholders")),
            markdown=cls._parse_markdown(data.get("markdown")),
            limits=cls._parse_limits(data.get("limits")),
            config_path=path,
        )

    @classmethod
    def _parse_placeholders(cls, data: object) -> Placeholders:
        """Parse placeholders configuration section.

        Args:
            data: Raw placeholders section data

        Returns:
            Placeholders instance
        """
        if data is None:
            return Placeholders()

        if not isinstance(data, dict):
            raise ValueError("placeholders section must be a dictionary")

        defaults = Placeholders()
        values: dict[str, str] = {}
        for name in ("attachment", "mention", "image", "user"):
            value = data.get(name, getattr(defaults, name))
            if not isinstance(value, str):
                raise ValueError(f"placeholders.{name} must be a string")
            values[name] = value

        return Placeholders(**values)

    @classmethod
    def _parse_markdown(cls, data: object) -> MarkdownConfig:
        """Parse markdown configuration section."""
        if data is None:
            return MarkdownConfig()

        if not isinstance(data, dict):
            raise ValueError("markdown section must be a dictionary")

        bullet_marker = data.get("bullet_marker", "-")
        if bullet_marker not in ("-", "*", "+"):
            raise ValueError('markdown.bullet_marker must be one of "-", "*", "+"')

        return MarkdownConfig(bullet_marker=bullet_marker)

    @classmethod
    def _parse_limits(cls, data: object) -> LimitsConfig:
        """Parse limits configuration section."""
        if data is None:
            return LimitsConfig()

        if not isinstance(data, dict):
            raise ValueError("limits section must be a dictionary")

        max_depth = data.get("max_depth", DEFAULT_MAX_DEPTH)
        if not isinstance(max_depth, int) or isinstance(max_depth, bool):
            raise ValueError("limits.max_depth must be an integer")
        if max_depth < 1:
            raise ValueError("limits.max_depth must be positive")

        return LimitsConfig(max_depth=max_depth)

    def render_options(self) -> RenderOptions:
        """Build the immutable options passed into the renderers."""
        return RenderOptions(
            placeholders=self.placeholders,
            bullet_marker=self.markdown.bullet_marker,
            max_depth=self.limits.max_depth,
        )
