"""Tests for configuration loading."""

from pathlib import Path

import pytest
from conf2md.config import Config, LimitsConfig, MarkdownConfig
from conf2md.options import DEFAULT_MAX_DEPTH, Placeholders, RenderOptions


class TestConfigLoad:
    """Tests for Config.load()."""

    def test__explicit_path__loads_config(self, tmp_path: Path) -> None:
        """Load config from explicit path."""
        config_file = tmp_path / "conf2md.toml"
        config_file.write_text("""
[placeholders]
attachment = "[添付]"
mention = "@ユーザー"
image = "[画像: {filename}]"
user = "[ユーザー]"

[markdown]
bullet_marker = "*"

[limits]
max_depth = 50
""")

        config = Config.load(config_file)

        assert config.placeholders.attachment == "[添付]"
        assert config.placeholders.mention == "@ユーザー"
        assert config.placeholders.image == "[画像: {filename}]"
        assert config.placeholders.user == "[ユーザー]"
        assert config.markdown.bullet_marker == "*"
        assert config.limits.max_depth == 50
        assert config.config_path == config_file

    def test__minimal_config__uses_defaults(self, tmp_path: Path) -> None:
        """Load an empty config file with defaults."""
        config_file = tmp_path / "conf2md.toml"
        config_file.write_text("")

        config = Config.load(config_file)

        assert config.placeholders == Placeholders()
        assert config.markdown == MarkdownConfig()
        assert config.limits == LimitsConfig()
        assert config.limits.max_depth == DEFAULT_MAX_DEPTH

    def test__partial_section__fills_defaults(self, tmp_path: Path) -> None:
        """Use defaults for keys missing from a section."""
        config_file = tmp_path / "conf2md.toml"
        config_file.write_text('[placeholders]\nuser = "[member]"\n')

        config = Config.load(config_file)

        assert config.placeholders.user == "[member]"
        assert config.placeholders.attachment == "[attachment]"

    def test__missing_explicit_path__raises(self, tmp_path: Path) -> None:
        """Raise FileNotFoundError for an explicit path that does not exist."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            Config.load(tmp_path / "missing.toml")

    def test__discovers_config_in_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Discover conf2md.toml in a parent of the working directory."""
        (tmp_path / "conf2md.toml").write_text('[markdown]\nbullet_marker = "+"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.markdown.bullet_marker == "+"
        assert config.config_path == tmp_path / "conf2md.toml"


class TestConfigValidation:
    """Tests for rejected configuration values."""

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ('placeholders = "x"', "placeholders section must be a dictionary"),
            ("[placeholders]\nuser = 1", "placeholders.user must be a string"),
            ("markdown = 1", "markdown section must be a dictionary"),
            ('[markdown]\nbullet_marker = "x"', "markdown.bullet_marker must be one of"),
            ("limits = []", "limits section must be a dictionary"),
            ('[limits]\nmax_depth = "deep"', "limits.max_depth must be an integer"),
            ("[limits]\nmax_depth = true", "limits.max_depth must be an integer"),
            ("[limits]\nmax_depth = 0", "limits.max_depth must be positive"),
            ("[limits", "Invalid TOML"),
        ],
    )
    def test__invalid_value__raises(self, tmp_path: Path, content: str, message: str) -> None:
        """Raise ValueError for malformed sections and values."""
        config_file = tmp_path / "conf2md.toml"
        config_file.write_text(content)

        with pytest.raises(ValueError, match=message):
            Config.load(config_file)


class TestRenderOptions:
    """Tests for Config.render_options()."""

    def test__render_options__from_config(self) -> None:
        """Build render options from the loaded sections."""
        config = Config(
            placeholders=Placeholders(user="@member"),
            markdown=MarkdownConfig(bullet_marker="+"),
            limits=LimitsConfig(max_depth=10),
        )

        options = config.render_options()

        assert isinstance(options, RenderOptions)
        assert options.placeholders.user == "@member"
        assert options.placeholders.image_for("a.png") == "[image: a.png]"
        assert options.bullet_marker == "+"
        assert options.max_depth == 10

    def test__default_config__default_options(self) -> None:
        """Produce the default render options from a default config."""
        assert Config().render_options() == RenderOptions()

    def test__placeholders_section__shared_with_options(self, tmp_path: Path) -> None:
        """Parse placeholders once and hand the same object to the renderers."""
        config_file = tmp_path / "conf2md.toml"
        config_file.write_text('[placeholders]\nimage = "<{filename}>"\n')

        config = Config.load(config_file)
        options = config.render_options()

        assert isinstance(config.placeholders, Placeholders)
        assert options.placeholders is config.placeholders
        assert options.placeholders.image_for("a.png") == "<a.png>"
