"""CLI interface for conf2md.

Command-line tool for rendering Confluence storage format and Atlassian
Document Format content as plain text or Markdown.
"""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, TextIO

import click

from conf2md.adf.markdown import render_tree_to_markdown
from conf2md.adf.plain_text import render_tree_to_plain_text
from conf2md.config import Config
from conf2md.options import RenderOptions
from conf2md.storage.markdown import render_markup_to_markdown
from conf2md.storage.plain_text import render_markup_to_plain_text

FORMATS = ("storage", "adf")


def _setup(verbose: bool, config_path: Path | None) -> RenderOptions:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return Config.load(config_path).render_options()


def _load_attachment_map(path: Path | None) -> dict[str, str] | None:
    """Read an attachment map from a JSON object of key to relative path.

    Raises:
        ValueError: If the file is not a JSON object of strings
    """
    if path is None:
        return None
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Attachment map must be a JSON object")
    for key, value in data.items():
        if not isinstance(value, str):
            raise ValueError(f"Attachment map value for {key!r} must be a string")
    return data


def _fail(e: Exception) -> NoReturn:
    click.echo(click.style(f"Error: {e}", fg="red"), err=True)
    sys.exit(1)


source_argument = click.argument(
    "source",
    type=click.File("r", encoding="utf-8"),
    default="-",
)
format_option = click.option(
    "--format",
    "-f",
    "source_format",
    type=click.Choice(FORMATS),
    default="storage",
    show_default=True,
    help="Input format: Confluence storage format or ADF JSON",
)
config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover conf2md.toml)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)


@click.group()
def cli() -> None:
    """conf2md - Render Confluence and Jira rich text as plain text or Markdown."""


@cli.command("plain-text")
@source_argument
@format_option
@config_option
@verbose_option
def plain_text(
    source: TextIO,
    source_format: str,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Render SOURCE (default: stdin) as plain text."""
    try:
        options = _setup(verbose, config_path)
        content = source.read()
    except (OSError, ValueError) as e:
        _fail(e)

    if source_format == "adf":
        click.echo(render_tree_to_plain_text(content, options))
    else:
        click.echo(render_markup_to_plain_text(content, options))


@cli.command()
@source_argument
@format_option
@click.option(
    "--attachments",
    "-a",
    "attachments_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="JSON object mapping attachment IDs or filenames to saved paths",
)
@config_option
@verbose_option
def markdown(
    source: TextIO,
    source_format: str,
    attachments_path: Path | None,
    config_path: Path | None,
    verbose: bool,
) -> None:
    """Render SOURCE (default: stdin) as Markdown."""
    try:
        options = _setup(verbose, config_path)
        attachment_paths = _load_attachment_map(attachments_path)
        content = source.read()
    except (OSError, ValueError) as e:
        _fail(e)

    if source_format == "adf":
        click.echo(render_tree_to_markdown(content, attachment_paths, options))
    else:
        click.echo(render_markup_to_markdown(content, attachment_paths, options))
