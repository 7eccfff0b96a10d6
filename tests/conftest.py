"""Shared test fixtures."""

from typing import Any

import pytest
from click.testing import CliRunner
from conf2md.options import Placeholders, RenderOptions


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def custom_options() -> RenderOptions:
    """Render options with non-default placeholders and markers."""
    return RenderOptions(
        placeholders=Placeholders(
            attachment="(file)",
            mention="@someone",
            image="(image {filename})",
            user="@member",
        ),
        bullet_marker="*",
    )


def doc(*content: dict[str, Any]) -> dict[str, Any]:
    """Build an ADF document from top-level nodes."""
    return {"type": "doc", "version": 1, "content": list(content)}


def paragraph(*content: dict[str, Any]) -> dict[str, Any]:
    """Build an ADF paragraph."""
    return {"type": "paragraph", "content": list(content)}


def text(value: str, *marks: str, href: str | None = None) -> dict[str, Any]:
    """Build an ADF text node with optional marks."""
    node: dict[str, Any] = {"type": "text", "text": value}
    mark_list: list[dict[str, Any]] = [{"type": mark} for mark in marks]
    if href is not None:
        mark_list.append({"type": "link", "attrs": {"href": href}})
    if mark_list:
        node["marks"] = mark_list
    return node


def node(kind: str, *content: dict[str, Any], **attrs: Any) -> dict[str, Any]:
    """Build an arbitrary ADF node."""
    result: dict[str, Any] = {"type": kind}
    if content:
        result["content"] = list(content)
    if attrs:
        result["attrs"] = attrs
    return result
