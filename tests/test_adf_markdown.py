"""Tests for Markdown rendering of ADF documents."""

import json

from conf2md.adf.markdown import render_tree_to_markdown
from conf2md.options import RenderOptions
from conftest import doc, node, paragraph, text


class TestInputHandling:
    """Tests for the values accepted by render_tree_to_markdown()."""

    def test__none__returns_empty(self) -> None:
        """Render None as an empty string."""
        assert render_tree_to_markdown(None) == ""

    def test__non_document__returns_empty(self) -> None:
        """Render values without a document root as an empty string."""
        assert render_tree_to_markdown({"type": "paragraph"}) == ""

    def test__plain_string__passed_through(self) -> None:
        """Return strings that are not JSON unchanged."""
        assert render_tree_to_markdown("plain *text*") == "plain *text*"

    def test__json_document__rendered(self) -> None:
        """Decode serialized documents before rendering."""
        serialized = json.dumps(doc(node("heading", text("Title"), level=1)))
        assert render_tree_to_markdown(serialized) == "# Title"


class TestBlocks:
    """Tests for block-level rendering."""

    def test__heading_and_paragraph__blank_line_between(self) -> None:
        """Separate blocks with one blank line."""
        value = doc(node("heading", text("Title"), level=2), paragraph(text("Body")))
        assert render_tree_to_markdown(value) == "## Title\n\nBody"

    def test__heading_level__clamped(self) -> None:
        """Clamp heading levels to the 1-6 range."""
        value = doc(node("heading", text("Deep"), level=9))
        assert render_tree_to_markdown(value) == "###### Deep"

    def test__hard_break__line_break(self) -> None:
        """Render a hard break as a Markdown line break, not a new block."""
        value = doc(paragraph(text("a"), node("hardBreak"), text("b")))
        assert render_tree_to_markdown(value) == "a  \nb"

    def test__bullet_list__markers(self) -> None:
        """Render bullet lists with dash markers."""
        value = doc(
            node(
                "bulletList",
                node("listItem", paragraph(text("A"))),
                node("listItem", paragraph(text("B"))),
            )
        )
        assert render_tree_to_markdown(value) == "- A\n- B"

    def test__ordered_list__start_number(self) -> None:
        """Number ordered lists from their start attribute."""
        value = doc(
            node(
                "orderedList",
                node("listItem", paragraph(text("A"))),
                node("listItem", paragraph(text("B"))),
                order=3,
            )
        )
        assert render_tree_to_markdown(value) == "3. A\n4. B"

    def test__nested_list__indented(self) -> None:
        """Indent nested lists under their item."""
        value = doc(
            node(
                "bulletList",
                node(
                    "listItem",
                    paragraph(text("A")),
                    node("bulletList", node("listItem", paragraph(text("B")))),
                ),
            )
        )
        assert render_tree_to_markdown(value) == "- A\n  - B"

    def test__list_item_second_paragraph__indented(self) -> None:
        """Indent later paragraphs of a list item under its marker."""
        value = doc(
            node("bulletList", node("listItem", paragraph(text("A")), paragraph(text("B"))))
        )
        assert render_tree_to_markdown(value) == "- A\n\n  B"

    def test__code_block__fenced_with_language(self) -> None:
        """Render code blocks as fenced code with the language."""
        value = doc(node("codeBlock", text("print(1)"), language="python"))
        assert render_tree_to_markdown(value) == "```python\nprint(1)\n```"

    def test__code_block__not_escaped(self) -> None:
        """Keep code characters that are special in HTML or Markdown."""
        value = doc(node("codeBlock", text("*a* < b && _c_")))
        assert render_tree_to_markdown(value) == "```\n*a* < b && _c_\n```"

    def test__blockquote__quoted(self) -> None:
        """Prefix quoted blocks with ">"."""
        value = doc(node("blockquote", paragraph(text("one")), paragraph(text("two"))))
        assert render_tree_to_markdown(value) == "> one\n>\n> two"

    def test__panel__alert(self) -> None:
        """Render panels as GitHub alerts of the matching kind."""
        value = doc(node("panel", paragraph(text("Careful")), panelType="warning"))
        assert render_tree_to_markdown(value) == "> [!WARNING]\n> Careful"

    def test__error_panel__caution(self) -> None:
        """Map error panels to the caution alert."""
        value = doc(node("panel", paragraph(text("Broken")), panelType="error"))
        assert render_tree_to_markdown(value) == "> [!CAUTION]\n> Broken"

    def test__rule__thematic_break(self) -> None:
        """Render rules as thematic breaks."""
        value = doc(paragraph(text("a")), node("rule"), paragraph(text("b")))
        assert render_tree_to_markdown(value) == "a\n\n---\n\nb"

    def test__table__pipe_table(self) -> None:
        """Render tables as pipe tables with the first row as header."""
        value = doc(
            node(
                "table",
                node(
                    "tableRow",
                    node("tableHeader", paragraph(text("H1"))),
                    node("tableHeader", paragraph(text("H2"))),
                ),
                node(
                    "tableRow",
                    node("tableCell", paragraph(text("a|b"))),
                    node("tableCell", paragraph(text("c"))),
                ),
            )
        )
        assert render_tree_to_markdown(value) == (
            "| H1 | H2 |\n| --- | --- |\n| a\\|b | c |"
        )


class TestInline:
    """Tests for marks and inline nodes."""

    def test__marks__formatted(self) -> None:
        """Render strong, em, code and strike marks."""
        value = doc(
            paragraph(
                text("bold", "strong"),
                text(" "),
                text("it", "em"),
                text(" "),
                text("x", "code"),
                text(" "),
                text("gone", "strike"),
            )
        )
        assert render_tree_to_markdown(value) == "**bold** *it* `x` ~~gone~~"

    def test__combined_marks__nested(self) -> None:
        """Apply several marks to the same text."""
        value = doc(paragraph(text("both", "strong", "em")))
        assert render_tree_to_markdown(value) == "***both***"

    def test__link_mark__inline_link(self) -> None:
        """Render link marks as inline links."""
        value = doc(paragraph(text("site", href="https://example.com")))
        assert render_tree_to_markdown(value) == "[site](https://example.com)"

    def test__markdown_characters__escaped(self) -> None:
        """Escape characters that would start Markdown syntax."""
        value = doc(paragraph(text("*not* _emphasis_")))
        assert render_tree_to_markdown(value) == "\\*not\\* \\_emphasis\\_"

    def test__angle_brackets__kept(self) -> None:
        """Keep characters that are special only in HTML."""
        value = doc(paragraph(text("a < b & c > d")))
        assert render_tree_to_markdown(value) == "a < b & c > d"

    def test__mention__text_or_placeholder(self) -> None:
        """Render mentions like the plain-text renderer."""
        value = doc(
            paragraph(
                node("mention", id="u1", text="@Alice"),
                text(" "),
                node("mention", id="u2"),
            )
        )
        assert render_tree_to_markdown(value) == "@Alice @user"

    def test__media__image_with_resolved_path(self) -> None:
        """Resolve media attachment IDs through the attachment map."""
        value = doc(node("mediaSingle", node("media", id="att1", type="file")))
        paths = {"att1": "attachments/att1_diagram.png"}
        assert render_tree_to_markdown(value, paths) == (
            "![attachment](attachments/att1_diagram.png)"
        )

    def test__media_unmapped__uses_id(self) -> None:
        """Fall back to the attachment ID when it is not mapped."""
        value = doc(node("mediaSingle", node("media", id="att9", alt="shot.png")))
        assert render_tree_to_markdown(value) == "![shot.png](att9)"

    def test__media_in_table__image_kept(self) -> None:
        """Keep media images inside table cells."""
        value = doc(
            node(
                "table",
                node("tableRow", node("tableCell", node("mediaSingle", node("media", id="a1")))),
            )
        )
        assert render_tree_to_markdown(value, {"a1": "files/a1.png"}) == (
            "| ![attachment](files/a1.png) |\n| --- |"
        )

    def test__media_without_id__placeholder(self) -> None:
        """Emit the attachment placeholder for media without an ID."""
        value = doc(node("mediaSingle", node("media", type="file")))
        assert render_tree_to_markdown(value) == "[attachment]"

    def test__unknown_inline__transparent(self) -> None:
        """Render unknown inline nodes as their children."""
        value = doc(paragraph(text("a "), node("inlineCard", text("card")), text(" b")))
        assert render_tree_to_markdown(value) == "a card b"


class TestOptions:
    """Tests for configurable markers."""

    def test__custom_bullet_marker__used(self, custom_options: RenderOptions) -> None:
        """Use the configured bullet marker."""
        value = doc(node("bulletList", node("listItem", paragraph(text("A")))))
        assert render_tree_to_markdown(value, options=custom_options) == "* A"
