"""Unit tests for content_converter.markdown_converter module."""

import pytest
from unittest.mock import Mock

from src.content_converter.markdown_converter import MarkdownConverter, rich_text_to_markdown
from src.notion_api.errors import ConversionError
from tests.fixtures.notion_pages import FakeNotionAPI, child_page_block, paragraph, pid, rich_text


def block(block_type, text="", children=None, **payload):
    """Block with its children already attached, as _fetch_blocks leaves it."""
    data = {"rich_text": rich_text(text) if text else [], **payload}
    result = {"id": f"{block_type}-{text}", "type": block_type, "has_children": bool(children), block_type: data}
    if children:
        result["_children"] = children
    return result


@pytest.fixture
def converter():
    return MarkdownConverter(Mock())


class TestRichTextToMarkdown:
    """Test cases for rich_text_to_markdown function."""

    def test_plain(self):
        assert rich_text_to_markdown(rich_text("hello")) == "hello"

    def test_empty_and_none(self):
        assert rich_text_to_markdown([]) == ""
        assert rich_text_to_markdown(None) == ""

    def test_annotations(self):
        runs = (
            rich_text("bold", bold=True)
            + rich_text(" and ")
            + rich_text("italic", italic=True)
            + rich_text(" ")
            + rich_text("gone", strikethrough=True)
        )
        assert rich_text_to_markdown(runs) == "**bold** and *italic* ~~gone~~"

    def test_combined_bold_italic(self):
        assert rich_text_to_markdown(rich_text("both", bold=True, italic=True)) == "***both***"

    def test_markers_hug_text(self):
        """Surrounding whitespace stays outside the emphasis markers."""
        assert rich_text_to_markdown(rich_text(" spaced ", bold=True)) == " **spaced** "

    def test_whitespace_only_run_not_emphasized(self):
        assert rich_text_to_markdown(rich_text("  ", bold=True)) == "  "

    def test_inline_code(self):
        """Code runs are backticked and not further emphasized."""
        assert rich_text_to_markdown(rich_text("x = 1", code=True, bold=True)) == "`x = 1`"

    def test_link(self):
        assert rich_text_to_markdown(rich_text("docs", href="https://example.com")) == "[docs](https://example.com)"

    def test_bold_link(self):
        runs = rich_text("docs", bold=True, href="https://example.com")
        assert rich_text_to_markdown(runs) == "[**docs**](https://example.com)"

    def test_inline_equation(self):
        runs = [{"type": "equation", "plain_text": "E=mc^2", "annotations": {}}]
        assert rich_text_to_markdown(runs) == "$E=mc^2$"


class TestBlocksToMarkdown:
    """Test cases for MarkdownConverter.blocks_to_markdown method."""

    def test_paragraphs_separated_by_blank_line(self, converter):
        blocks = [block("paragraph", "one"), block("paragraph", "two")]
        assert converter.blocks_to_markdown(blocks) == "one\n\ntwo"

    def test_empty_paragraph_dropped(self, converter):
        blocks = [block("paragraph", "one"), block("paragraph"), block("paragraph", "two")]
        assert converter.blocks_to_markdown(blocks) == "one\n\ntwo"

    def test_headings(self, converter):
        blocks = [block("heading_1", "H1"), block("heading_2", "H2"), block("heading_3", "H3")]
        assert converter.blocks_to_markdown(blocks) == "# H1\n\n## H2\n\n### H3"

    def test_bulleted_list_tight(self, converter):
        """Consecutive list items are not separated by blank lines."""
        blocks = [
            block("paragraph", "Intro"),
            block("bulleted_list_item", "a"),
            block("bulleted_list_item", "b"),
            block("paragraph", "Outro"),
        ]
        assert converter.blocks_to_markdown(blocks) == "Intro\n\n- a\n- b\n\nOutro"

    def test_numbered_list_counts(self, converter):
        blocks = [
            block("numbered_list_item", "first"),
            block("numbered_list_item", "second"),
            block("paragraph", "break"),
            block("numbered_list_item", "again"),
        ]
        assert converter.blocks_to_markdown(blocks) == "1. first\n2. second\n\nbreak\n\n1. again"

    def test_nested_list(self, converter):
        blocks = [
            block("bulleted_list_item", "parent", children=[
                block("bulleted_list_item", "child"),
                block("bulleted_list_item", "sibling"),
            ]),
            block("numbered_list_item", "step", children=[block("paragraph", "detail")]),
        ]
        assert converter.blocks_to_markdown(blocks) == (
            "- parent\n  - child\n  - sibling\n1. step\n   detail"
        )

    def test_todo(self, converter):
        blocks = [block("to_do", "done", checked=True), block("to_do", "open", checked=False)]
        assert converter.blocks_to_markdown(blocks) == "- [x] done\n- [ ] open"

    def test_quote(self, converter):
        blocks = [block("quote", "said", children=[block("paragraph", "more")])]
        assert converter.blocks_to_markdown(blocks) == "> said\n>\n> more"

    def test_callout_with_icon(self, converter):
        blocks = [block("callout", "Heads up", icon={"type": "emoji", "emoji": "💡"})]
        assert converter.blocks_to_markdown(blocks) == "> 💡 Heads up"

    def test_toggle(self, converter):
        blocks = [block("toggle", "More", children=[block("paragraph", "hidden")])]
        assert converter.blocks_to_markdown(blocks) == (
            "<details>\n<summary>More</summary>\n\nhidden\n\n</details>"
        )

    def test_code_block(self, converter):
        blocks = [block("code", "print('hi')\nprint('bye')", language="python")]
        assert converter.blocks_to_markdown(blocks) == "```python\nprint('hi')\nprint('bye')\n```"

    def test_code_block_keeps_markdown_characters(self, converter):
        """Code text is not annotated or escaped."""
        blocks = [block("code", "**not bold**", language="plain text")]
        assert converter.blocks_to_markdown(blocks) == "```\n**not bold**\n```"

    def test_divider_and_equation(self, converter):
        blocks = [{"type": "divider", "divider": {}}, {"type": "equation", "equation": {"expression": "a^2"}}]
        assert converter.blocks_to_markdown(blocks) == "---\n\n$$\na^2\n$$"

    def test_image_external_and_hosted(self, converter):
        blocks = [
            {"type": "image", "image": {
                "type": "external", "external": {"url": "https://img.test/a.png"},
                "caption": rich_text("Diagram"),
            }},
            {"type": "image", "image": {
                "type": "file", "file": {"url": "https://s3.test/b.png", "expiry_time": "x"},
                "caption": [],
            }},
        ]
        assert converter.blocks_to_markdown(blocks) == (
            "![Diagram](https://img.test/a.png)\n\n![](https://s3.test/b.png)"
        )

    def test_file_and_bookmark(self, converter):
        blocks = [
            {"type": "pdf", "pdf": {"type": "external", "external": {"url": "https://x.test/a.pdf"}}},
            {"type": "bookmark", "bookmark": {"url": "https://x.test", "caption": []}},
        ]
        assert converter.blocks_to_markdown(blocks) == "[pdf](https://x.test/a.pdf)\n\n[https://x.test](https://x.test)"

    def test_table(self, converter):
        def row(*cells):
            return {"type": "table_row", "table_row": {"cells": [rich_text(c) for c in cells]}}

        table = {
            "type": "table",
            "table": {"table_width": 2},
            "has_children": True,
            "_children": [row("Name", "Value"), row("a|b", "1"), row("c", "line\nbreak")],
        }
        assert converter.blocks_to_markdown([table]) == (
            "| Name | Value |\n"
            "| --- | --- |\n"
            "| a\\|b | 1 |\n"
            "| c | line<br>break |"
        )

    def test_columns_are_flattened(self, converter):
        columns = {
            "type": "column_list",
            "column_list": {},
            "_children": [
                {"type": "column", "column": {}, "_children": [block("paragraph", "left")]},
                {"type": "column", "column": {}, "_children": [block("paragraph", "right")]},
            ],
        }
        assert converter.blocks_to_markdown([columns]) == "left\n\nright"

    def test_child_pages_and_unknown_blocks_skipped(self, converter):
        blocks = [
            block("paragraph", "keep"),
            child_page_block(pid(2), "Sub"),
            {"type": "child_database", "child_database": {"title": "DB"}},
            {"type": "ai_block", "ai_block": {}},
            block("paragraph", "also"),
        ]
        assert converter.blocks_to_markdown(blocks) == "keep\n\nalso"


class TestPageToMarkdown:
    """Test cases for MarkdownConverter.page_to_markdown method."""

    def test_fetches_and_renders(self, sample_api):
        body = MarkdownConverter(sample_api).page_to_markdown(pid(1))
        assert body == "Welcome\n"

    def test_child_page_content_not_inlined(self, sample_api):
        """A child page's own blocks stay in the child's file."""
        body = MarkdownConverter(sample_api).page_to_markdown(pid(2))
        assert "All specs" not in body
        assert body == "Eng home\n"

    def test_nested_blocks_fetched(self):
        api = FakeNotionAPI()
        api.add_page(pid(1), "Root")
        parent = block("bulleted_list_item", "parent")
        parent["id"] = pid(50)
        parent["has_children"] = True
        api.add_block(pid(1), parent)
        api.add_block(pid(50), block("bulleted_list_item", "child"))

        assert MarkdownConverter(api).page_to_markdown(pid(1)) == "- parent\n  - child\n"

    def test_paginated_content(self):
        api = FakeNotionAPI()
        api.add_page(pid(1), "Root", content=[paragraph(f"p{n}", f"b{n}") for n in range(5)])

        body = MarkdownConverter(api, page_size=2).page_to_markdown(pid(1))

        assert body == "p0\n\np1\n\np2\n\np3\n\np4\n"

    def test_empty_page(self):
        api = FakeNotionAPI()
        api.add_page(pid(1), "Empty")

        assert MarkdownConverter(api).page_to_markdown(pid(1)) == ""

    def test_fetch_failure_raises_conversion_error(self):
        api = FakeNotionAPI()
        api.add_page(pid(1), "Root")
        api.fail_children.add(pid(1))

        with pytest.raises(ConversionError) as exc_info:
            MarkdownConverter(api).page_to_markdown(pid(1))

        assert exc_info.value.page_id == pid(1)

    def test_malformed_block_raises_conversion_error(self):
        api = FakeNotionAPI()
        api.add_page(pid(1), "Root")
        api.add_block(pid(1), {"type": "code", "code": {"rich_text": [None]}})

        with pytest.raises(ConversionError):
            MarkdownConverter(api).page_to_markdown(pid(1))
