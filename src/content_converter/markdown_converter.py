"""Markdown converter for Notion page content.

Notion serves page content as a tree of typed blocks whose text lives in
rich-text runs. This module fetches that tree through NotionAPI and renders
it as markdown: pipe tables, fenced code, nested lists, and inline
bold/italic/strikethrough/code/link annotations.

Child pages and child databases are not rendered; child pages are synced as
their own files.
"""

import logging
from typing import Any, Dict, List, Optional

from ..notion_api.api_wrapper import NotionAPI, MAX_PAGE_SIZE
from ..notion_api.errors import ConversionError, NotionError

logger = logging.getLogger(__name__)

LIST_ITEM_TYPES = frozenset({"bulleted_list_item", "numbered_list_item", "to_do"})

# Blocks that are sync targets (or out of scope) in their own right
SKIPPED_TYPES = frozenset({"child_page", "child_database", "unsupported"})

# Blocks whose children are rendered inline as if they were siblings
TRANSPARENT_TYPES = frozenset({"column_list", "column", "synced_block"})

MEDIA_TYPES = frozenset({"image", "file", "pdf", "video", "audio"})
LINK_TYPES = frozenset({"bookmark", "embed", "link_preview"})


def rich_text_to_markdown(runs: Optional[List[Dict[str, Any]]]) -> str:
    """Render a Notion rich-text array as inline markdown.

    Examples:
        >>> rich_text_to_markdown([{"plain_text": "hi", "annotations": {"bold": True}}])
        '**hi**'
        >>> rich_text_to_markdown([{"plain_text": "docs", "href": "https://x.io"}])
        '[docs](https://x.io)'
    """
    parts = []
    for run in runs or []:
        text = run.get("plain_text", "")
        if not text:
            continue

        if run.get("type") == "equation":
            parts.append(f"${text}$")
            continue

        annotations = run.get("annotations") or {}
        if annotations.get("code"):
            text = f"`{text}`"
        else:
            # Markers must hug the text or markdown won't parse them
            stripped = text.strip()
            if stripped:
                leading = text[:len(text) - len(text.lstrip())]
                trailing = text[len(text.rstrip()):]
                if annotations.get("bold"):
                    stripped = f"**{stripped}**"
                if annotations.get("italic"):
                    stripped = f"*{stripped}*"
                if annotations.get("strikethrough"):
                    stripped = f"~~{stripped}~~"
                text = f"{leading}{stripped}{trailing}"

        href = run.get("href")
        if href:
            text = f"[{text}]({href})"

        parts.append(text)
    return "".join(parts)


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def _file_url(payload: Dict[str, Any]) -> str:
    """URL of a Notion file object (hosted or external)."""
    kind = payload.get("type")
    if kind in ("file", "external"):
        return (payload.get(kind) or {}).get("url", "")
    return payload.get("url", "")


def _table_cell(cell: List[Dict[str, Any]]) -> str:
    text = rich_text_to_markdown(cell)
    return text.replace("|", "\\|").replace("\n", "<br>").strip()


class MarkdownConverter:
    """Converts a Notion page's block tree to a markdown string.

    Example:
        >>> converter = MarkdownConverter(NotionAPI(token))
        >>> body = converter.page_to_markdown("59833787-2cf9-4fdf-8782-e53db20768a5")
    """

    def __init__(self, api: NotionAPI, page_size: int = MAX_PAGE_SIZE):
        self._api = api
        self._page_size = page_size

    def page_to_markdown(self, page_id: str) -> str:
        """Fetch and render the full content of a page.

        Args:
            page_id: The Notion page id

        Returns:
            Markdown body ending in a single newline, or "" for an empty page

        Raises:
            ConversionError: If blocks cannot be fetched or rendered
        """
        try:
            blocks = self._fetch_blocks(page_id)
            markdown = self.blocks_to_markdown(blocks)
        except NotionError as e:
            raise ConversionError(
                f"Failed to fetch content of page {page_id}: {e}", page_id=page_id
            ) from e
        except (KeyError, TypeError, AttributeError) as e:
            raise ConversionError(
                f"Unexpected block structure in page {page_id}: {e}", page_id=page_id
            ) from e

        markdown = markdown.strip("\n")
        return f"{markdown}\n" if markdown else ""

    def _fetch_blocks(self, block_id: str) -> List[Dict[str, Any]]:
        """Fetch a block's children, attaching nested children as "_children"."""
        blocks = list(self._api.iter_block_children(block_id, page_size=self._page_size))
        for block in blocks:
            if block.get("has_children") and block.get("type") not in SKIPPED_TYPES:
                block["_children"] = self._fetch_blocks(block["id"])
        return blocks

    def blocks_to_markdown(self, blocks: List[Dict[str, Any]]) -> str:
        """Render a list of sibling blocks.

        Consecutive list items are separated by a single newline, everything
        else by a blank line. Numbered items count up within a run of
        consecutive numbered items.
        """
        output = ""
        previous_is_list = False
        number = 0

        for block in self._flatten(blocks):
            block_type = block.get("type")
            number = number + 1 if block_type == "numbered_list_item" else 0

            rendered = self._render_block(block, number)
            if rendered is None:
                continue

            is_list = block_type in LIST_ITEM_TYPES
            if output:
                output += "\n" if (is_list and previous_is_list) else "\n\n"
            output += rendered
            previous_is_list = is_list

        return output

    def _flatten(self, blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        flat = []
        for block in blocks:
            if block.get("type") in TRANSPARENT_TYPES:
                flat.extend(self._flatten(block.get("_children", [])))
            else:
                flat.append(block)
        return flat

    def _children_markdown(self, block: Dict[str, Any]) -> str:
        return self.blocks_to_markdown(block.get("_children", []))

    def _render_block(self, block: Dict[str, Any], number: int) -> Optional[str]:
        """Render one block (and its children); None means "emit nothing"."""
        block_type = block.get("type")
        if block_type in SKIPPED_TYPES:
            return None

        payload = block.get(block_type) or {}
        text = rich_text_to_markdown(payload.get("rich_text"))
        children = self._children_markdown(block)

        if block_type == "paragraph":
            return "\n\n".join(part for part in (text, children) if part) or None

        if block_type in ("heading_1", "heading_2", "heading_3"):
            heading = "#" * int(block_type[-1]) + " " + text
            return f"{heading}\n\n{children}" if children else heading

        if block_type in LIST_ITEM_TYPES:
            if block_type == "bulleted_list_item":
                marker = "- "
            elif block_type == "numbered_list_item":
                marker = f"{number}. "
            else:
                marker = "- [x] " if payload.get("checked") else "- [ ] "
            item = marker + text
            if children:
                # Nested content lines up with the item text
                width = 3 if block_type == "numbered_list_item" else 2
                item += "\n" + _indent(children, " " * width)
            return item

        if block_type == "quote":
            quoted = "\n\n".join(part for part in (text, children) if part)
            return _indent(quoted, "> ").replace("\n\n", "\n>\n")

        if block_type == "callout":
            icon = (payload.get("icon") or {}).get("emoji", "")
            lead = f"{icon} {text}".strip()
            quoted = "\n\n".join(part for part in (lead, children) if part)
            return _indent(quoted, "> ").replace("\n\n", "\n>\n")

        if block_type == "toggle":
            summary = f"<details>\n<summary>{text}</summary>"
            if children:
                return f"{summary}\n\n{children}\n\n</details>"
            return f"{summary}\n</details>"

        if block_type == "code":
            language = payload.get("language", "")
            if language == "plain text":
                language = ""
            code = "".join(run.get("plain_text", "") for run in payload.get("rich_text", []))
            return f"```{language}\n{code}\n```"

        if block_type == "divider":
            return "---"

        if block_type == "equation":
            return f"$$\n{payload.get('expression', '')}\n$$"

        if block_type in MEDIA_TYPES:
            url = _file_url(payload)
            caption = rich_text_to_markdown(payload.get("caption")) or payload.get("name", "")
            if block_type == "image":
                return f"![{caption}]({url})"
            return f"[{caption or block_type}]({url})"

        if block_type in LINK_TYPES:
            url = payload.get("url", "")
            caption = rich_text_to_markdown(payload.get("caption"))
            return f"[{caption or url}]({url})"

        if block_type == "table":
            return self._render_table(block)

        logger.debug(f"Skipping unsupported block type '{block_type}' ({block.get('id')})")
        return None

    def _render_table(self, block: Dict[str, Any]) -> Optional[str]:
        """Render a table block as a pipe table; the first row is the header."""
        rows = [
            [_table_cell(cell) for cell in (row.get("table_row") or {}).get("cells", [])]
            for row in block.get("_children", [])
            if row.get("type") == "table_row"
        ]
        if not rows:
            return None

        width = max(len(row) for row in rows)
        rows = [row + [""] * (width - len(row)) for row in rows]

        lines = ["| " + " | ".join(rows[0]) + " |", "|" + " --- |" * width]
        lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
        return "\n".join(lines)
