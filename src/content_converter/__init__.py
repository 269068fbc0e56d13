"""Content conversion module for Notion blocks → markdown.

This module provides the MarkdownConverter that renders a Notion page's
block tree as a markdown string.
"""

from .markdown_converter import MarkdownConverter, rich_text_to_markdown

__all__ = ['MarkdownConverter', 'rich_text_to_markdown']
