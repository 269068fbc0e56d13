"""Test fixtures for notion-vault-sync tests.

This module provides an in-memory Notion workspace (FakeNotionAPI) and
builders for page objects and blocks.
"""

from .notion_pages import (
    FakeNotionAPI,
    build_sample_workspace,
    child_page_block,
    page_object,
    paragraph,
    pid,
    rich_text,
)

__all__ = [
    'FakeNotionAPI',
    'build_sample_workspace',
    'child_page_block',
    'page_object',
    'paragraph',
    'pid',
    'rich_text',
]
