"""Notion client library for vault sync.

This package provides Python abstractions over the Notion public REST API,
enough to walk a page tree and read page content.
"""

from .api_wrapper import NotionAPI, normalize_page_id
from .errors import (
    SyncError,
    NotionError,
    InvalidCredentialsError,
    PageNotFoundError,
    APIUnreachableError,
    APIAccessError,
    ConversionError,
)

__all__ = [
    "NotionAPI",
    "normalize_page_id",
    "SyncError",
    "NotionError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "ConversionError",
]
