"""Typed exception hierarchy for Notion-related errors.

This module defines all custom exceptions used by the Notion client library.
All exceptions inherit from NotionError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all notion-vault-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class NotionError(SyncError):
    """Base exception for all Notion-related errors."""
    pass


class InvalidCredentialsError(NotionError):
    """Raised when the integration token is invalid or authentication fails."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        message = f"Notion integration token is invalid (endpoint: {endpoint})"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.endpoint = endpoint
        self.reason = reason


class PageNotFoundError(NotionError):
    """Raised when a requested page or block does not exist or is not shared."""

    def __init__(self, page_id: str):
        super().__init__(
            f"Page {page_id} not found (is it shared with the integration?)"
        )
        self.page_id = page_id


class APIUnreachableError(NotionError):
    """Raised when the Notion API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(NotionError):
    """Raised when API access fails after retries or due to access restrictions."""

    def __init__(self, message: str = "Notion API failure (after 3 retries)"):
        super().__init__(message)


class ConversionError(NotionError):
    """Raised when converting a page's blocks to markdown fails."""

    def __init__(self, message: str, page_id: Optional[str] = None):
        super().__init__(message)
        self.page_id = page_id
