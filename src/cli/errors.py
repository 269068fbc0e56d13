"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI.
All exceptions inherit from CLIError base class for easy catching.
"""

from src.notion_api.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class RootDiscoveryError(CLIError):
    """Raised when the root page cannot be read, so nothing can be synced."""

    def __init__(self, root_page_id: str, reason: str):
        super().__init__(
            f"Cannot read root page {root_page_id}: {reason}"
        )
        self.root_page_id = root_page_id
        self.reason = reason
