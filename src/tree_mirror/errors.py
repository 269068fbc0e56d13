"""Typed exception hierarchy for tree mirror errors.

This module defines all custom exceptions used by the tree mirror library.
All exceptions inherit from VaultError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional

from src.notion_api.errors import SyncError


class VaultError(SyncError):
    """Base exception for all tree mirror errors."""
    pass


class FilesystemError(VaultError):
    """Raised when filesystem operations fail (mkdir, write, path checks)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(VaultError):
    """Raised when configuration is missing or invalid."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class FrontmatterError(VaultError):
    """Raised when a mirrored file's metadata header cannot be parsed."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message
