"""Command-line interface for Notion → vault sync.

This package provides the `notion-vault-sync` CLI tool that mirrors a Notion
page tree into a local folder of Markdown files, with progress output and
per-page error handling.
"""

from .sync_command import SyncCommand
from .models import ExitCode
from .errors import CLIError, RootDiscoveryError

__all__ = [
    'SyncCommand',
    'ExitCode',
    'CLIError',
    'RootDiscoveryError',
]
