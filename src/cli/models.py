"""Data models for CLI operations.

This module defines the exit codes returned by the notion-vault-sync
command. Sync result counters live in src/tree_mirror/models.py.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    These exit codes provide meaningful feedback about the operation result:
    - SUCCESS (0): Sync finished; individual pages may still have been
      skipped, which the summary reports
    - GENERAL_ERROR (1): Configuration problems or an unexpected failure
    - AUTH_ERROR (3): The Notion token was rejected
    - NETWORK_ERROR (4): The Notion API could not be reached

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
