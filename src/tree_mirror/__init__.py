"""Tree mirror library for Notion → markdown vault sync.

This package discovers a Notion page hierarchy and maps it onto a directory
tree of index.md files with YAML frontmatter, one directory per page.
"""

from .models import NodeRecord, DiscoveryFailure, SyncConfig, SyncSummary, WriteResult
from .errors import (
    VaultError,
    FilesystemError,
    ConfigError,
    FrontmatterError,
)
from .config_loader import ConfigLoader
from .filesafe_converter import FilesafeConverter
from .frontmatter_handler import FrontmatterHandler
from .tree_discoverer import TreeDiscoverer, resolve_title
from .vault_writer import VaultWriter, INDEX_FILENAME

__all__ = [
    'NodeRecord',
    'DiscoveryFailure',
    'SyncConfig',
    'SyncSummary',
    'WriteResult',
    'VaultError',
    'FilesystemError',
    'ConfigError',
    'FrontmatterError',
    'ConfigLoader',
    'FilesafeConverter',
    'FrontmatterHandler',
    'TreeDiscoverer',
    'resolve_title',
    'VaultWriter',
    'INDEX_FILENAME',
]
