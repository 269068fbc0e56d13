"""Materializes NodeRecords as index.md files inside the vault.

Location policy: every page, leaf or branch, is a directory named after its
sanitized title holding an index.md with that page's own content; its
children are further directories beside that file. The root page is the
vault directory itself, so its file is <vault>/index.md. A page gaining or
losing children therefore never moves its own file.
"""

import logging
import os
import tempfile
from datetime import datetime
from typing import Dict, Optional

from .errors import FilesystemError
from .filesafe_converter import FilesafeConverter
from .frontmatter_handler import FrontmatterHandler
from .models import NodeRecord, WriteResult

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.md"


class VaultWriter:
    """Writes mirrored files under a vault root.

    Files are replaced in full through a temporary file in the target
    directory and os.replace, so an interrupted run leaves either the old or
    the new file, never a truncated one.

    Within one run the writer remembers which page claimed each location. A
    second page resolving to an already claimed location overwrites it (last
    write wins) and is reported through WriteResult.collided_with and a
    warning, never silently.

    Example:
        >>> writer = VaultWriter("/home/me/vault")
        >>> writer.ensure_root()
        >>> writer.destination(NodeRecord(id="a1", title="Specs", path=("Eng", "Specs")))
        '/home/me/vault/Eng/Specs/index.md'
    """

    def __init__(self, vault_path: str):
        self._vault_path = os.path.abspath(vault_path)
        self._claimed: Dict[str, str] = {}

    @property
    def vault_path(self) -> str:
        return self._vault_path

    def ensure_root(self) -> None:
        """Create the vault directory (and parents) if it doesn't exist.

        Raises:
            FilesystemError: If the directory cannot be created
        """
        try:
            os.makedirs(self._vault_path, exist_ok=True)
        except OSError as e:
            raise FilesystemError(self._vault_path, 'create_directory', str(e))

    def destination(self, record: NodeRecord) -> str:
        """Return the absolute path of the index.md for a record.

        Raises:
            FilesystemError: If the path would resolve outside the vault
        """
        segments = [FilesafeConverter.to_disk_segment(segment) for segment in record.path]
        file_path = os.path.join(self._vault_path, *segments, INDEX_FILENAME)
        self._validate_path_safety(file_path)
        return file_path

    def plan(self, record: NodeRecord) -> WriteResult:
        """Resolve and claim a record's location without writing anything."""
        file_path = self.destination(record)
        previous = self._claim(record, file_path)
        return WriteResult(record=record, file_path=file_path, collided_with=previous)

    def write(self, record: NodeRecord, body: str, synced_at: datetime) -> WriteResult:
        """Write a record's header and body to its index.md.

        Args:
            record: The page being mirrored
            body: Converted markdown body
            synced_at: Timestamp recorded as last_sync

        Returns:
            WriteResult with the file path and any collision

        Raises:
            FilesystemError: If the directory or file cannot be written
        """
        file_path = self.destination(record)
        content = FrontmatterHandler.generate(record.id, body, synced_at)

        directory = os.path.dirname(file_path)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise FilesystemError(directory, 'create_directory', str(e))

        self._write_atomic(file_path, content)
        previous = self._claim(record, file_path)
        return WriteResult(record=record, file_path=file_path, collided_with=previous)

    def _claim(self, record: NodeRecord, file_path: str) -> Optional[str]:
        previous = self._claimed.get(file_path)
        if previous is not None and previous != record.id:
            logger.warning(
                f"Pages {previous} and {record.id} both map to "
                f"{os.path.relpath(file_path, self._vault_path)}; "
                f"keeping {record.id} (last write wins)"
            )
        else:
            previous = None
        self._claimed[file_path] = record.id
        return previous

    def _write_atomic(self, file_path: str, content: str) -> None:
        directory = os.path.dirname(file_path)
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=directory,
                prefix=f".{INDEX_FILENAME}.",
                suffix=".tmp"
            )
        except OSError as e:
            raise FilesystemError(file_path, 'write', str(e))

        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
                f.write(content)
            # mkstemp creates 0600; mirrored notes should be readable like any other file
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, file_path)
        except OSError as e:
            try:
                os.remove(temp_path)
            except OSError as cleanup_error:
                logger.warning(f"Failed to remove temp file {temp_path}: {cleanup_error}")
            raise FilesystemError(file_path, 'write', str(e))

        logger.debug(f"Wrote {file_path}")

    def _validate_path_safety(self, file_path: str) -> None:
        """Ensure file_path resolves inside the vault (symlinks included).

        Raises:
            FilesystemError: If the resolved path escapes the vault or is
                not a valid path on this platform (e.g. an embedded NUL)
        """
        try:
            real_base = os.path.realpath(self._vault_path)
            real_path = os.path.realpath(file_path)
        except ValueError as e:
            raise FilesystemError(file_path, 'validate', str(e))

        if not real_path.startswith(real_base + os.sep) and real_path != real_base:
            raise FilesystemError(
                file_path,
                'validate',
                f'Path traversal detected: {file_path} is outside vault {self._vault_path}'
            )
