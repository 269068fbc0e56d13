"""YAML frontmatter generation and parsing for mirrored files.

Every mirrored index.md starts with a two-field header:

    ---
    notion_id: 59833787-2cf9-4fdf-8782-e53db20768a5
    last_sync: 2026-10-19T08:15:02.113Z
    ---

followed by a blank line and the converted markdown body. The header is
written by hand so the timestamp stays unquoted; it is read back with
yaml.safe_load.
"""

import re
from datetime import datetime, UTC
from typing import Optional, Tuple

import yaml

from .errors import FrontmatterError


class FrontmatterHandler:
    """Builds and reads the metadata header of mirrored files."""

    # Regex pattern to match YAML frontmatter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'^---\s*\n(.*?)\n---\s*\n',
        re.DOTALL
    )

    @staticmethod
    def format_timestamp(moment: datetime) -> str:
        """Format a timestamp as ISO 8601 UTC with millisecond precision.

        Example:
            >>> FrontmatterHandler.format_timestamp(datetime(2026, 10, 19, 8, 15, 2, 113000, tzinfo=UTC))
            '2026-10-19T08:15:02.113Z'
        """
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        moment = moment.astimezone(UTC)
        return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    @classmethod
    def generate(cls, notion_id: str, body: str, synced_at: datetime) -> str:
        """Generate the full file content: header, blank line, body.

        Args:
            notion_id: Page id recorded in the header
            body: Converted markdown body (may be empty)
            synced_at: Time of this sync

        Returns:
            File content ready to be written
        """
        return (
            "---\n"
            f"notion_id: {notion_id}\n"
            f"last_sync: {cls.format_timestamp(synced_at)}\n"
            "---\n"
            "\n"
            f"{body}"
        )

    @classmethod
    def parse(cls, file_path: str, content: str) -> Tuple[Optional[str], Optional[str], str]:
        """Split a mirrored file into (notion_id, last_sync, body).

        Files without a header return (None, None, content).

        Raises:
            FrontmatterError: If the header is not a YAML mapping
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return None, None, content

        body = content[match.end():]
        if body.startswith('\n'):
            body = body[1:]

        try:
            frontmatter = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise FrontmatterError(file_path, f"Invalid YAML syntax: {str(e)}")

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        notion_id = frontmatter.get('notion_id')
        last_sync = frontmatter.get('last_sync')
        # safe_load turns an unquoted ISO timestamp into a datetime
        if isinstance(last_sync, datetime):
            last_sync = cls.format_timestamp(last_sync)

        return (
            str(notion_id) if notion_id is not None else None,
            str(last_sync) if last_sync is not None else None,
            body,
        )
