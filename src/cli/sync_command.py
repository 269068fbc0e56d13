"""Sync command orchestration for CLI.

This module provides the SyncCommand class that drives one sync run:

    1. Ensure the vault directory exists
    2. Discover the page tree under the root page (TreeDiscoverer)
    3. For each page, in pre-order: convert its blocks to markdown
       (MarkdownConverter) and write <dir>/index.md (VaultWriter)
    4. Print a summary and return an exit code

Every page is fetched and converted again on every run and every mirrored
file is overwritten in full. Per-page failures are logged and counted but
never stop the run; only failures before the first page is processed
(vault not creatable, root page unreadable) are fatal.
"""

import logging
import os
from datetime import datetime, UTC
from typing import Callable, List, Optional

from src.cli.errors import RootDiscoveryError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.content_converter.markdown_converter import MarkdownConverter
from src.notion_api.api_wrapper import NotionAPI
from src.notion_api.errors import (
    APIUnreachableError,
    ConversionError,
    InvalidCredentialsError,
    NotionError,
    SyncError,
)
from src.tree_mirror.errors import VaultError
from src.tree_mirror.models import NodeRecord, SyncConfig, SyncSummary
from src.tree_mirror.tree_discoverer import TreeDiscoverer
from src.tree_mirror.vault_writer import VaultWriter

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SyncCommand:
    """Orchestrates one Notion → vault sync run.

    All collaborators are built from the SyncConfig unless passed in, which
    lets tests substitute fakes for the Notion API.

    Example:
        >>> config = ConfigLoader.load()
        >>> exit_code = SyncCommand(config, output_handler=OutputHandler()).run()
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config: SyncConfig,
        output_handler: Optional[OutputHandler] = None,
        api: Optional[NotionAPI] = None,
        discoverer: Optional[TreeDiscoverer] = None,
        converter: Optional[MarkdownConverter] = None,
        writer: Optional[VaultWriter] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize sync command with dependencies.

        Args:
            config: Validated configuration for this run
            output_handler: OutputHandler for terminal output (optional)
            api: Notion API client shared by discoverer and converter (optional)
            discoverer: TreeDiscoverer for page discovery (optional)
            converter: MarkdownConverter for page content (optional)
            writer: VaultWriter for materializing files (optional)
            clock: Returns the timestamp recorded as last_sync
        """
        self.config = config
        self.output_handler = output_handler or OutputHandler()
        self.clock = clock

        if api is None and (discoverer is None or converter is None):
            api = NotionAPI(
                token=config.notion_token,
                base_url=config.api_base_url,
                notion_version=config.notion_version,
                timeout=config.request_timeout,
            )

        self.discoverer = discoverer or TreeDiscoverer(
            api,
            page_size=config.page_size,
            collision_policy=config.collision_policy,
        )
        self.converter = converter or MarkdownConverter(api, page_size=config.page_size)
        self.writer = writer or VaultWriter(config.vault_path)

    def run(self) -> ExitCode:
        """Execute the sync and translate the outcome to an exit code.

        Returns:
            ExitCode.SUCCESS when the run completed, even if some pages were
            skipped; a non-zero code when the run could not proceed
        """
        output = self.output_handler
        output.info("Starting Notion sync...")
        output.info(f"  Root page ID: {self.config.root_page_id}")
        output.info(f"  Vault path: {self.writer.vault_path}")

        try:
            summary = self._sync()
        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            output.error(f"Authentication failed: {e}")
            return ExitCode.AUTH_ERROR
        except APIUnreachableError as e:
            logger.error(f"Network error: {e}")
            output.error(f"Network error: {e}")
            return ExitCode.NETWORK_ERROR
        except SyncError as e:
            logger.error(f"Sync failed: {e}")
            output.error(f"Sync failed: {e}")
            return ExitCode.GENERAL_ERROR
        except Exception as e:
            logger.exception("Unexpected error during sync")
            output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

        if self.config.dry_run:
            return ExitCode.SUCCESS

        output.print_summary(summary)
        return ExitCode.SUCCESS

    def _sync(self) -> SyncSummary:
        """Run discovery and write every page; raises only on fatal errors."""
        output = self.output_handler
        summary = SyncSummary()

        if not self.config.dry_run:
            self.writer.ensure_root()

        try:
            with output.spinner("Fetching page structure from Notion..."):
                records = self.discoverer.discover(self.config.root_page_id)
        except (InvalidCredentialsError, APIUnreachableError):
            raise
        except NotionError as e:
            raise RootDiscoveryError(self.config.root_page_id, str(e)) from e

        summary.discovered = len(records)
        summary.discovery_failures = list(self.discoverer.failures)
        for failure in summary.discovery_failures:
            summary.errors.append(f"{failure.node_id}: could not fetch {failure.stage} ({failure.message})")
            output.warning(
                f"Skipped subtree of {failure.node_id}: could not fetch {failure.stage}"
            )

        output.info(f"Found {len(records)} page(s) to sync")

        if self.config.dry_run:
            self._preview(records, summary)
            return summary

        for record in records:
            self._sync_record(record, summary)

        logger.info(
            f"Sync finished: {summary.written}/{summary.discovered} written, "
            f"{summary.skipped} skipped, {summary.failed} failed"
        )
        return summary

    def _sync_record(self, record: NodeRecord, summary: SyncSummary) -> None:
        """Convert and write one page, containing any failure to this page."""
        output = self.output_handler
        label = "(root)" if record.is_root else "/".join(record.path)
        output.print(f"Processing: {label}")

        try:
            body = self.converter.page_to_markdown(record.id)
        except ConversionError as e:
            logger.error(f"Error converting page {record.id} to markdown: {e}")
            output.error(f"Skipped {label}: {e}")
            summary.skipped += 1
            summary.errors.append(f"{record.id}: {e}")
            return
        except Exception as e:
            logger.exception(f"Unexpected error converting page {record.id}")
            output.error(f"Skipped {label}: {e}")
            summary.skipped += 1
            summary.errors.append(f"{record.id}: {e}")
            return

        try:
            result = self.writer.write(record, body, self.clock())
        except (VaultError, OSError) as e:
            logger.error(f"Error saving page {record.id}: {e}")
            output.error(f"Failed to save {label}: {e}")
            summary.failed += 1
            summary.errors.append(f"{record.id}: {e}")
            return

        summary.written += 1
        relative = os.path.relpath(result.file_path, self.writer.vault_path)
        if result.collided_with:
            summary.collisions += 1
            output.warning(f"Saved: {relative} (overwrote page {result.collided_with})")
        else:
            output.success(f"Saved: {relative}")

    def _preview(self, records: List[NodeRecord], summary: SyncSummary) -> None:
        """Resolve every destination without fetching content or writing."""
        destinations = []
        for record in records:
            try:
                result = self.writer.plan(record)
            except VaultError as e:
                logger.error(f"Cannot place page {record.id}: {e}")
                summary.failed += 1
                summary.errors.append(f"{record.id}: {e}")
                continue
            summary.written += 1
            if result.collided_with:
                summary.collisions += 1
            destinations.append(os.path.relpath(result.file_path, self.writer.vault_path))

        self.output_handler.print_dryrun_summary(destinations, collisions=summary.collisions)
