"""Data models for the tree mirror.

This module defines all data models used by the tree mirror library.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


COLLISION_OVERWRITE = "overwrite"
COLLISION_SUFFIX = "suffix"
COLLISION_POLICIES = (COLLISION_OVERWRITE, COLLISION_SUFFIX)


@dataclass(frozen=True)
class NodeRecord:
    """One discovered Notion page, in the order it was discovered.

    Records are rebuilt from scratch on every run; nothing about them is
    persisted between runs except what the file location itself encodes.

    Attributes:
        id: Notion page id; the only stable handle across runs
        title: Display title as resolved at discovery time (may be empty,
               may contain characters that are illegal in file names)
        path: Sanitized directory segments from the vault root down to and
              including this page; empty for the root page

    Example:
        >>> NodeRecord(id="a1", title="Specs", path=("Engineering", "Specs")).depth
        2
    """
    id: str
    title: str
    path: Tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def is_root(self) -> bool:
        return not self.path


@dataclass(frozen=True)
class DiscoveryFailure:
    """A subtree that discovery had to abandon.

    Attributes:
        node_id: Page whose title or children could not be fetched
        stage: "title" (page and subtree skipped) or "children"
               (page kept, its children skipped)
        message: Error text, already free of credentials
    """
    node_id: str
    stage: str
    message: str


@dataclass
class SyncConfig:
    """Configuration for one sync run.

    Built once at startup (see ConfigLoader) and handed to every component
    that needs it; nothing reads the environment after that.

    Attributes:
        notion_token: Notion integration token
        root_page_id: Normalized id of the page mirrored as the vault root
        vault_path: Destination directory
        page_size: Children requested per pagination call (1-100)
        collision_policy: "overwrite" (last write wins, with a warning) or
                          "suffix" (later sibling gets an id suffix)
        dry_run: Discover and report destinations without writing files
        api_base_url: Notion API root
        notion_version: Notion-Version header value
        request_timeout: Per-request timeout in seconds
    """
    notion_token: str
    root_page_id: str
    vault_path: str
    page_size: int = 100
    collision_policy: str = COLLISION_OVERWRITE
    dry_run: bool = False
    api_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    request_timeout: int = 30


@dataclass
class SyncSummary:
    """Counters and failures reported at the end of a run.

    Attributes:
        discovered: Pages found by discovery
        written: index.md files written (or planned, in dry-run mode)
        skipped: Pages whose conversion failed, so nothing was written
        failed: Pages whose directory creation or file write failed
        collisions: Pages whose destination was already claimed this run
        discovery_failures: Subtrees abandoned during discovery
        errors: Human-readable per-page error lines
    """
    discovered: int = 0
    written: int = 0
    skipped: int = 0
    failed: int = 0
    collisions: int = 0
    discovery_failures: List[DiscoveryFailure] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped or self.failed or self.discovery_failures)


@dataclass(frozen=True)
class WriteResult:
    """Where a record was materialized.

    Attributes:
        record: The record that was written
        file_path: Absolute path of the index.md file
        collided_with: Id of the record that claimed the same location
                       earlier in this run, if any
    """
    record: NodeRecord
    file_path: str
    collided_with: Optional[str] = None
