"""Tree discovery for Notion page hierarchies.

This module walks a Notion page tree from a root page and produces a flat,
pre-ordered list of NodeRecords, each carrying the sanitized directory path
it will be mirrored to. The walk uses an explicit stack rather than
recursion, so tree depth is bounded by memory, not the interpreter's
recursion limit.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from ..notion_api.api_wrapper import NotionAPI, MAX_PAGE_SIZE
from .filesafe_converter import FilesafeConverter
from .models import (
    COLLISION_OVERWRITE,
    COLLISION_POLICIES,
    COLLISION_SUFFIX,
    DiscoveryFailure,
    NodeRecord,
)

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

# Block types that are pages of their own and therefore sync targets.
# Everything else (paragraphs, databases, embeds...) belongs to the parent's
# content or is out of scope.
TRAVERSABLE_CHILD_TYPES = frozenset({"child_page"})


def resolve_title(page: Dict[str, Any]) -> str:
    """Resolve the display title of a Notion page object.

    The property named "title" is preferred when it is title-typed. Otherwise
    the first title-typed property in the order Notion returned them wins;
    that order is whatever the API produced, so pages in databases with more
    than one title-typed property (not possible today, but not excluded by
    the API contract) resolve in an unspecified order.

    Args:
        page: Page object as returned by NotionAPI.retrieve_page

    Returns:
        The concatenated plain text of the title property, or "Untitled" if
        the page has no title-typed property or its rich-text list is empty
    """
    properties = page.get("properties") or {}

    candidates = []
    named_title = properties.get("title")
    if isinstance(named_title, dict) and named_title.get("type") == "title":
        candidates.append(named_title)
    candidates.extend(
        prop for name, prop in properties.items()
        if name != "title" and isinstance(prop, dict) and prop.get("type") == "title"
    )

    if not candidates:
        return UNTITLED

    runs = candidates[0].get("title") or []
    if not runs:
        return UNTITLED
    return "".join(run.get("plain_text", "") for run in runs)


class TreeDiscoverer:
    """Discovers a Notion page tree in pre-order.

    Each emitted NodeRecord has a path that extends its parent's path by
    exactly one sanitized segment; the root's path is empty regardless of
    its title. A page is emitted before any of its descendants, and siblings
    keep the order Notion lists them in.

    Failures are contained per page: if a page's title cannot be fetched, it
    and its subtree are skipped; if its children cannot be listed, the page
    is kept and its subtree is skipped. Either way the walk continues with
    the remaining pages, and the failure is recorded in ``failures``. Only a
    failure to fetch the root page itself propagates.

    Example:
        >>> discoverer = TreeDiscoverer(NotionAPI(token))
        >>> records = discoverer.discover("59833787-2cf9-4fdf-8782-e53db20768a5")
        >>> [r.path for r in records][:3]
        [(), ('Engineering',), ('Engineering', 'Specs')]
    """

    def __init__(
        self,
        api: NotionAPI,
        page_size: int = MAX_PAGE_SIZE,
        collision_policy: str = COLLISION_OVERWRITE
    ):
        """Initialize the discoverer.

        Args:
            api: Notion API client
            page_size: Children requested per pagination call
            collision_policy: "overwrite" keeps colliding sanitized segments
                              as they are; "suffix" appends the page id
                              prefix to a segment a sibling already claimed
        """
        if collision_policy not in COLLISION_POLICIES:
            raise ValueError(
                f"Unknown collision policy '{collision_policy}', "
                f"expected one of {', '.join(COLLISION_POLICIES)}"
            )
        self._api = api
        self._page_size = page_size
        self._collision_policy = collision_policy
        self.failures: List[DiscoveryFailure] = []

    def discover(self, root_id: str) -> List[NodeRecord]:
        """Walk the tree under root_id and return its records in pre-order.

        Args:
            root_id: Id of the page mirrored as the vault root

        Returns:
            List of NodeRecords, root first

        Raises:
            NotionError: If the root page itself cannot be retrieved
        """
        self.failures = []
        records: List[NodeRecord] = []
        seen: Set[str] = set()

        # Frontier of (page id, title, full path). A page's title and path
        # are settled when its parent is expanded; the root's path is empty
        # whatever its title. Children are pushed in reverse so they pop in
        # the order Notion listed them.
        root_title = self._fetch_title(root_id)
        stack: List[Tuple[str, str, Tuple[str, ...]]] = [(root_id, root_title, ())]

        while stack:
            node_id, title, path = stack.pop()

            if node_id in seen:
                logger.warning(f"Page {node_id} reached twice; ignoring repeat")
                continue
            seen.add(node_id)

            records.append(NodeRecord(id=node_id, title=title, path=path))
            logger.debug(f"Discovered {node_id} '{title}' at /{'/'.join(path)}")

            children = self._list_child_pages(node_id)
            if children is None:
                continue

            titled_children = self._resolve_child_titles(children)
            segments = [FilesafeConverter.sanitize(child_title) for _, child_title in titled_children]
            if self._collision_policy == COLLISION_SUFFIX:
                segments = self._disambiguate(titled_children, segments)

            for (child_id, child_title), segment in reversed(list(zip(titled_children, segments))):
                stack.append((child_id, child_title, path + (segment,)))

        logger.info(
            f"Discovered {len(records)} page(s) under {root_id}"
            + (f" ({len(self.failures)} subtree(s) skipped)" if self.failures else "")
        )
        return records

    def _fetch_title(self, page_id: str) -> str:
        """Retrieve a page and resolve its title; errors propagate."""
        page = self._api.retrieve_page(page_id)
        return resolve_title(page)

    def _list_child_pages(self, page_id: str) -> Optional[List[Dict[str, Any]]]:
        """List every traversable child block of a page, across all pages.

        All pagination pages are fetched before any child is returned, so a
        failure part way through yields no children at all rather than a
        silently truncated list.

        Returns:
            The child_page blocks, or None if listing failed
        """
        try:
            blocks = list(self._api.iter_block_children(page_id, page_size=self._page_size))
        except Exception as e:
            logger.error(f"Failed to list children of page {page_id}: {e}")
            self.failures.append(DiscoveryFailure(node_id=page_id, stage="children", message=str(e)))
            return None

        return [
            block for block in blocks
            if block.get("type") in TRAVERSABLE_CHILD_TYPES and block.get("id")
        ]

    def _resolve_child_titles(self, children: List[Dict[str, Any]]) -> List[Tuple[str, str]]:
        """Fetch each child's title, dropping children whose page fails."""
        titled = []
        for block in children:
            child_id = block["id"]
            try:
                title = self._fetch_title(child_id)
            except Exception as e:
                logger.error(f"Failed to get title for page {child_id}: {e}")
                self.failures.append(DiscoveryFailure(node_id=child_id, stage="title", message=str(e)))
                continue
            titled.append((child_id, title))
        return titled

    def _disambiguate(
        self,
        children: List[Tuple[str, str]],
        segments: List[str]
    ) -> List[str]:
        """Rename later siblings whose directory name is already taken.

        The first sibling keeps its segment; each later one that maps to
        the same directory gets " (<first 8 id chars>)" appended, or the
        whole compact id when that name is taken too. A numeric counter is
        the last resort. Titles are left untouched.
        """
        claimed: Set[str] = set()
        result = []
        for (child_id, title), segment in zip(children, segments):
            on_disk = FilesafeConverter.to_disk_segment(segment)
            if on_disk in claimed:
                compact = child_id.replace("-", "")
                candidates = [f"{on_disk} ({compact[:8]})", f"{on_disk} ({compact})"]
                renamed = next((c for c in candidates if c not in claimed), None)
                counter = 2
                while renamed is None:
                    if f"{candidates[-1]} {counter}" not in claimed:
                        renamed = f"{candidates[-1]} {counter}"
                    counter += 1
                logger.warning(
                    f"Page {child_id} '{title}' collides with a sibling at "
                    f"'{on_disk}'; using '{renamed}'"
                )
                segment = renamed
                on_disk = renamed
            claimed.add(on_disk)
            result.append(segment)
        return result
