"""API wrapper for the Notion public REST API.

This module wraps a requests Session configured for the Notion API and
provides error translation from HTTP exceptions to our typed exception
hierarchy. It integrates with the retry logic for handling rate limits.
"""

import logging
import re
from typing import Any, Dict, Iterator, Optional

import requests
from requests.exceptions import (
    ConnectionError,
    ConnectTimeout,
    HTTPError,
    ReadTimeout,
    Timeout,
)

from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    PageNotFoundError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_TIMEOUT = 30

# Notion caps page_size at 100 for every paginated endpoint
MAX_PAGE_SIZE = 100

_PAGE_ID_PATTERN = re.compile(
    r'([0-9a-f]{8})-?([0-9a-f]{4})-?([0-9a-f]{4})-?([0-9a-f]{4})-?([0-9a-f]{12})$',
    re.IGNORECASE,
)


def normalize_page_id(page_id: str) -> str:
    """Normalize a Notion page id to its dashed UUID form.

    Accepts a dashed UUID, the 32 hex characters Notion shows in share
    links, or a full page URL ending in the id (query string ignored).

    Args:
        page_id: Raw page id or page URL

    Returns:
        str: Lower-case dashed id, e.g. "59833787-2cf9-4fdf-8782-e53db20768a5"

    Raises:
        ValueError: If no page id can be extracted

    Example:
        >>> normalize_page_id("https://www.notion.so/Team-Wiki-598337872cf94fdf8782e53db20768a5")
        '59833787-2cf9-4fdf-8782-e53db20768a5'
    """
    if not page_id or not str(page_id).strip():
        raise ValueError("page_id cannot be empty")

    candidate = str(page_id).strip().split('?', 1)[0].split('#', 1)[0].rstrip('/')
    match = _PAGE_ID_PATTERN.search(candidate)
    if not match:
        raise ValueError(
            f"Invalid page_id format: '{page_id}'. "
            f"Expected a Notion page id (32 hex characters) or page URL."
        )
    return '-'.join(group.lower() for group in match.groups())


class NotionAPI:
    """Thin client over the Notion REST API with error translation.

    This class:
    1. Authenticates every request with the integration token
    2. Translates HTTP errors to typed exceptions
    3. Integrates retry logic for 429 rate limits
    4. Follows cursor pagination for block children

    Example:
        >>> api = NotionAPI(token="secret_...")
        >>> page = api.retrieve_page("59833787-2cf9-4fdf-8782-e53db20768a5")
        >>> for block in api.iter_block_children(page["id"]):
        ...     print(block["type"])
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the API wrapper.

        Args:
            token: Notion integration token
            base_url: API root, without trailing slash
            notion_version: Value of the Notion-Version header
            timeout: Per-request timeout in seconds
            session: Optional pre-built session (used by tests)
        """
        if not token:
            raise InvalidCredentialsError(endpoint=base_url, reason="token is empty")

        self._token = token
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Notion-Version": notion_version,
            "Content-Type": "application/json",
        })

    @property
    def base_url(self) -> str:
        return self._base_url

    def _sanitize_credentials(self, text: str) -> str:
        """Mask the integration token and bearer headers in error text.

        Example:
            >>> api._sanitize_credentials("Authorization: Bearer secret_abc")
            'Authorization: ***REDACTED***'
        """
        if not text:
            return text

        sanitized = text.replace(self._token, '***REDACTED***')

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        # Notion integration tokens are prefixed "secret_" or "ntn_"
        sanitized = re.sub(
            r'\b(secret|ntn)_[A-Za-z0-9]{8,}\b',
            '***REDACTED***',
            sanitized
        )

        return sanitized

    def _translate_error(
        self,
        exception: Exception,
        operation: str,
        object_id: Optional[str] = None
    ) -> Exception:
        """Translate HTTP exceptions to typed Notion exceptions.

        Args:
            exception: The original exception raised by requests
            operation: Description of the operation that failed (for logging)
            object_id: Page or block id the operation targeted

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, (Timeout, ConnectTimeout, ReadTimeout, ConnectionError)):
            return APIUnreachableError(endpoint=self._base_url)

        response = getattr(exception, 'response', None)
        status_code = getattr(response, 'status_code', None)

        if status_code == 401:
            return InvalidCredentialsError(endpoint=self._base_url)

        if status_code == 404:
            return PageNotFoundError(page_id=object_id or "unknown")

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Notion API failure during {operation}")

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        object_id: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send one request, retrying rate limits, translating failures."""
        url = f"{self._base_url}/{path.lstrip('/')}"

        def _send() -> Dict[str, Any]:
            response = self._session.request(
                method,
                url,
                params=params,
                timeout=self._timeout,
            )
            response.raise_for_status()
            return response.json()

        try:
            return retry_on_rate_limit(_send)
        except (HTTPError, Timeout, ConnectionError) as e:
            raise self._translate_error(e, operation, object_id) from e

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        """Fetch a page object (metadata and properties, no content).

        Args:
            page_id: The Notion page id (dashed or undashed)

        Returns:
            Dict containing the page object

        Raises:
            ValueError: If page_id is malformed
            InvalidCredentialsError: If the token is rejected
            PageNotFoundError: If the page doesn't exist or isn't shared
            APIUnreachableError: If the API is unreachable
            APIAccessError: If API access fails after retries
        """
        page_id = normalize_page_id(page_id)
        logger.debug(f"Notion API: GET /pages/{page_id}")
        return self._request(
            "GET",
            f"pages/{page_id}",
            operation=f"retrieve_page({page_id})",
            object_id=page_id,
        )

    def list_block_children(
        self,
        block_id: str,
        page_size: int = MAX_PAGE_SIZE,
        start_cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch one page of a block's direct children.

        Args:
            block_id: The parent block (or page) id
            page_size: Number of children per page (1-100)
            start_cursor: Cursor from a previous response's next_cursor

        Returns:
            Dict with "results", "has_more" and "next_cursor"
        """
        block_id = normalize_page_id(block_id)
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}"
            )

        params: Dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            params["start_cursor"] = start_cursor

        logger.debug(
            f"Notion API: GET /blocks/{block_id}/children "
            f"(page_size={page_size}, cursor={start_cursor})"
        )
        return self._request(
            "GET",
            f"blocks/{block_id}/children",
            operation=f"list_block_children({block_id})",
            object_id=block_id,
            params=params,
        )

    def iter_block_children(
        self,
        block_id: str,
        page_size: int = MAX_PAGE_SIZE,
    ) -> Iterator[Dict[str, Any]]:
        """Yield every direct child of a block, following has_more/next_cursor.

        Raises the same errors as list_block_children; a failure on a later
        page surfaces after earlier children were already yielded, so callers
        that need all-or-nothing semantics should materialize the list first.
        """
        cursor: Optional[str] = None
        while True:
            response = self.list_block_children(
                block_id,
                page_size=page_size,
                start_cursor=cursor,
            )
            yield from response.get("results", [])

            if not response.get("has_more"):
                break
            cursor = response.get("next_cursor")
            if not cursor:
                logger.warning(
                    f"Block {block_id} reported has_more without next_cursor; "
                    f"stopping pagination"
                )
                break
