"""Retry logic with exponential backoff for Notion API rate limits.

Notion answers 429 when an integration exceeds its request budget and
occasionally 502/503/504 while a workspace is busy. Both are retried with
exponential backoff (1s, 2s, 4s); a Retry-After header from the server takes
precedence over the computed delay. All other errors fail fast.
"""

import time
import logging
from typing import Callable, Optional, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Retry function on rate limits and transient gateway errors.

    Executes the given function with the provided arguments, retrying up to 3 times
    with exponential backoff (1s, 2s, 4s) when a retryable error is encountered.
    Fails fast for all other errors.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If the error persists after 3 retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> result = retry_on_rate_limit(api.retrieve_page, page_id="59833787...")
    """
    for retry_num in range(MAX_RETRIES + 1):  # 0, 1, 2, 3 = 4 attempts total
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= MAX_RETRIES:
                logger.error(
                    f"Rate limit persisted after {MAX_RETRIES} retries, giving up"
                )
                raise APIAccessError(
                    f"Notion API failure (after {MAX_RETRIES} retries)"
                ) from e

            wait_time = _retry_after_seconds(e)
            if wait_time is None:
                wait_time = 2 ** retry_num
            logger.info(
                f"Rate limit hit, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{MAX_RETRIES})"
            )
            time.sleep(wait_time)

    # Unreachable: the loop either returns or raises
    raise APIAccessError(f"Notion API failure (after {MAX_RETRIES} retries)")


def _status_code(exception: Exception) -> Optional[int]:
    """Return the HTTP status code carried by an exception, if any."""
    status_code = getattr(exception, 'status_code', None)
    if isinstance(status_code, int):
        return status_code

    response = getattr(exception, 'response', None)
    status_code = getattr(response, 'status_code', None)
    if isinstance(status_code, int):
        return status_code

    return None


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a retryable (429 or transient 5xx) error.

    Args:
        exception: The exception to check

    Returns:
        True if the request should be retried, False otherwise
    """
    status_code = _status_code(exception)
    if status_code is not None:
        return status_code in RETRYABLE_STATUS_CODES

    # Notion reports throttling as {"code": "rate_limited"}
    error_msg = str(exception).lower()
    rate_limit_patterns = [
        '429',
        'too many requests',
        'rate_limited',
        'rate limit exceeded',
        'rate limited',
    ]
    return any(pattern in error_msg for pattern in rate_limit_patterns)


def _retry_after_seconds(exception: Exception) -> Optional[float]:
    """Read the Retry-After header (seconds) from an HTTP error, if present."""
    response = getattr(exception, 'response', None)
    headers = getattr(response, 'headers', None)
    if not headers:
        return None

    value = headers.get('Retry-After')
    if value is None:
        return None

    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None
