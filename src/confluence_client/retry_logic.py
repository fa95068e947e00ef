"""Retry logic with exponential backoff for Confluence API rate limits.

Confluence Cloud answers bursts of reads with HTTP 429. Resolving a user's
visible pages issues one call per grant plus one per descendant listing, so
the backends retry rate-limited calls (1s, 2s, 4s) and fail fast on anything
else.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3

RATE_LIMIT_PATTERNS = (
    '429',
    'too many requests',
    'rate limit exceeded',
    'rate limited',
)


def retry_on_rate_limit(
    func: Callable[[], T],
    max_retries: int = MAX_RETRIES,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call func, retrying on 429 rate limit errors with exponential backoff.

    Args:
        func: Zero-argument callable performing one remote request
        max_retries: Number of retries after the first attempt
        sleep: Sleep function (defaults to time.sleep)

    Returns:
        The return value of func

    Raises:
        APIAccessError: If the rate limit persists after max_retries retries
        Other exceptions: Passed through immediately without retry
    """
    for attempt in range(max_retries + 1):
        try:
            return func()
        except Exception as e:
            if not is_rate_limit_error(e):
                raise

            if attempt >= max_retries:
                logger.error(
                    f"Rate limit persisted after {max_retries} retries, giving up"
                )
                raise APIAccessError(
                    f"Confluence API failure (after {max_retries} retries)"
                ) from e

            wait_time = 2 ** attempt
            logger.info(
                f"Rate limit hit, retrying in {wait_time}s "
                f"(retry {attempt + 1}/{max_retries})"
            )
            (sleep or time.sleep)(wait_time)

    raise APIAccessError(f"Confluence API failure (after {max_retries} retries)")


def is_rate_limit_error(exception: BaseException) -> bool:
    """Check if an exception represents a rate limit (429) error.

    Looks at the message, a status_code attribute, and the requests-style
    response.status_code.
    """
    error_msg = str(exception).lower()
    if any(pattern in error_msg for pattern in RATE_LIMIT_PATTERNS):
        return True

    if getattr(exception, 'status_code', None) == 429:
        return True

    response = getattr(exception, 'response', None)
    if response is not None and getattr(response, 'status_code', None) == 429:
        return True

    return False
