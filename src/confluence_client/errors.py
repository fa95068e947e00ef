"""Typed exception hierarchy for Confluence-related errors.

This module defines the exceptions raised by the Confluence backends. All
remote failures inherit from ConfluenceError so the content gateway can catch
them in one place and degrade to empty or partial results.
"""

from typing import Optional


class MirrorError(Exception):
    """Base exception for all confluence-mirror errors.

    Use this to catch any application-level error from the mirror.
    """
    pass


class ConfluenceError(MirrorError):
    """Base exception for all Confluence-related errors."""
    pass


class InvalidCredentialsError(ConfluenceError):
    """Raised when API credentials are missing, invalid or rejected."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"API key is invalid (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class PageNotFoundError(ConfluenceError):
    """Raised when a requested page does not exist."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class SpaceNotFoundError(ConfluenceError):
    """Raised when a space key cannot be resolved to a space."""

    def __init__(self, space_key: str):
        super().__init__(f"Space '{space_key}' not found")
        self.space_key = space_key


class APIUnreachableError(ConfluenceError):
    """Raised when the Confluence API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(ConfluenceError):
    """Raised when API access fails after retries or due to access restrictions."""

    def __init__(self, message: str = "Confluence API failure (after 3 retries)"):
        super().__init__(message)


class MalformedResponseError(ConfluenceError):
    """Raised when the remote returns a body that does not have the expected shape."""

    def __init__(self, operation: str, detail: Optional[str] = None):
        message = f"Malformed response from {operation}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.operation = operation
        self.detail = detail
