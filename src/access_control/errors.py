"""Exceptions raised while resolving a user's visible page set."""

from typing import Optional

from src.confluence_client.errors import MirrorError


class ResolutionFailedError(MirrorError):
    """Raised when aggregate resolution fails for an unexpected reason.

    Remote failures never surface here (the gateway absorbs them); this wraps
    anything else so callers can treat it as an empty result.
    """

    def __init__(self, user_id: Optional[str], cause: Exception):
        super().__init__(
            f"Failed to resolve visible Confluence pages for user {user_id}: {cause}"
        )
        self.user_id = user_id
        self.cause = cause
