"""Per-user cached snapshot of the visible page set."""

import logging
import threading
from typing import Any, Dict, List, Optional, Set

from src.cache import ResultCache, keys
from src.content_gateway.base import ContentGateway
from src.models.access_profile import UserAccessProfile
from src.models.remote_page import RemotePage

from .errors import ResolutionFailedError
from .fingerprint import profile_fingerprint
from .policy import AccessPolicyEvaluator

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300


def _user_key(user_id: Any) -> Optional[str]:
    return str(user_id) if user_id is not None else None


class UserPageView:
    """Caches each user's resolved page set under (user ID, profile fingerprint).

    Editing a user's grants changes the fingerprint, so the next read misses
    and resolves again; the old entry simply expires. invalidate() is the
    manual "refresh" path and also drops the space-level caches the user's
    view was built from.
    """

    def __init__(
        self,
        cache: ResultCache,
        evaluator: AccessPolicyEvaluator,
        ttl: int = DEFAULT_TTL,
        gateway: Optional[ContentGateway] = None,
    ):
        self._cache = cache
        self._evaluator = evaluator
        self._ttl = ttl
        self._gateway = gateway
        self._lock = threading.Lock()
        self._relied_spaces: Dict[Optional[str], Set[str]] = {}

    def get_pages(self, profile: UserAccessProfile) -> List[RemotePage]:
        """Return the user's visible pages, resolving them on a cache miss.

        A resolution failure is logged and reported as no pages; it is not
        cached, so the next call tries again.
        """
        cache_key = keys.user_pages(profile.user_id, profile_fingerprint(profile))
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key}")
            return list(cached)

        logger.debug(f"Cache miss: {cache_key}")
        try:
            pages = self._evaluator.resolve_visible_set(profile)
        except ResolutionFailedError as e:
            logger.error(
                f"Failed to resolve Confluence pages for user {profile.user_id}: {e.cause}"
            )
            return []

        if profile.space_keys:
            with self._lock:
                self._relied_spaces.setdefault(profile.user_id, set()).update(profile.space_keys)

        self._cache.set(cache_key, tuple(pages), self._ttl)
        return pages

    def invalidate(self, user_id: Any, profile: Optional[UserAccessProfile] = None) -> None:
        """Drop every cached view for a user plus the space caches it relied on.

        Args:
            user_id: User whose views to drop
            profile: Current profile; its space keys are cleared as well
        """
        user_id = _user_key(user_id)
        removed = self._cache.invalidate_prefix(keys.user_pages_prefix(user_id))

        with self._lock:
            space_keys = self._relied_spaces.pop(user_id, set())
        if profile is not None:
            space_keys |= set(profile.space_keys)

        if self._gateway is not None:
            self._gateway.clear_spaces_cache()
            for space_key in sorted(space_keys):
                self._gateway.clear_space_cache(space_key)

        logger.info(
            f"Invalidated {removed} cached page views for user {user_id} "
            f"(spaces cleared: {', '.join(sorted(space_keys)) or 'none'})"
        )
