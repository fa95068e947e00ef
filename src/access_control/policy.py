"""Access policy evaluation over space grants, page grants and exclusions.

Exclusions dominate grants: they are checked before any grant rule, so a
space grant can never leak an explicitly excluded subtree.
"""

import logging
from typing import Dict, Iterable, List, Set

from src.config.models import FORMAT_MARKDOWN
from src.content_gateway.base import ContentGateway
from src.models.access_profile import UserAccessProfile
from src.models.remote_page import RemotePage

from .descendant_resolver import DescendantResolver
from .errors import ResolutionFailedError

logger = logging.getLogger(__name__)


class AccessPolicyEvaluator:
    """Decides page visibility for a user and assembles their visible set.

    The evaluator holds no per-user state; the profile (and the super-admin
    flag, which comes from the host's role system) is passed on every call.
    """

    def __init__(self, gateway: ContentGateway, content_format: str = FORMAT_MARKDOWN):
        self._gateway = gateway
        self._content_format = content_format

    def can_view(
        self,
        profile: UserAccessProfile,
        page: RemotePage,
        is_super_admin: bool = False,
    ) -> bool:
        """Single-page decision. The first matching rule wins.

        1. Super admins see everything.
        2. A directly excluded page is hidden.
        3. A page below an exclusion with exclude_descendants is hidden.
        4. A page in a granted space is visible.
        5. A directly granted page is visible.
        6. A page below a grant with include_descendants is visible.
        7. Anything else is hidden.
        """
        if is_super_admin:
            return True

        page_id = str(page.id)
        if profile.is_excluded(page_id):
            return False

        resolver = DescendantResolver(self._gateway)
        for exclusion in profile.exclusions:
            if exclusion.exclude_descendants and page_id in resolver.descendant_ids(exclusion.page_id):
                return False

        if page.space_key and page.space_key in profile.space_keys:
            return True

        if profile.is_granted(page_id):
            return True

        for grant in profile.page_grants:
            if grant.include_descendants and page_id in resolver.descendant_ids(grant.page_id):
                return True

        return False

    def can_view_any(self, profile: UserAccessProfile, is_super_admin: bool = False) -> bool:
        return is_super_admin or profile.has_access()

    def resolve_visible_set(self, profile: UserAccessProfile) -> List[RemotePage]:
        """Gather every page the user may see.

        Remote failures degrade to a smaller result (the gateway absorbs
        them). Any other failure is raised as ResolutionFailedError.

        Returns:
            Current, non-excluded pages, deduplicated by ID in gathering order

        Raises:
            ResolutionFailedError: On an unexpected internal error
        """
        if not profile.has_access():
            return []

        try:
            return self._resolve(profile)
        except Exception as e:
            raise ResolutionFailedError(profile.user_id, e) from e

    def _resolve(self, profile: UserAccessProfile) -> List[RemotePage]:
        resolver = DescendantResolver(self._gateway)
        gathered: Dict[str, RemotePage] = {}

        def _add(pages: Iterable[RemotePage]) -> None:
            for page in pages:
                gathered.setdefault(page.id, page)

        for space_key in profile.space_keys:
            _add(self._gateway.fetch_pages_in_space(space_key))

        for grant in profile.page_grants:
            page = self._gateway.fetch_page(grant.page_id, self._content_format)
            if page is None:
                continue
            _add([page])
            if grant.include_descendants:
                _add(resolver.resolve(grant.page_id))

        excluded: Set[str] = set(profile.excluded_page_ids())
        for exclusion in profile.exclusions:
            if exclusion.exclude_descendants:
                excluded |= resolver.descendant_ids(exclusion.page_id)

        visible = [
            page for page in gathered.values()
            if page.id not in excluded and page.is_current
        ]
        logger.debug(
            f"Resolved {len(visible)} visible pages for user {profile.user_id} "
            f"({len(gathered)} gathered, {len(excluded)} excluded ids)"
        )
        return visible
