"""Subtree expansion for page grants and exclusions."""

import logging
from typing import Dict, List, Set

from src.content_gateway.base import ContentGateway
from src.models.remote_page import RemotePage

logger = logging.getLogger(__name__)


class DescendantResolver:
    """Materializes the full subtree below a page.

    Walks are shared process-wide through the gateway's cache (keyed by page
    ID only). A resolver instance also memoizes its own lookups, so one
    evaluation pass consults each subtree once even when the same page
    appears in both a grant and an exclusion.

    Example:
        >>> resolver = DescendantResolver(gateway)
        >>> "12" in resolver.descendant_ids("10")
        True
    """

    def __init__(self, gateway: ContentGateway):
        self._gateway = gateway
        self._memo: Dict[str, List[RemotePage]] = {}

    def resolve(self, page_id: str) -> List[RemotePage]:
        """Return every descendant of page_id (empty if it has none or the walk failed)."""
        page_id = str(page_id)
        if page_id not in self._memo:
            logger.debug(f"Resolving descendants of page {page_id}")
            self._memo[page_id] = self._gateway.fetch_page_children(page_id)
        return list(self._memo[page_id])

    def descendant_ids(self, page_id: str) -> Set[str]:
        return {page.id for page in self.resolve(page_id)}
