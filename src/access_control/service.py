"""Entry point for host applications: the access-controlled page mirror."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.cache import ResultCache
from src.config.models import MirrorConfig
from src.confluence_client.auth import Authenticator
from src.confluence_client.tool_client import ToolClient
from src.content_gateway.base import ContentGateway
from src.content_gateway.factory import create_gateway
from src.models.access_profile import UserAccessProfile
from src.models.remote_page import RemotePage, Space

from .descendant_resolver import DescendantResolver
from .materialized_view import UserPageView
from .policy import AccessPolicyEvaluator

logger = logging.getLogger(__name__)


@dataclass
class PageTreeNode:
    """A visible page and its visible children.

    Attributes:
        page: The page at this node
        children: Child nodes, sorted by title
    """
    page: RemotePage
    children: List['PageTreeNode'] = field(default_factory=list)

    @property
    def page_id(self) -> str:
        return self.page.id

    @property
    def title(self) -> str:
        return self.page.title


class ConfluenceMirrorService:
    """Read-only Confluence mirror filtered by per-user access profiles.

    Wires the content gateway, the access policy evaluator and the per-user
    page view around one shared result cache.

    Example:
        >>> service = ConfluenceMirrorService.from_config(ConfigLoader.load())
        >>> profile = UserAccessProfile.from_record(user_record)
        >>> pages = service.get_pages_for_user(profile)
    """

    def __init__(
        self,
        gateway: ContentGateway,
        cache: ResultCache,
        config: Optional[MirrorConfig] = None,
    ):
        self._config = config or MirrorConfig()
        self._gateway = gateway
        self._cache = cache
        self._evaluator = AccessPolicyEvaluator(gateway, self._config.content_format)
        self._view = UserPageView(
            cache,
            self._evaluator,
            ttl=self._config.cache.user_pages,
            gateway=gateway,
        )

    @classmethod
    def from_config(
        cls,
        config: MirrorConfig,
        tool_client: Optional[ToolClient] = None,
        cache: Optional[ResultCache] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> 'ConfluenceMirrorService':
        """Build the service and its collaborators from configuration."""
        cache = cache if cache is not None else ResultCache()
        gateway = create_gateway(config, cache, tool_client=tool_client, authenticator=authenticator)
        logger.info(
            f"Confluence mirror service ready (connection={gateway.backend_name}, "
            f"content_format={config.content_format})"
        )
        return cls(gateway, cache, config)

    @property
    def gateway(self) -> ContentGateway:
        return self._gateway

    def get_pages_for_user(self, profile: UserAccessProfile) -> List[RemotePage]:
        return self._view.get_pages(profile)

    def get_page(self, page_id: str) -> Optional[RemotePage]:
        return self._gateway.fetch_page(page_id, self._config.content_format)

    def can_view_page(
        self,
        profile: UserAccessProfile,
        page: RemotePage,
        is_super_admin: bool = False,
    ) -> bool:
        return self._evaluator.can_view(profile, page, is_super_admin=is_super_admin)

    def can_view_any(self, profile: UserAccessProfile, is_super_admin: bool = False) -> bool:
        return self._evaluator.can_view_any(profile, is_super_admin=is_super_admin)

    def get_page_descendants(self, page_id: str) -> List[RemotePage]:
        return DescendantResolver(self._gateway).resolve(page_id)

    def get_spaces(self) -> List[Space]:
        return self._gateway.fetch_spaces()

    def get_pages_in_space(self, space_key: str) -> List[RemotePage]:
        return self._gateway.fetch_pages_in_space(space_key)

    def search_pages(self, cql: str) -> List[RemotePage]:
        return self._gateway.search(cql)

    def invalidate_user(self, user_id: str, profile: Optional[UserAccessProfile] = None) -> None:
        self._view.invalidate(user_id, profile)

    def invalidate_page(self, page_id: str) -> None:
        self._gateway.clear_page_cache(page_id)
        logger.info(f"Invalidated cached data for page {page_id}")

    def invalidate_space(self, space_key: str) -> None:
        self._gateway.clear_space_cache(space_key)
        logger.info(f"Invalidated cached data for space {space_key}")

    def invalidate_all(self) -> None:
        self._cache.clear()

    @staticmethod
    def build_page_tree(pages: List[RemotePage]) -> List[PageTreeNode]:
        """Group a flat page list into parent/child trees.

        A page whose parent is not in the list becomes a root. Roots and
        siblings are sorted by title (case-insensitive).

        Args:
            pages: Pages to arrange, typically a user's visible set

        Returns:
            Root nodes
        """
        nodes: Dict[str, PageTreeNode] = {}
        for page in pages:
            nodes.setdefault(page.id, PageTreeNode(page))

        def _in_cycle(node_id: str) -> bool:
            seen = set()
            current = nodes[node_id].page.parent_id
            while current in nodes and current not in seen:
                if current == node_id:
                    return True
                seen.add(current)
                current = nodes[current].page.parent_id
            return False

        roots: List[PageTreeNode] = []
        for node in nodes.values():
            parent_id = node.page.parent_id
            if parent_id in nodes and not _in_cycle(node.page_id):
                nodes[parent_id].children.append(node)
            else:
                roots.append(node)

        def _sort(siblings: List[PageTreeNode]) -> None:
            siblings.sort(key=lambda n: (n.title.lower(), n.page_id))
            for sibling in siblings:
                _sort(sibling.children)

        _sort(roots)
        return roots
