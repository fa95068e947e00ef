"""Content gateway backed by an Atlassian MCP tool server."""

import logging
from typing import Any, List, Mapping, Optional, Tuple

from src.cache import ResultCache
from src.config.models import MirrorConfig
from src.confluence_client.api_wrapper import extract_next_cursor
from src.confluence_client.tool_client import MCPToolWrapper
from src.models.remote_page import RemotePage

from .base import Batch, ContentGateway, results_of

logger = logging.getLogger(__name__)


def _next_cursor(payload: Mapping[str, Any]) -> Optional[str]:
    # Tool servers either forward the v2 _links block or report the cursor directly
    return extract_next_cursor(dict(payload)) or payload.get('nextCursor') or None


class McpContentGateway(ContentGateway):
    """Reads Confluence through MCPToolWrapper.

    The tool server walks subtrees itself, so descendants come back from one
    call.
    """

    backend_name = 'mcp'

    def __init__(
        self,
        wrapper: MCPToolWrapper,
        cache: ResultCache,
        config: Optional[MirrorConfig] = None,
    ):
        config = config or MirrorConfig()
        super().__init__(
            cache,
            cache_config=config.cache,
            page_limit=config.page_limit,
            search_limit=config.search_limit,
        )
        self._wrapper = wrapper

    def _load_page(self, page_id: str, content_format: str) -> RemotePage:
        return RemotePage.from_api(self._wrapper.get_page(page_id, content_format))

    def _load_spaces_batch(self, cursor: Optional[str]) -> Batch:
        payload = self._wrapper.get_spaces(cursor=cursor, limit=self._page_limit)
        return results_of(payload, "getConfluenceSpaces"), _next_cursor(payload)

    def _load_space_pages_batch(
        self,
        space_id: str,
        params: Mapping[str, Any],
        cursor: Optional[str],
    ) -> Batch:
        payload = self._wrapper.get_space_pages(
            space_id,
            status=params.get('status', 'current'),
            limit=params.get('limit', self._page_limit),
            cursor=cursor,
            **{k: v for k, v in params.items() if k not in ('status', 'limit', 'cursor')},
        )
        return results_of(payload, "getPagesInConfluenceSpace"), _next_cursor(payload)

    def _walk_descendants(self, page_id: str) -> Tuple[List[RemotePage], bool]:
        payload = self._wrapper.get_page_descendants(page_id)
        descendants = []
        seen = {page_id}
        for page in self._to_pages(results_of(payload, "getConfluencePageDescendants")):
            if page.id in seen:
                continue
            seen.add(page.id)
            descendants.append(page)
        logger.debug(f"Found {len(descendants)} descendants of page {page_id}")
        return descendants, True

    def _run_search(self, cql: str) -> List[Any]:
        payload = self._wrapper.search(cql, limit=self._search_limit)
        return results_of(payload, "searchConfluenceUsingCql")
