"""Content gateway backed by the Confluence Cloud REST API."""

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Tuple

from src.cache import ResultCache
from src.config.models import FORMAT_ADF, FORMAT_MARKDOWN, MirrorConfig
from src.confluence_client.api_wrapper import APIWrapper, extract_next_cursor
from src.confluence_client.errors import ConfluenceError
from src.models.remote_page import RemotePage

from .base import Batch, ContentGateway, results_of

logger = logging.getLogger(__name__)


class RestContentGateway(ContentGateway):
    """Reads Confluence through APIWrapper.

    The v2 API has no single "all descendants" call, so subtrees are walked
    one children listing at a time.
    """

    backend_name = 'direct'

    # Mirror content format -> v2 body-format parameter
    BODY_FORMATS = {
        FORMAT_MARKDOWN: 'view',
        FORMAT_ADF: 'atlas_doc_format',
    }

    def __init__(self, api: APIWrapper, cache: ResultCache, config: Optional[MirrorConfig] = None):
        config = config or MirrorConfig()
        super().__init__(
            cache,
            cache_config=config.cache,
            page_limit=config.page_limit,
            search_limit=config.search_limit,
        )
        self._api = api

    def _load_page(self, page_id: str, content_format: str) -> RemotePage:
        body_format = self.BODY_FORMATS.get(content_format, 'view')
        return RemotePage.from_api(self._api.get_page(page_id, body_format=body_format))

    def _load_spaces_batch(self, cursor: Optional[str]) -> Batch:
        payload = self._api.get_spaces(cursor=cursor, limit=self._page_limit)
        return results_of(payload, "get_spaces"), extract_next_cursor(payload)

    def _load_space_pages_batch(
        self,
        space_id: str,
        params: Mapping[str, Any],
        cursor: Optional[str],
    ) -> Batch:
        request_params = dict(params)
        if cursor:
            request_params['cursor'] = cursor
        payload = self._api.get_space_pages(space_id, request_params)
        return results_of(payload, "get_space_pages"), extract_next_cursor(payload)

    def _list_children(self, parent: str, space_key: Optional[str]) -> List[RemotePage]:
        """List every direct child of a page, across all cursor pages."""
        def _batch(cursor: Optional[str]) -> Batch:
            payload = self._api.get_page_children(parent, cursor=cursor, limit=self._page_limit)
            return results_of(payload, "get_page_children"), extract_next_cursor(payload)

        items, _ = self._drain(_batch, f"children of page {parent}")
        children = []
        for child in self._to_pages(items, space_key):
            # Children listings omit parentId
            if child.parent_id is None:
                child = replace(child, parent_id=parent)
            children.append(child)
        return children

    def _walk_descendants(self, page_id: str) -> Tuple[List[RemotePage], bool]:
        """Depth-first pre-order walk below page_id.

        A page already visited is never expanded twice, so a cyclic parent
        graph terminates. A failure to list one page's children skips only
        that subtree and marks the result incomplete.
        """
        # Failure at the root means nothing is known about the subtree
        root_children = self._list_children(page_id, None)

        descendants: List[RemotePage] = []
        visited = {page_id}
        complete = True
        stack: List[RemotePage] = []

        def _push(children: List[RemotePage]) -> None:
            fresh = []
            for child in children:
                if child.id in visited:
                    logger.warning(f"Page {child.id} reached twice below {page_id}; skipping")
                    continue
                visited.add(child.id)
                fresh.append(child)
            stack.extend(reversed(fresh))

        _push(root_children)
        while stack:
            node = stack.pop()
            descendants.append(node)
            try:
                _push(self._list_children(node.id, node.space_key))
            except (ConfluenceError, ValueError) as e:
                logger.warning(f"Skipping subtree of page {node.id}: {e}")
                complete = False

        logger.debug(f"Found {len(descendants)} descendants of page {page_id}")
        return descendants, complete

    def _run_search(self, cql: str) -> List[Any]:
        payload = self._api.search_by_cql(cql, limit=self._search_limit)
        return results_of(payload, "search_by_cql")
