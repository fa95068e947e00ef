"""Backend-agnostic read gateway over Confluence content.

ContentGateway owns everything the two backends have in common: result
caching, cursor draining, payload normalization and the soft-fail policy.
Backends only implement the raw fetch hooks, which raise ConfluenceError on
failure; the public methods catch those errors, log them and return None, an
empty list or whatever was gathered before the failure. Failed or partial
results are never cached.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from src.cache import ResultCache, keys
from src.config.models import CONTENT_FORMATS, FORMAT_MARKDOWN, CacheConfig
from src.confluence_client.errors import (
    ConfluenceError,
    MalformedResponseError,
    PageNotFoundError,
    SpaceNotFoundError,
)
from src.models.remote_page import RemotePage, Space

logger = logging.getLogger(__name__)

# One listing page of raw items plus the cursor for the next one
Batch = Tuple[List[Any], Optional[str]]


def results_of(payload: Dict[str, Any], operation: str) -> List[Any]:
    """Return the ``results`` list of a listing response.

    Raises:
        MalformedResponseError: If results is present but not a list
    """
    results = payload.get('results')
    if results is None:
        return []
    if not isinstance(results, list):
        raise MalformedResponseError(
            operation, f"'results' must be a list, got {type(results).__name__}"
        )
    return results


class ContentGateway(ABC):
    """Read-only access to Confluence pages, spaces, subtrees and search.

    Subclasses implement the underscore-prefixed hooks. Every public method is
    safe to call from request handlers: none of them raise for remote
    failures.
    """

    backend_name = 'abstract'

    def __init__(
        self,
        cache: ResultCache,
        cache_config: Optional[CacheConfig] = None,
        page_limit: int = 250,
        search_limit: int = 100,
    ):
        self._cache = cache
        self._ttl = cache_config or CacheConfig()
        self._page_limit = page_limit
        self._search_limit = search_limit

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _load_page(self, page_id: str, content_format: str) -> RemotePage:
        """Fetch and normalize one page. Raises ConfluenceError."""

    @abstractmethod
    def _load_spaces_batch(self, cursor: Optional[str]) -> Batch:
        """Fetch one page of the space listing. Raises ConfluenceError."""

    @abstractmethod
    def _load_space_pages_batch(
        self,
        space_id: str,
        params: Mapping[str, Any],
        cursor: Optional[str],
    ) -> Batch:
        """Fetch one page of a space's page listing. Raises ConfluenceError."""

    @abstractmethod
    def _walk_descendants(self, page_id: str) -> Tuple[List[RemotePage], bool]:
        """Collect every descendant of page_id.

        Returns:
            (pages, complete) where complete is False if part of the tree
            could not be listed. Raises ConfluenceError if nothing could be
            listed at all.
        """

    @abstractmethod
    def _run_search(self, cql: str) -> List[Any]:
        """Run a CQL query and return raw result items. Raises ConfluenceError."""

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def fetch_page(
        self,
        page_id: str,
        content_format: str = FORMAT_MARKDOWN,
    ) -> Optional[RemotePage]:
        """Fetch a single page, or None if it cannot be fetched."""
        page_id = str(page_id)
        try:
            return self._cache.get_or_compute(
                keys.page(page_id, content_format),
                self._ttl.pages,
                lambda: self._with_space_key(self._load_page(page_id, content_format)),
            )
        except PageNotFoundError:
            logger.warning(f"Confluence page {page_id} not found")
            return None
        except (ConfluenceError, ValueError) as e:
            logger.error(f"Failed to fetch Confluence page {page_id}: {e}")
            return None

    def fetch_spaces(self) -> List[Space]:
        """List every space visible to the service account."""
        try:
            return list(self._cached_spaces())
        except ConfluenceError as e:
            logger.error(f"Failed to fetch Confluence spaces: {e}")
            return []

    def fetch_pages_in_space(
        self,
        space_key: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> List[RemotePage]:
        """List every page of a space, draining all pagination cursors.

        Args:
            space_key: Space key (resolved to a space ID first)
            options: Listing parameters overriding status=current and the page limit

        Returns:
            All pages, or the pages gathered before a failure stopped the scan
        """
        cache_key = keys.space_pages(space_key, options)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key}")
            return list(cached)

        try:
            space_id = self._resolve_space_id(space_key)
        except SpaceNotFoundError:
            logger.warning(f"Cannot fetch pages: space '{space_key}' not found")
            return []
        except ConfluenceError as e:
            logger.error(f"Cannot fetch pages: failed to resolve space '{space_key}': {e}")
            return []

        params: Dict[str, Any] = {'status': 'current', 'limit': self._page_limit}
        params.update(options or {})

        items, complete = self._drain(
            lambda cursor: self._load_space_pages_batch(space_id, params, cursor),
            f"pages in space {space_key}",
            partial_ok=True,
        )
        pages = self._to_pages(items, space_key)

        if complete:
            self._cache.set(cache_key, tuple(pages), self._ttl.spaces)
        else:
            logger.warning(
                f"Returning partial page list for space '{space_key}' ({len(pages)} pages)"
            )
        return pages

    def fetch_page_children(self, page_id: str) -> List[RemotePage]:
        """Return every descendant of a page (children, grandchildren, ...)."""
        page_id = str(page_id)
        cache_key = keys.page_children(page_id)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit: {cache_key}")
            return list(cached)

        try:
            pages, complete = self._walk_descendants(page_id)
        except (ConfluenceError, ValueError) as e:
            logger.error(f"Failed to fetch descendants of page {page_id}: {e}")
            return []

        if complete:
            self._cache.set(cache_key, tuple(pages), self._ttl.pages)
        return pages

    def search(self, cql: str) -> List[RemotePage]:
        """Pass a CQL query through to Confluence."""
        try:
            return list(self._cache.get_or_compute(
                keys.search(cql),
                self._ttl.pages,
                lambda: tuple(self._search_pages(cql)),
            ))
        except ConfluenceError as e:
            logger.error(f"Failed to search Confluence pages (cql={cql!r}): {e}")
            return []

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def clear_page_cache(self, page_id: str) -> None:
        page_id = str(page_id)
        for content_format in CONTENT_FORMATS:
            self._cache.invalidate(keys.page(page_id, content_format))
        self._cache.invalidate(keys.page_children(page_id))

    def clear_space_cache(self, space_key: str) -> None:
        base = keys.space_pages(space_key)
        self._cache.invalidate(base)
        self._cache.invalidate_prefix(f"{base}:")
        self._cache.invalidate(keys.space_id(space_key))

    def clear_spaces_cache(self) -> None:
        self._cache.invalidate(keys.spaces())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cached_spaces(self) -> Tuple[Space, ...]:
        def _load() -> Tuple[Space, ...]:
            items, _ = self._drain(self._load_spaces_batch, "spaces")
            spaces = []
            for item in items:
                try:
                    spaces.append(Space.from_api(item))
                except MalformedResponseError as e:
                    logger.warning(f"Skipping malformed space: {e}")
            return tuple(spaces)

        return self._cache.get_or_compute(keys.spaces(), self._ttl.spaces, _load)

    def _resolve_space_id(self, space_key: str) -> str:
        """Map a space key to its ID (the v2 API only accepts IDs).

        Raises:
            SpaceNotFoundError: If no space has this key
            ConfluenceError: If the space listing cannot be fetched
        """
        def _lookup() -> str:
            for space in self._cached_spaces():
                if space.key == space_key:
                    return space.id
            raise SpaceNotFoundError(space_key)

        return self._cache.get_or_compute(keys.space_id(space_key), self._ttl.spaces, _lookup)

    def _drain(
        self,
        fetch_batch: Callable[[Optional[str]], Batch],
        description: str,
        partial_ok: bool = False,
    ) -> Tuple[List[Any], bool]:
        """Follow pagination cursors until the listing is exhausted.

        Args:
            fetch_batch: Fetches one page of results for a cursor
            description: What is being listed (for logging)
            partial_ok: If True, a failure after the first page stops the scan
                and returns what was gathered instead of raising

        Returns:
            (items, complete)

        Raises:
            ConfluenceError: On failure when partial_ok is False
        """
        items: List[Any] = []
        cursor: Optional[str] = None
        seen_cursors = set()

        while True:
            try:
                batch, next_cursor = fetch_batch(cursor)
            except ConfluenceError as e:
                if not partial_ok:
                    raise
                logger.error(f"Failed to fetch {description} after {len(items)} items: {e}")
                return items, False

            items.extend(batch)

            if not next_cursor:
                return items, True
            if next_cursor in seen_cursors:
                logger.warning(f"Pagination cursor repeated while listing {description}; stopping")
                return items, True
            seen_cursors.add(next_cursor)
            cursor = next_cursor

    def _to_pages(self, items: Iterable[Any], space_key: Optional[str] = None) -> List[RemotePage]:
        pages = []
        for item in items:
            try:
                pages.append(self._with_space_key(RemotePage.from_api(item, space_key=space_key)))
            except MalformedResponseError as e:
                logger.warning(f"Skipping malformed page: {e}")
        return pages

    def _with_space_key(self, page: RemotePage) -> RemotePage:
        """Fill in a missing space key from the page's space ID.

        v2 page and children payloads carry only spaceId. If the space
        listing cannot be fetched the page is returned unchanged.
        """
        if page.space_key or not page.space_id:
            return page
        try:
            spaces = self._cached_spaces()
        except ConfluenceError as e:
            logger.warning(f"Cannot resolve space key of page {page.id}: {e}")
            return page
        for space in spaces:
            if space.id == page.space_id:
                return replace(page, space_key=space.key)
        logger.warning(f"Page {page.id} belongs to unknown space ID {page.space_id}")
        return page

    def _search_pages(self, cql: str) -> List[RemotePage]:
        # Search hits wrap the page in a "content" object
        items = []
        for item in self._run_search(cql):
            if isinstance(item, dict) and isinstance(item.get('content'), dict):
                content = dict(item['content'])
                if 'url' not in content and item.get('url'):
                    content['url'] = item['url']
                items.append(content)
            else:
                items.append(item)
        return self._to_pages(items)
