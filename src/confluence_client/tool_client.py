"""Wrapper for Confluence reads delegated to an MCP tool server.

Some deployments reach Confluence through an Atlassian MCP server rather than
calling the REST API directly. The host application owns the MCP connection
and hands us an object that can invoke a named tool; this module turns those
tool invocations into the same typed errors the REST wrapper raises.
"""

import logging
from typing import Any, Dict, Optional, Protocol

from .errors import (
    ConfluenceError,
    PageNotFoundError,
    APIUnreachableError,
    APIAccessError,
    MalformedResponseError,
)
from .retry_logic import MAX_RETRIES, is_rate_limit_error, retry_on_rate_limit

logger = logging.getLogger(__name__)


class ToolClient(Protocol):
    """Anything that can invoke a named MCP tool and return its decoded result."""

    def call(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        ...


class MCPToolWrapper:
    """Invokes Confluence tools on an MCP server with error translation.

    Tool names are the Atlassian MCP server's names with an optional prefix,
    since hosts usually namespace tools per server
    (e.g. ``mcp__atlassian__getConfluencePage``).

    Example:
        >>> wrapper = MCPToolWrapper(host_mcp, cloud_id="abc-123", tool_prefix="mcp__atlassian__")
        >>> page = wrapper.get_page("123456", "markdown")
    """

    TOOL_GET_PAGE = 'getConfluencePage'
    TOOL_GET_SPACES = 'getConfluenceSpaces'
    TOOL_GET_SPACE_PAGES = 'getPagesInConfluenceSpace'
    TOOL_GET_DESCENDANTS = 'getConfluencePageDescendants'
    TOOL_SEARCH = 'searchConfluenceUsingCql'

    def __init__(
        self,
        tool_client: ToolClient,
        cloud_id: Optional[str],
        tool_prefix: str = '',
        max_retries: int = MAX_RETRIES,
    ):
        self._tool_client = tool_client
        self._cloud_id = cloud_id
        self._tool_prefix = tool_prefix
        self._max_retries = max_retries

    def _tool_name(self, tool: str) -> str:
        return f"{self._tool_prefix}{tool}"

    def _call(
        self,
        tool: str,
        arguments: Dict[str, Any],
        page_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Invoke one tool and validate the result shape.

        Raises:
            ConfluenceError: Any translated failure
        """
        tool_name = self._tool_name(tool)
        payload = {'cloudId': self._cloud_id, **arguments}

        def _attempt():
            try:
                return self._tool_client.call(tool_name, payload)
            except ConfluenceError:
                raise
            except Exception as e:
                if is_rate_limit_error(e):
                    raise
                raise self._translate_error(e, tool_name, page_id) from e

        result = retry_on_rate_limit(_attempt, max_retries=self._max_retries)

        if not isinstance(result, dict):
            raise MalformedResponseError(
                tool_name, f"expected an object, got {type(result).__name__}"
            )
        if result.get('isError'):
            raise APIAccessError(f"MCP tool {tool_name} reported an error")
        return result

    def _translate_error(
        self,
        exception: Exception,
        tool_name: str,
        page_id: Optional[str] = None,
    ) -> ConfluenceError:
        if isinstance(exception, (TimeoutError, ConnectionError)):
            return APIUnreachableError(endpoint=f"mcp:{tool_name}")

        error_msg = str(exception).lower()
        if '404' in error_msg or 'not found' in error_msg:
            return PageNotFoundError(page_id=page_id or "unknown")

        logger.error(f"MCP tool call failed: {tool_name} - {exception}")
        return APIAccessError(f"MCP tool failure during {tool_name}")

    def get_page(self, page_id: str, content_format: str) -> Dict[str, Any]:
        return self._call(
            self.TOOL_GET_PAGE,
            {'pageId': page_id, 'contentFormat': content_format},
            page_id=page_id,
        )

    def get_spaces(self, cursor: Optional[str] = None, limit: int = 250) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {'limit': limit}
        if cursor:
            arguments['cursor'] = cursor
        return self._call(self.TOOL_GET_SPACES, arguments)

    def get_space_pages(
        self,
        space_id: str,
        status: str = 'current',
        limit: int = 250,
        cursor: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        """List one page of a space's pages. Extra listing options are passed as tool arguments."""
        arguments: Dict[str, Any] = dict(extra)
        arguments.update({
            'spaceId': str(space_id),
            'status': status,
            'limit': limit,
        })
        if cursor:
            arguments['cursor'] = cursor
        return self._call(self.TOOL_GET_SPACE_PAGES, arguments)

    def get_page_descendants(self, page_id: str) -> Dict[str, Any]:
        return self._call(self.TOOL_GET_DESCENDANTS, {'pageId': page_id}, page_id=page_id)

    def search(self, cql: str, limit: int = 100) -> Dict[str, Any]:
        return self._call(self.TOOL_SEARCH, {'cql': cql, 'limit': limit})
