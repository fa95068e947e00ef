"""Backend selection for the content gateway."""

import logging
from typing import Optional

from src.cache import ResultCache
from src.config.models import CONNECTION_MCP, MirrorConfig
from src.confluence_client.api_wrapper import APIWrapper
from src.confluence_client.auth import Authenticator
from src.confluence_client.tool_client import MCPToolWrapper, ToolClient

from .base import ContentGateway
from .mcp_gateway import McpContentGateway
from .rest_gateway import RestContentGateway

logger = logging.getLogger(__name__)


def create_gateway(
    config: MirrorConfig,
    cache: ResultCache,
    tool_client: Optional[ToolClient] = None,
    authenticator: Optional[Authenticator] = None,
) -> ContentGateway:
    """Build the gateway for the configured connection.

    An MCP connection needs a tool client from the host application; without
    one the direct REST backend is used instead.

    Args:
        config: Mirror configuration
        cache: Shared result cache
        tool_client: Host-provided MCP tool invoker
        authenticator: Credential loader for the REST backend

    Returns:
        A ready-to-use ContentGateway
    """
    if config.connection == CONNECTION_MCP:
        if tool_client is not None:
            wrapper = MCPToolWrapper(
                tool_client,
                cloud_id=config.cloud_id,
                tool_prefix=config.mcp_tool_prefix,
            )
            logger.info("Confluence gateway initialized (client_type=mcp)")
            return McpContentGateway(wrapper, cache, config)
        logger.warning(
            "Connection 'mcp' configured but no MCP tool client is available; "
            "falling back to the direct REST API"
        )

    api = APIWrapper(authenticator or Authenticator(), timeout=config.request_timeout)
    logger.info("Confluence gateway initialized (client_type=direct)")
    return RestContentGateway(api, cache, config)
