"""Read gateway over Confluence content with REST and MCP backends."""

from .base import ContentGateway
from .factory import create_gateway
from .mcp_gateway import McpContentGateway
from .rest_gateway import RestContentGateway

__all__ = ['ContentGateway', 'RestContentGateway', 'McpContentGateway', 'create_gateway']
