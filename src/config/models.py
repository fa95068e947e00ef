"""Configuration models for the Confluence mirror."""

from dataclasses import dataclass, field
from typing import Optional

CONNECTION_DIRECT = 'direct'
CONNECTION_MCP = 'mcp'
CONNECTIONS = (CONNECTION_DIRECT, CONNECTION_MCP)

FORMAT_MARKDOWN = 'markdown'
FORMAT_ADF = 'adf'
CONTENT_FORMATS = (FORMAT_MARKDOWN, FORMAT_ADF)


@dataclass
class CacheConfig:
    """Cache lifetimes in seconds.

    Attributes:
        pages: Single pages and descendant walks
        spaces: Space listings, space ID lookups and space page scans
        user_pages: Each user's resolved visible page set
    """
    pages: int = 1800
    spaces: int = 1800
    user_pages: int = 300


@dataclass
class MirrorConfig:
    """Top-level mirror configuration.

    Attributes:
        connection: Backend to use, "direct" (REST API) or "mcp" (tool server)
        content_format: Body format requested for pages, "markdown" or "adf"
        cache: Cache lifetimes
        request_timeout: Per-request timeout in seconds for REST calls
        page_limit: Page size requested from paginated listings
        search_limit: Maximum results requested from CQL search
        cloud_id: Atlassian cloud ID passed to MCP tools
        mcp_tool_prefix: Prefix the host puts in front of MCP tool names
    """
    connection: str = CONNECTION_DIRECT
    content_format: str = FORMAT_MARKDOWN
    cache: CacheConfig = field(default_factory=CacheConfig)
    request_timeout: int = 30
    page_limit: int = 250
    search_limit: int = 100
    cloud_id: Optional[str] = None
    mcp_tool_prefix: str = ''
