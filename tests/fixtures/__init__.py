"""Test fixtures for the Confluence mirror.

This module provides remote JSON payloads shaped like the Confluence Cloud
v2 REST API and the Atlassian MCP tools.
"""

from .sample_pages import (
    page_payload,
    space_payload,
    listing,
    SAMPLE_PAGE_V2,
    SAMPLE_SPACES_RESPONSE,
    SAMPLE_SEARCH_RESPONSE,
)

__all__ = [
    "page_payload",
    "space_payload",
    "listing",
    "SAMPLE_PAGE_V2",
    "SAMPLE_SPACES_RESPONSE",
    "SAMPLE_SEARCH_RESPONSE",
]
