"""Confluence client library for the read-only page mirror.

This package provides Python abstractions over the two ways the mirror reaches
Confluence: the Cloud REST API (through atlassian-python-api) and an MCP tool
server supplied by the host application.
"""

from .errors import (
    MirrorError,
    ConfluenceError,
    InvalidCredentialsError,
    PageNotFoundError,
    SpaceNotFoundError,
    APIUnreachableError,
    APIAccessError,
    MalformedResponseError,
)

__all__ = [
    "MirrorError",
    "ConfluenceError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "SpaceNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "MalformedResponseError",
]
