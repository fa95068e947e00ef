"""Remote Confluence page and space models.

Pages are projections of remote state: they are normalized from whatever JSON
the active backend returns and are never persisted by the mirror.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from src.confluence_client.errors import MalformedResponseError

STATUS_CURRENT = 'current'

_WEBUI_SPACE_RE = re.compile(r'/spaces/([^/]+)/')


def _dig(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first(*values: Any) -> Any:
    for value in values:
        if value not in (None, ''):
            return value
    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as returned by Confluence.

    Returns None for missing or unparseable values.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None


@dataclass(frozen=True)
class RemotePage:
    """A Confluence page as surfaced by the mirror.

    Attributes:
        id: Stable page identifier
        parent_id: Containing page ID (None for space root pages)
        space_key: Key of the space the page belongs to
        title: Page title
        content: Body in the requested representation (HTML view or ADF)
        status: Remote status; only "current" pages are ever surfaced
        author_name: Display name of the last editor
        created_at: Creation time, when the remote reports one
        updated_at: Last modification time, when the remote reports one
        url: Web UI link, when the remote reports one
        space_id: Numeric space ID (v2 API)
    """
    id: str
    parent_id: Optional[str]
    space_key: Optional[str]
    title: str
    content: str = ''
    status: str = STATUS_CURRENT
    author_name: str = 'Unknown'
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    url: Optional[str] = None
    space_id: Optional[str] = None

    @property
    def is_current(self) -> bool:
        return self.status == STATUS_CURRENT

    @classmethod
    def from_api(cls, data: Any, space_key: Optional[str] = None) -> 'RemotePage':
        """Normalize a page object from the REST API or an MCP tool.

        Args:
            data: Decoded page JSON
            space_key: Space the page was listed from, used when the payload
                does not say which space it belongs to

        Raises:
            MalformedResponseError: If data is not an object or has no id
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "page payload", f"expected an object, got {type(data).__name__}"
            )

        page_id = data.get('id')
        if page_id in (None, ''):
            raise MalformedResponseError("page payload", "missing 'id'")

        webui = _dig(data, '_links', 'webui')

        resolved_space_key = _first(data.get('spaceKey'), _dig(data, 'space', 'key'))
        if not resolved_space_key and isinstance(webui, str):
            match = _WEBUI_SPACE_RE.search(webui)
            if match:
                resolved_space_key = match.group(1)
        if not resolved_space_key:
            resolved_space_key = space_key

        parent_id = data.get('parentId')
        space_id = _first(data.get('spaceId'), _dig(data, 'space', 'id'))

        return cls(
            id=str(page_id),
            parent_id=str(parent_id) if parent_id not in (None, '') else None,
            space_key=resolved_space_key,
            title=str(_first(data.get('title')) or 'Untitled'),
            content=cls._extract_content(data),
            status=_first(data.get('status')) or STATUS_CURRENT,
            author_name=_first(
                _dig(data, 'version', 'by', 'displayName'),
                data.get('authorDisplayName'),
            ) or 'Unknown',
            created_at=parse_timestamp(data.get('createdAt')),
            updated_at=parse_timestamp(_first(
                _dig(data, 'version', 'createdAt'),
                data.get('updatedAt'),
                data.get('lastModified'),
            )),
            url=cls._extract_url(data),
            space_id=str(space_id) if space_id is not None else None,
        )

    @staticmethod
    def _extract_content(data: Dict[str, Any]) -> str:
        content = _first(
            _dig(data, 'body', 'view', 'value'),
            _dig(data, 'body', 'storage', 'value'),
            _dig(data, 'body', 'atlas_doc_format', 'value'),
            data.get('content') if isinstance(data.get('content'), str) else None,
        )
        return content or ''

    @staticmethod
    def _extract_url(data: Dict[str, Any]) -> Optional[str]:
        base = _dig(data, '_links', 'base')
        webui = _dig(data, '_links', 'webui')
        if base and webui:
            return f"{base}{webui}"
        return _first(webui, data.get('url'))


@dataclass(frozen=True)
class Space:
    """A Confluence space.

    Attributes:
        id: Numeric space ID (required by the v2 page listing endpoint)
        key: Short space key (e.g., "ENG")
        name: Display name
        type: Space type ("global", "personal", ...)
        status: Space status ("current", "archived")
    """
    id: str
    key: str
    name: str = ''
    type: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_api(cls, data: Any) -> 'Space':
        """Normalize a space object.

        Raises:
            MalformedResponseError: If data is not an object or lacks id/key
        """
        if not isinstance(data, dict):
            raise MalformedResponseError(
                "space payload", f"expected an object, got {type(data).__name__}"
            )
        if data.get('id') in (None, '') or not data.get('key'):
            raise MalformedResponseError("space payload", "missing 'id' or 'key'")

        return cls(
            id=str(data['id']),
            key=str(data['key']),
            name=data.get('name') or '',
            type=data.get('type'),
            status=data.get('status'),
        )
