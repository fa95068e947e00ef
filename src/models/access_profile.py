"""Per-user Confluence access profile.

A profile is the triple of space grants, page grants and page exclusions
stored against a user. Stored data is read leniently: a field with the wrong
shape degrades to empty (no access through that field) instead of raising,
so bad stored data can never break page listing for everyone else.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# Attribute names used by the host application's user records
SPACE_KEYS_FIELD = 'confluence_space_keys'
PAGE_ASSIGNMENTS_FIELD = 'confluence_page_assignments'
EXCLUDED_PAGES_FIELD = 'confluence_excluded_pages'


@dataclass(frozen=True)
class PageGrant:
    """Grants visibility to one page and optionally its whole subtree."""
    page_id: str
    include_descendants: bool = False


@dataclass(frozen=True)
class PageExclusion:
    """Revokes visibility from one page and optionally its whole subtree."""
    page_id: str
    exclude_descendants: bool = False


@dataclass(frozen=True)
class UserAccessProfile:
    """Space grants, page grants and exclusions for one user.

    Attributes:
        user_id: Identifier of the user the profile belongs to
        space_keys: Spaces the user may see in full (modulo exclusions)
        page_grants: Explicitly granted pages
        exclusions: Explicitly excluded pages; these always win over grants
    """
    user_id: Optional[str] = None
    space_keys: Tuple[str, ...] = field(default_factory=tuple)
    page_grants: Tuple[PageGrant, ...] = field(default_factory=tuple)
    exclusions: Tuple[PageExclusion, ...] = field(default_factory=tuple)

    def has_access(self) -> bool:
        """True if the user has any grant. Exclusions alone grant nothing."""
        return bool(self.space_keys) or bool(self.page_grants)

    def is_excluded(self, page_id: Any) -> bool:
        page_id = str(page_id)
        return any(exclusion.page_id == page_id for exclusion in self.exclusions)

    def is_granted(self, page_id: Any) -> bool:
        page_id = str(page_id)
        return any(grant.page_id == page_id for grant in self.page_grants)

    def excluded_page_ids(self) -> List[str]:
        return list(dict.fromkeys(exclusion.page_id for exclusion in self.exclusions))

    @classmethod
    def from_record(cls, record: Mapping[str, Any], user_id: Any = None) -> 'UserAccessProfile':
        """Build a profile from a stored user record (mapping of attribute to value)."""
        if not isinstance(record, Mapping):
            logger.warning(
                f"Invalid Confluence access record for user {user_id}: "
                f"expected a mapping, got {type(record).__name__}"
            )
            return cls(user_id=_user_id(user_id))

        return cls.from_raw(
            user_id=user_id if user_id is not None else record.get('user_id', record.get('id')),
            space_keys=record.get(SPACE_KEYS_FIELD),
            page_assignments=record.get(PAGE_ASSIGNMENTS_FIELD),
            excluded_pages=record.get(EXCLUDED_PAGES_FIELD),
        )

    @classmethod
    def from_raw(
        cls,
        user_id: Any = None,
        space_keys: Any = None,
        page_assignments: Any = None,
        excluded_pages: Any = None,
    ) -> 'UserAccessProfile':
        """Build a profile from raw stored values. Never raises.

        Args:
            user_id: User identifier (used for logging and cache keys)
            space_keys: List of space keys, or a single key string
            page_assignments: List of {"page_id": str, "include_descendants": bool}
            excluded_pages: List of {"page_id": str, "exclude_descendants": bool}
        """
        uid = _user_id(user_id)
        return cls(
            user_id=uid,
            space_keys=_parse_space_keys(space_keys, uid),
            page_grants=tuple(
                PageGrant(page_id, flag)
                for page_id, flag in _parse_page_entries(
                    page_assignments, 'include_descendants', PAGE_ASSIGNMENTS_FIELD, uid
                )
            ),
            exclusions=tuple(
                PageExclusion(page_id, flag)
                for page_id, flag in _parse_page_entries(
                    excluded_pages, 'exclude_descendants', EXCLUDED_PAGES_FIELD, uid
                )
            ),
        )


def _user_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _parse_space_keys(value: Any, user_id: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ()

    # A single key was stored by older versions of the host application
    if isinstance(value, str):
        return (value,)

    if not isinstance(value, (list, tuple)):
        logger.warning(
            f"Invalid {SPACE_KEYS_FIELD} format for user {user_id}: "
            f"{type(value).__name__}"
        )
        return ()

    keys = []
    for key in value:
        if not key:
            continue
        if not isinstance(key, str):
            logger.warning(
                f"Dropping non-string space key for user {user_id}: {key!r}"
            )
            continue
        keys.append(key)
    return tuple(dict.fromkeys(keys))


def _parse_page_id(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_page_entries(
    value: Any,
    flag_name: str,
    field_name: str,
    user_id: Optional[str],
) -> List[Tuple[str, bool]]:
    """Parse a list of {page_id, <flag_name>} entries, dropping malformed ones."""
    if not value:
        return []

    if not isinstance(value, (list, tuple)):
        logger.warning(
            f"Invalid {field_name} format for user {user_id}: {type(value).__name__}"
        )
        return []

    entries = []
    for entry in value:
        page_id = _parse_page_id(entry.get('page_id')) if isinstance(entry, Mapping) else None
        flag = entry.get(flag_name) if isinstance(entry, Mapping) else None
        if page_id is None or not isinstance(flag, bool):
            logger.warning(f"Dropping malformed {field_name} entry for user {user_id}: {entry!r}")
            continue
        entries.append((page_id, flag))
    return entries
