"""Cache key builders.

All keys live under the ``confluence:`` namespace so a shared cache can be
inspected or flushed per concern. Keys that would otherwise embed arbitrary
user text (CQL queries, listing options) embed a short digest instead.
"""

import hashlib
import json
from typing import Any, Mapping, Optional

NAMESPACE = 'confluence'


def _digest(value: Any) -> str:
    encoded = json.dumps(value, sort_keys=True, separators=(',', ':'), default=str)
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()[:16]


def page(page_id: str, content_format: str) -> str:
    return f"{NAMESPACE}:page:{page_id}:{content_format}"


def page_children(page_id: str) -> str:
    return f"{NAMESPACE}:page_children:{page_id}"


def spaces() -> str:
    return f"{NAMESPACE}:spaces"


def space_id(space_key: str) -> str:
    return f"{NAMESPACE}:space_id:{space_key}"


def space_pages(space_key: str, options: Optional[Mapping[str, Any]] = None) -> str:
    """Key for a space's page listing; non-default options get their own entry."""
    base = f"{NAMESPACE}:space_pages:{space_key}"
    if options:
        return f"{base}:{_digest(dict(options))}"
    return base


def search(cql: str) -> str:
    return f"{NAMESPACE}:search:{_digest(cql)}"


def user_pages_prefix(user_id: Optional[str]) -> str:
    return f"{NAMESPACE}:user_pages:{user_id if user_id is not None else 'guest'}:"


def user_pages(user_id: Optional[str], fingerprint: str) -> str:
    return f"{user_pages_prefix(user_id)}{fingerprint}"
