"""Content fingerprint of an access profile.

Used as part of the per-user view cache key: identical grants and exclusions
always hash the same, and any change to them produces a new key, so a stale
view is never served after a profile edit.
"""

import hashlib
import json
from typing import Any, Dict

from src.models.access_profile import UserAccessProfile


def canonical_profile(profile: UserAccessProfile) -> Dict[str, Any]:
    """Order-independent representation of the profile's three collections."""
    return {
        'space_keys': sorted(set(profile.space_keys)),
        'page_grants': [
            {'page_id': page_id, 'include_descendants': flag}
            for page_id, flag in sorted({
                (grant.page_id, grant.include_descendants) for grant in profile.page_grants
            })
        ],
        'exclusions': [
            {'page_id': page_id, 'exclude_descendants': flag}
            for page_id, flag in sorted({
                (exclusion.page_id, exclusion.exclude_descendants)
                for exclusion in profile.exclusions
            })
        ],
    }


def profile_fingerprint(profile: UserAccessProfile) -> str:
    """SHA-256 of the canonical JSON form. The user ID is not included."""
    encoded = json.dumps(canonical_profile(profile), sort_keys=True, separators=(',', ':'))
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()
