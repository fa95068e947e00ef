"""Access resolution: who may see which Confluence pages."""

from .descendant_resolver import DescendantResolver
from .errors import ResolutionFailedError
from .fingerprint import profile_fingerprint
from .materialized_view import UserPageView
from .policy import AccessPolicyEvaluator
from .service import ConfluenceMirrorService, PageTreeNode

__all__ = [
    'AccessPolicyEvaluator',
    'ConfluenceMirrorService',
    'DescendantResolver',
    'PageTreeNode',
    'ResolutionFailedError',
    'UserPageView',
    'profile_fingerprint',
]
