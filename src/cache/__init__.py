"""Result caching shared by the content gateway and per-user page views."""

from . import keys
from .result_cache import CacheEntry, ResultCache

__all__ = ['CacheEntry', 'ResultCache', 'keys']
