"""Unit tests for cache.keys module."""

from src.cache import keys


class TestCacheKeys:
    """Test cases for cache key builders."""

    def test_keys_are_namespaced(self):
        assert keys.page('1', 'markdown') == 'confluence:page:1:markdown'
        assert keys.page_children('1') == 'confluence:page_children:1'
        assert keys.spaces() == 'confluence:spaces'
        assert keys.space_id('ENG') == 'confluence:space_id:ENG'
        assert keys.space_pages('ENG') == 'confluence:space_pages:ENG'

    def test_page_key_depends_on_format(self):
        assert keys.page('1', 'markdown') != keys.page('1', 'adf')

    def test_space_pages_options_get_own_key(self):
        """Non-default options should produce a distinct key under the space's prefix."""
        base = keys.space_pages('ENG')
        with_options = keys.space_pages('ENG', {'status': 'archived'})

        assert with_options != base
        assert with_options.startswith(f"{base}:")
        assert keys.space_pages('ENG', {'a': 1, 'b': 2}) == keys.space_pages('ENG', {'b': 2, 'a': 1})

    def test_search_key_hides_query_text(self):
        """CQL text should be digested, and equal queries share a key."""
        key = keys.search('title ~ "secret project"')

        assert 'secret' not in key
        assert key == keys.search('title ~ "secret project"')
        assert key != keys.search('title ~ "other"')

    def test_user_pages_keys(self):
        """User view keys embed user ID and fingerprint under a per-user prefix."""
        key = keys.user_pages('7', 'abc')

        assert key == 'confluence:user_pages:7:abc'
        assert key.startswith(keys.user_pages_prefix('7'))
        assert not key.startswith(keys.user_pages_prefix('70'))
        assert keys.user_pages_prefix(None) == 'confluence:user_pages:guest:'
