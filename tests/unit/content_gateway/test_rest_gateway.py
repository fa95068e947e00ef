"""Unit tests for content_gateway.rest_gateway module."""

import logging

import pytest
from unittest.mock import Mock
from src.access_control.policy import AccessPolicyEvaluator
from src.cache import ResultCache
from src.config.models import MirrorConfig
from src.confluence_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    MalformedResponseError,
    PageNotFoundError,
)
from src.content_gateway.rest_gateway import RestContentGateway
from src.models.access_profile import UserAccessProfile
from tests.fixtures.sample_pages import (
    SAMPLE_PAGE_V2,
    SAMPLE_SEARCH_RESPONSE,
    SAMPLE_SPACES_RESPONSE,
    listing,
    page_payload,
    space_payload,
)


def make_gateway(api=None, config=None):
    api = api or Mock()
    return RestContentGateway(api, ResultCache(), config or MirrorConfig()), api


def children_api(tree, failing=()):
    """Build a get_page_children side effect from {parent_id: [child payloads]}."""
    def _get_children(page_id, cursor=None, limit=250):
        if page_id in failing:
            raise APIUnreachableError("https://x")
        return listing(tree.get(page_id, []))
    return _get_children


class TestFetchPage:
    """Test cases for RestContentGateway.fetch_page."""

    def test_markdown_requests_view_format(self):
        """markdown should map to body-format=view."""
        gateway, api = make_gateway()
        api.get_page.return_value = SAMPLE_PAGE_V2

        page = gateway.fetch_page('123456', 'markdown')

        assert page.id == '123456'
        assert page.title == 'Runbook'
        api.get_page.assert_called_once_with('123456', body_format='view')

    def test_adf_requests_atlas_doc_format(self):
        """adf should map to body-format=atlas_doc_format."""
        gateway, api = make_gateway()
        api.get_page.return_value = SAMPLE_PAGE_V2

        gateway.fetch_page('123456', 'adf')

        api.get_page.assert_called_once_with('123456', body_format='atlas_doc_format')

    def test_page_is_cached_per_format(self):
        """Repeated fetches should hit the cache; formats are cached separately."""
        gateway, api = make_gateway()
        api.get_page.return_value = SAMPLE_PAGE_V2

        gateway.fetch_page('123456', 'markdown')
        gateway.fetch_page('123456', 'markdown')
        gateway.fetch_page('123456', 'adf')

        assert api.get_page.call_count == 2

    def test_not_found_returns_none_with_warning(self, caplog):
        """A missing page should log a warning and return None."""
        gateway, api = make_gateway()
        api.get_page.side_effect = PageNotFoundError('999')

        with caplog.at_level(logging.WARNING, logger="src"):
            assert gateway.fetch_page('999') is None

        assert '999' in caplog.text

    @pytest.mark.parametrize('error', [
        APIUnreachableError('https://x'),
        APIAccessError(),
        InvalidCredentialsError('u', 'https://x'),
        MalformedResponseError('get_page'),
        ValueError("Invalid page_id format"),
    ])
    def test_failures_return_none_and_are_not_cached(self, error):
        """Transport, auth and malformed-body failures soft-fail and are retried next time."""
        gateway, api = make_gateway()
        api.get_page.side_effect = [error, SAMPLE_PAGE_V2]

        assert gateway.fetch_page('123456') is None
        assert gateway.fetch_page('123456').id == '123456'

    def test_space_key_filled_from_space_id(self):
        gateway, api = make_gateway()
        api.get_page.return_value = {"id": "5", "title": "Bare", "spaceId": "98304"}
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE

        assert gateway.fetch_page('5').space_key == 'ENG'

    def test_body_without_id_returns_none(self):
        gateway, api = make_gateway()
        api.get_page.return_value = {'title': 'no id'}

        assert gateway.fetch_page('1') is None


class TestFetchSpaces:
    """Test cases for RestContentGateway.fetch_spaces."""

    def test_drains_cursors(self):
        """Every cursor page should be fetched."""
        gateway, api = make_gateway()
        api.get_spaces.side_effect = [
            listing([space_payload('1', 'ENG')], next_cursor='c2', path='/wiki/api/v2/spaces'),
            listing([space_payload('2', 'OPS')]),
        ]

        spaces = gateway.fetch_spaces()

        assert [s.key for s in spaces] == ['ENG', 'OPS']
        assert api.get_spaces.call_args_list[0].kwargs['cursor'] is None
        assert api.get_spaces.call_args_list[1].kwargs['cursor'] == 'c2'

    def test_skips_malformed_spaces(self):
        gateway, api = make_gateway()
        api.get_spaces.return_value = listing([space_payload('1', 'ENG'), {'name': 'broken'}])

        assert [s.key for s in gateway.fetch_spaces()] == ['ENG']

    def test_failure_returns_empty_and_is_not_cached(self):
        gateway, api = make_gateway()
        api.get_spaces.side_effect = [APIUnreachableError('https://x'), SAMPLE_SPACES_RESPONSE]

        assert gateway.fetch_spaces() == []
        assert len(gateway.fetch_spaces()) == 2

    def test_repeated_cursor_stops(self):
        """A server repeating the same cursor should not loop forever."""
        gateway, api = make_gateway()
        api.get_spaces.return_value = listing([space_payload('1', 'ENG')], next_cursor='same')

        gateway.fetch_spaces()

        assert api.get_spaces.call_count == 2


class TestFetchPagesInSpace:
    """Test cases for RestContentGateway.fetch_pages_in_space."""

    def test_resolves_space_and_drains_pages(self):
        """The space key is resolved to an ID and every listing page is drained."""
        gateway, api = make_gateway()
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE
        api.get_space_pages.side_effect = [
            listing([page_payload('1', space_key=None), page_payload('2', space_key=None)], next_cursor='n2'),
            listing([page_payload('3', space_key=None)]),
        ]

        pages = gateway.fetch_pages_in_space('ENG')

        assert [p.id for p in pages] == ['1', '2', '3']
        assert all(p.space_key == 'ENG' for p in pages)
        first_call, second_call = api.get_space_pages.call_args_list
        assert first_call.args == ('98304', {'status': 'current', 'limit': 250})
        assert second_call.args == ('98304', {'status': 'current', 'limit': 250, 'cursor': 'n2'})

    def test_result_and_space_id_are_cached(self):
        gateway, api = make_gateway()
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE
        api.get_space_pages.return_value = listing([page_payload('1')])

        gateway.fetch_pages_in_space('ENG')
        gateway.fetch_pages_in_space('ENG')

        assert api.get_spaces.call_count == 1
        assert api.get_space_pages.call_count == 1

    def test_options_override_defaults(self):
        """Options should override the default listing parameters."""
        gateway, api = make_gateway(config=MirrorConfig(page_limit=50))
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE
        api.get_space_pages.return_value = listing([])

        gateway.fetch_pages_in_space('OPS', {'status': 'archived'})

        assert api.get_space_pages.call_args.args == ('98305', {'status': 'archived', 'limit': 50})

    def test_unknown_space_returns_empty_with_warning(self, caplog):
        gateway, api = make_gateway()
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE

        with caplog.at_level(logging.WARNING, logger="src"):
            assert gateway.fetch_pages_in_space('NOPE') == []

        assert "NOPE" in caplog.text
        api.get_space_pages.assert_not_called()

    def test_partial_scan_is_returned_but_not_cached(self):
        """A failure mid-scan returns what was gathered; the next call rescans."""
        gateway, api = make_gateway()
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE
        api.get_space_pages.side_effect = [
            listing([page_payload('1')], next_cursor='n2'),
            APIUnreachableError('https://x'),
            listing([page_payload('1'), page_payload('2')]),
        ]

        assert [p.id for p in gateway.fetch_pages_in_space('ENG')] == ['1']
        assert [p.id for p in gateway.fetch_pages_in_space('ENG')] == ['1', '2']

    def test_space_listing_failure_returns_empty(self):
        gateway, api = make_gateway()
        api.get_spaces.side_effect = APIUnreachableError('https://x')

        assert gateway.fetch_pages_in_space('ENG') == []

    def test_clear_space_cache_forces_rescan(self):
        """clear_space_cache should drop the listing, option variants and the space ID."""
        gateway, api = make_gateway()
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE
        api.get_space_pages.return_value = listing([page_payload('1')])

        gateway.fetch_pages_in_space('ENG')
        gateway.fetch_pages_in_space('ENG', {'status': 'archived'})
        gateway.clear_space_cache('ENG')
        gateway.fetch_pages_in_space('ENG')
        gateway.fetch_pages_in_space('ENG', {'status': 'archived'})

        assert api.get_space_pages.call_count == 4


class TestFetchPageChildren:
    """Test cases for the recursive descendant walk."""

    def test_depth_first_pre_order(self):
        """Descendants are returned depth-first, each parent before its children."""
        tree = {
            '10': [page_payload('11'), page_payload('12')],
            '11': [page_payload('111')],
            '111': [page_payload('1111')],
        }
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api(tree)

        pages = gateway.fetch_page_children('10')

        assert [p.id for p in pages] == ['11', '111', '1111', '12']
        assert [p.parent_id for p in pages] == ['10', '11', '111', '10']

    def test_children_listing_is_paginated(self):
        gateway, api = make_gateway()
        api.get_page_children.side_effect = [
            listing([page_payload('11')], next_cursor='c2'),
            listing([page_payload('12')]),
            listing([]),
            listing([]),
        ]

        assert [p.id for p in gateway.fetch_page_children('10')] == ['11', '12']

    def test_cycle_terminates(self):
        """A cyclic parent graph should not loop; each page appears once."""
        tree = {
            '10': [page_payload('11')],
            '11': [page_payload('12')],
            '12': [page_payload('10'), page_payload('11')],
        }
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api(tree)

        pages = gateway.fetch_page_children('10')

        assert [p.id for p in pages] == ['11', '12']

    def test_space_key_resolved_from_space_id(self):
        """v2 children carry only spaceId; the key comes from the space listing."""
        tree = {
            '10': [{"id": "11", "status": "current", "title": "A", "parentId": "10", "spaceId": "98304"}],
            '11': [{"id": "111", "status": "current", "title": "B", "spaceId": "98304"}],
        }
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api(tree)
        api.get_spaces.return_value = SAMPLE_SPACES_RESPONSE

        pages = gateway.fetch_page_children('10')

        assert [p.space_key for p in pages] == ['ENG', 'ENG']
        assert api.get_spaces.call_count == 1
        profile = UserAccessProfile(space_keys=('ENG',))
        assert AccessPolicyEvaluator(gateway).can_view(profile, pages[1])

    def test_space_listing_failure_leaves_space_key_unset(self):
        tree = {'10': [{"id": "11", "status": "current", "title": "A", "spaceId": "98304"}]}
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api(tree)
        api.get_spaces.side_effect = APIUnreachableError('https://x')

        pages = gateway.fetch_page_children('10')

        assert [(p.id, p.space_key, p.space_id) for p in pages] == [('11', None, '98304')]

    def test_children_without_id_are_skipped(self):
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api({'10': [{'title': 'ghost'}, page_payload('11')]})

        assert [p.id for p in gateway.fetch_page_children('10')] == ['11']

    def test_subtree_failure_skips_only_that_subtree(self):
        """A failure below one node keeps its siblings and is not cached."""
        tree = {
            '10': [page_payload('11'), page_payload('12')],
            '11': [page_payload('111')],
            '12': [page_payload('121')],
        }
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api(tree, failing={'11'})

        pages = gateway.fetch_page_children('10')

        assert [p.id for p in pages] == ['11', '12', '121']

        api.get_page_children.side_effect = children_api(tree)
        assert [p.id for p in gateway.fetch_page_children('10')] == ['11', '111', '12', '121']

    def test_complete_walk_is_cached(self):
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api({'10': [page_payload('11')]})

        gateway.fetch_page_children('10')
        calls = api.get_page_children.call_count
        gateway.fetch_page_children('10')

        assert api.get_page_children.call_count == calls

    def test_root_failure_returns_empty(self):
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api({}, failing={'10'})

        assert gateway.fetch_page_children('10') == []

    def test_clear_page_cache_drops_walk(self):
        gateway, api = make_gateway()
        api.get_page_children.side_effect = children_api({'10': [page_payload('11')]})

        gateway.fetch_page_children('10')
        gateway.clear_page_cache('10')
        gateway.fetch_page_children('10')

        # Two walks of two listings each (10 and 11)
        assert api.get_page_children.call_count == 4


class TestSearch:
    """Test cases for RestContentGateway.search."""

    def test_results_are_normalized(self):
        """Search hits should be unwrapped from their content objects."""
        gateway, api = make_gateway()
        api.search_by_cql.return_value = SAMPLE_SEARCH_RESPONSE

        pages = gateway.search('type=page')

        assert [(p.id, p.space_key) for p in pages] == [('123456', 'ENG'), ('123457', 'OPS')]
        api.search_by_cql.assert_called_once_with('type=page', limit=100)

    def test_failure_returns_empty(self):
        gateway, api = make_gateway()
        api.search_by_cql.side_effect = APIAccessError()

        assert gateway.search('type=page') == []

    def test_results_must_be_a_list(self):
        gateway, api = make_gateway()
        api.search_by_cql.return_value = {'results': 'nope'}

        assert gateway.search('type=page') == []
