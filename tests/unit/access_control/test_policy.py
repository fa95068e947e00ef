"""Unit tests for access_control.policy single-page decisions."""

import pytest
from src.access_control.policy import AccessPolicyEvaluator
from src.models.access_profile import PageExclusion, PageGrant, UserAccessProfile
from src.models.remote_page import RemotePage
from tests.helpers import FakeGateway


def page(page_id, space_key='ENG', parent_id=None):
    return RemotePage(id=page_id, parent_id=parent_id, space_key=space_key, title=f"Page {page_id}")


@pytest.fixture
def gateway():
    """ENG: 10 -> (11 -> 111), 12; OPS: 20."""
    gw = FakeGateway()
    gw.add_page('10')
    gw.add_page('11', parent_id='10')
    gw.add_page('111', parent_id='11')
    gw.add_page('12', parent_id='10')
    gw.add_page('20', space_key='OPS')
    return gw


@pytest.fixture
def evaluator(gateway):
    return AccessPolicyEvaluator(gateway)


class TestCanView:
    """Test cases for AccessPolicyEvaluator.can_view."""

    def test_empty_profile_sees_nothing(self, evaluator):
        profile = UserAccessProfile(user_id='u1')

        assert not evaluator.can_view(profile, page('10'))
        assert not evaluator.can_view(profile, page('20', 'OPS'))

    def test_super_admin_sees_everything(self, evaluator):
        """Super admins bypass every rule, exclusions included."""
        profile = UserAccessProfile(exclusions=(PageExclusion('10', True),))

        assert evaluator.can_view(profile, page('10'), is_super_admin=True)
        assert evaluator.can_view(profile, page('111'), is_super_admin=True)

    def test_space_grant(self, evaluator):
        profile = UserAccessProfile(space_keys=('ENG',))

        assert evaluator.can_view(profile, page('12'))
        assert not evaluator.can_view(profile, page('20', 'OPS'))

    def test_direct_page_grant(self, evaluator):
        profile = UserAccessProfile(page_grants=(PageGrant('20'),))

        assert evaluator.can_view(profile, page('20', 'OPS'))

    def test_page_grant_without_descendants_covers_only_the_page(self, evaluator):
        profile = UserAccessProfile(page_grants=(PageGrant('10', False),))

        assert evaluator.can_view(profile, page('10'))
        assert not evaluator.can_view(profile, page('11', parent_id='10'))

    def test_descendant_grant_covers_whole_subtree(self, evaluator):
        """include_descendants reaches grandchildren, not just children."""
        profile = UserAccessProfile(page_grants=(PageGrant('10', True),))

        assert evaluator.can_view(profile, page('111', parent_id='11'))
        assert not evaluator.can_view(profile, page('20', 'OPS'))

    def test_direct_exclusion_beats_page_grant(self, evaluator):
        """A page both granted and excluded is hidden."""
        profile = UserAccessProfile(
            page_grants=(PageGrant('20'),),
            exclusions=(PageExclusion('20'),),
        )

        assert not evaluator.can_view(profile, page('20', 'OPS'))

    def test_direct_exclusion_beats_space_grant(self, evaluator):
        profile = UserAccessProfile(space_keys=('ENG',), exclusions=(PageExclusion('12'),))

        assert not evaluator.can_view(profile, page('12', parent_id='10'))
        assert evaluator.can_view(profile, page('11', parent_id='10'))

    def test_exclusion_without_descendants_keeps_children(self, evaluator):
        profile = UserAccessProfile(space_keys=('ENG',), exclusions=(PageExclusion('10', False),))

        assert not evaluator.can_view(profile, page('10'))
        assert evaluator.can_view(profile, page('11', parent_id='10'))

    def test_descendant_exclusion_beats_space_and_descendant_grants(self, evaluator):
        """A subtree exclusion hides the whole subtree whatever grants cover it."""
        profile = UserAccessProfile(
            space_keys=('ENG',),
            page_grants=(PageGrant('10', True), PageGrant('111')),
            exclusions=(PageExclusion('11', True),),
        )

        assert not evaluator.can_view(profile, page('111', parent_id='11'))
        assert evaluator.can_view(profile, page('12', parent_id='10'))

    def test_page_without_space_key_needs_page_grant(self, evaluator):
        profile = UserAccessProfile(space_keys=('ENG',))

        assert not evaluator.can_view(profile, page('99', space_key=None))

    def test_grant_ids_compare_as_strings(self, evaluator):
        profile = UserAccessProfile.from_raw(page_assignments=[{'page_id': 20, 'include_descendants': False}])

        assert evaluator.can_view(profile, page('20', 'OPS'))


class TestCanViewAny:
    """Test cases for AccessPolicyEvaluator.can_view_any."""

    def test_requires_a_grant(self, evaluator):
        assert evaluator.can_view_any(UserAccessProfile(space_keys=('ENG',)))
        assert not evaluator.can_view_any(UserAccessProfile(exclusions=(PageExclusion('1'),)))

    def test_super_admin(self, evaluator):
        assert evaluator.can_view_any(UserAccessProfile(), is_super_admin=True)
