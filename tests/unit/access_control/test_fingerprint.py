"""Unit tests for access_control.fingerprint module."""

from src.access_control.fingerprint import canonical_profile, profile_fingerprint
from src.models.access_profile import PageExclusion, PageGrant, UserAccessProfile

BASE = UserAccessProfile(
    user_id='u1',
    space_keys=('ENG', 'OPS'),
    page_grants=(PageGrant('10', True), PageGrant('20')),
    exclusions=(PageExclusion('42'),),
)


class TestProfileFingerprint:
    """Test cases for profile_fingerprint."""

    def test_is_sha256_hex(self):
        fingerprint = profile_fingerprint(BASE)

        assert len(fingerprint) == 64
        assert int(fingerprint, 16) >= 0

    def test_order_and_duplicates_do_not_matter(self):
        reordered = UserAccessProfile(
            user_id='u1',
            space_keys=('OPS', 'ENG', 'ENG'),
            page_grants=(PageGrant('20'), PageGrant('10', True)),
            exclusions=(PageExclusion('42'), PageExclusion('42')),
        )

        assert profile_fingerprint(reordered) == profile_fingerprint(BASE)

    def test_user_id_is_not_part_of_fingerprint(self):
        other_user = UserAccessProfile(
            user_id='u2',
            space_keys=BASE.space_keys,
            page_grants=BASE.page_grants,
            exclusions=BASE.exclusions,
        )

        assert profile_fingerprint(other_user) == profile_fingerprint(BASE)

    def test_each_collection_changes_fingerprint(self):
        """Changing any one collection, or one flag, yields a new fingerprint."""
        variants = [
            UserAccessProfile(space_keys=('ENG',), page_grants=BASE.page_grants, exclusions=BASE.exclusions),
            UserAccessProfile(space_keys=BASE.space_keys, page_grants=(PageGrant('10', True),), exclusions=BASE.exclusions),
            UserAccessProfile(space_keys=BASE.space_keys, page_grants=BASE.page_grants, exclusions=()),
            UserAccessProfile(
                space_keys=BASE.space_keys,
                page_grants=(PageGrant('10', False), PageGrant('20')),
                exclusions=BASE.exclusions,
            ),
            UserAccessProfile(
                space_keys=BASE.space_keys,
                page_grants=BASE.page_grants,
                exclusions=(PageExclusion('42', True),),
            ),
        ]

        fingerprints = {profile_fingerprint(v) for v in variants}

        assert profile_fingerprint(BASE) not in fingerprints
        assert len(fingerprints) == len(variants)

    def test_canonical_form(self):
        assert canonical_profile(BASE) == {
            'space_keys': ['ENG', 'OPS'],
            'page_grants': [
                {'page_id': '10', 'include_descendants': True},
                {'page_id': '20', 'include_descendants': False},
            ],
            'exclusions': [{'page_id': '42', 'exclude_descendants': False}],
        }
