"""Unit tests for cli.profile_loader module."""

import json

import pytest
from src.cli.errors import ProfileLoadError
from src.cli.profile_loader import ProfileLoader
from src.models.access_profile import PageExclusion, PageGrant


def write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestProfileLoader:
    """Test cases for ProfileLoader.load."""

    def test_yaml_profile(self, tmp_path):
        path = write(tmp_path, "profile.yaml", """
user_id: "42"
confluence_space_keys: [ENG, OPS]
confluence_page_assignments:
  - {page_id: "1001", include_descendants: true}
confluence_excluded_pages:
  - {page_id: "1005", exclude_descendants: false}
""")

        profile = ProfileLoader.load(path)

        assert profile.user_id == '42'
        assert profile.space_keys == ('ENG', 'OPS')
        assert profile.page_grants == (PageGrant('1001', True),)
        assert profile.exclusions == (PageExclusion('1005', False),)

    def test_json_profile(self, tmp_path):
        path = write(tmp_path, "profile.json", json.dumps({
            'id': 7,
            'confluence_page_assignments': [{'page_id': 10, 'include_descendants': False}],
        }))

        profile = ProfileLoader.load(path)

        assert profile.user_id == '7'
        assert profile.page_grants == (PageGrant('10', False),)

    def test_user_id_defaults_to_file_name(self, tmp_path):
        path = write(tmp_path, "bob.yaml", "confluence_space_keys: ENG\n")

        profile = ProfileLoader.load(path)

        assert profile.user_id == 'bob'
        assert profile.space_keys == ('ENG',)

    def test_empty_file_has_no_access(self, tmp_path):
        profile = ProfileLoader.load(write(tmp_path, "empty.yaml", ""))

        assert not profile.has_access()

    def test_malformed_fields_degrade(self, tmp_path):
        """Bad grant data is dropped rather than rejected."""
        path = write(tmp_path, "p.yaml", "confluence_space_keys: 12\nconfluence_page_assignments: [{page_id: '1'}]\n")

        profile = ProfileLoader.load(path)

        assert profile.space_keys == ()
        assert profile.page_grants == ()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProfileLoadError) as exc_info:
            ProfileLoader.load(str(tmp_path / "missing.yaml"))

        assert exc_info.value.reason == 'File not found'

    def test_invalid_yaml(self, tmp_path):
        path = write(tmp_path, "bad.yaml", "confluence_space_keys: [ENG\n")

        with pytest.raises(ProfileLoadError) as exc_info:
            ProfileLoader.load(path)

        assert 'Invalid YAML syntax' in str(exc_info.value)

    def test_non_mapping(self, tmp_path):
        path = write(tmp_path, "list.yaml", "- ENG\n- OPS\n")

        with pytest.raises(ProfileLoadError) as exc_info:
            ProfileLoader.load(path)

        assert 'must be a mapping' in str(exc_info.value)
