"""Access profile file loading.

Profile files hold the same fields the host application stores against a
user record, so a profile can be exported from the host and checked here:

    user_id: "42"
    confluence_space_keys: [ENG, OPS]
    confluence_page_assignments:
      - {page_id: "1001", include_descendants: true}
    confluence_excluded_pages:
      - {page_id: "1005", exclude_descendants: false}

JSON files work as well, since JSON is valid YAML.
"""

from pathlib import Path

import yaml

from src.models.access_profile import UserAccessProfile

from .errors import ProfileLoadError


class ProfileLoader:
    """Reads UserAccessProfile objects from YAML or JSON files.

    Only the file itself must be well formed. Malformed grant or exclusion
    fields degrade to empty through UserAccessProfile.from_record.
    """

    @classmethod
    def load(cls, profile_path: str) -> UserAccessProfile:
        """Load an access profile.

        When the file does not name a user, the file name (without extension)
        is used as the user ID.

        Raises:
            ProfileLoadError: If the file cannot be read or is not a mapping
        """
        try:
            with open(profile_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ProfileLoadError(profile_path, 'File not found')
        except PermissionError:
            raise ProfileLoadError(profile_path, 'Permission denied')
        except OSError as e:
            raise ProfileLoadError(profile_path, str(e))

        try:
            record = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ProfileLoadError(profile_path, f"Invalid YAML syntax: {str(e)}")

        if record is None:
            record = {}
        if not isinstance(record, dict):
            raise ProfileLoadError(
                profile_path,
                f"Profile must be a mapping, got {type(record).__name__}",
            )

        user_id = record.get('user_id', record.get('id'))
        if user_id is None:
            user_id = Path(profile_path).stem
        return UserAccessProfile.from_record(record, user_id=user_id)
