"""Authentication module for loading Confluence credentials.

This module loads Confluence Cloud credentials from environment variables
using python-dotenv. Basic auth (email + API token) and bearer auth
(personal access token) are both supported.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

AUTH_TYPES = ('basic', 'bearer')


class Credentials(NamedTuple):
    """Confluence API credentials."""
    url: str
    user: Optional[str]
    api_token: str
    auth_type: str = 'basic'


class Authenticator:
    """Loads and validates Confluence credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged.

    Environment variables:
        CONFLUENCE_URL: Confluence site URL (e.g., https://yourinstance.atlassian.net/wiki)
        CONFLUENCE_EMAIL: Account email for basic auth (CONFLUENCE_USER is accepted too)
        CONFLUENCE_API_TOKEN: API token (basic) or personal access token (bearer)
        CONFLUENCE_AUTH_TYPE: "basic" (default) or "bearer"

    Raises:
        InvalidCredentialsError: If any required credential is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self):
        """Initialize the authenticator by loading environment variables from .env file."""
        load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get Confluence credentials from environment variables.

        Returns:
            Credentials: A named tuple containing url, user, api_token and auth_type

        Raises:
            InvalidCredentialsError: If any required credential is missing
        """
        url = os.getenv('CONFLUENCE_URL')
        user = os.getenv('CONFLUENCE_EMAIL') or os.getenv('CONFLUENCE_USER')
        api_token = os.getenv('CONFLUENCE_API_TOKEN')
        auth_type = (os.getenv('CONFLUENCE_AUTH_TYPE') or 'basic').strip().lower()

        if auth_type not in AUTH_TYPES:
            auth_type = 'basic'

        # Bearer tokens carry the identity, so the email is only needed for basic auth
        if not url or not api_token or (auth_type == 'basic' and not user):
            raise InvalidCredentialsError(
                user=user if user else "unknown",
                endpoint=url if url else "unknown",
            )

        return Credentials(
            url=url.rstrip('/'),
            user=user,
            api_token=api_token,  # type: ignore[arg-type]
            auth_type=auth_type,
        )
