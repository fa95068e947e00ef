"""Data models for remote pages and user access profiles."""

from src.models.access_profile import PageExclusion, PageGrant, UserAccessProfile
from src.models.remote_page import RemotePage, Space

__all__ = ['RemotePage', 'Space', 'PageGrant', 'PageExclusion', 'UserAccessProfile']
