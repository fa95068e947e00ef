"""Test helper modules for the Confluence mirror.

- fake_gateway: In-memory ContentGateway with failure injection and call counts
"""

from .fake_gateway import FakeGateway

__all__ = ['FakeGateway']
