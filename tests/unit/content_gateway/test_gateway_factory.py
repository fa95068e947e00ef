"""Unit tests for content_gateway.factory module."""

import logging

from unittest.mock import Mock, patch
from src.cache import ResultCache
from src.config.models import MirrorConfig
from src.content_gateway import McpContentGateway, RestContentGateway, create_gateway


class TestCreateGateway:
    """Test cases for create_gateway."""

    @patch('src.content_gateway.factory.APIWrapper')
    def test_direct_connection_uses_rest(self, mock_api_cls):
        """The direct connection builds an APIWrapper with the configured timeout."""
        authenticator = Mock()
        config = MirrorConfig(request_timeout=12)

        gateway = create_gateway(config, ResultCache(), authenticator=authenticator)

        assert isinstance(gateway, RestContentGateway)
        assert gateway.backend_name == 'direct'
        mock_api_cls.assert_called_once_with(authenticator, timeout=12)

    @patch('src.content_gateway.factory.Authenticator')
    @patch('src.content_gateway.factory.APIWrapper')
    def test_default_authenticator(self, mock_api_cls, mock_auth_cls):
        create_gateway(MirrorConfig(), ResultCache())

        mock_auth_cls.assert_called_once_with()
        mock_api_cls.assert_called_once_with(mock_auth_cls.return_value, timeout=30)

    def test_mcp_connection_with_tool_client(self):
        gateway = create_gateway(
            MirrorConfig(connection='mcp', cloud_id='c1'),
            ResultCache(),
            tool_client=Mock(),
        )

        assert isinstance(gateway, McpContentGateway)
        assert gateway.backend_name == 'mcp'

    @patch('src.content_gateway.factory.APIWrapper')
    def test_mcp_without_tool_client_falls_back(self, mock_api_cls, caplog):
        """Without a tool client the REST backend is used and a warning logged."""
        with caplog.at_level(logging.WARNING, logger="src"):
            gateway = create_gateway(MirrorConfig(connection='mcp'), ResultCache(), authenticator=Mock())

        assert isinstance(gateway, RestContentGateway)
        assert 'falling back' in caplog.text
