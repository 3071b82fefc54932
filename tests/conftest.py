"""Pytest configuration and fixtures for graph-oauth tests."""

from unittest.mock import MagicMock

import httpx
import pytest

from graph_oauth.oauth.serializer import OAuthSerializer
from graph_oauth.oauth.tokens import MsalToken


@pytest.fixture
def oauth() -> OAuthSerializer:
    """Create a serializer with a client id, redirect URI and the common tenant."""
    serializer = OAuthSerializer()
    serializer.client_id("abc").redirect_uri("https://localhost:8080").tenant_id("common")
    return serializer


@pytest.fixture
def scoped_oauth(oauth: OAuthSerializer) -> OAuthSerializer:
    """Serializer with read and write scopes."""
    return oauth.extend_scopes(["read", "write"])


@pytest.fixture
def sample_token() -> MsalToken:
    """Create a sample token response."""
    return MsalToken.from_dict(
        {
            "token_type": "Bearer",
            "expires_in": 3600,
            "ext_expires_in": 3600,
            "scope": "User.Read Mail.Read",
            "access_token": "test_access_token_12345",
            "refresh_token": "test_refresh_token_67890",
        }
    )


@pytest.fixture
def token_response() -> httpx.Response:
    """Successful token endpoint HTTP response."""
    return httpx.Response(
        200,
        json={
            "token_type": "Bearer",
            "expires_in": "3600",
            "scope": "User.Read",
            "access_token": "new_access_token",
            "refresh_token": "new_refresh_token",
        },
    )


@pytest.fixture
def mock_http_client() -> MagicMock:
    """Mock httpx.Client usable as a context manager."""
    mock_client = MagicMock()
    mock_client.__enter__.return_value = mock_client
    mock_client.__exit__.return_value = False
    return mock_client
