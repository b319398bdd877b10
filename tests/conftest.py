"""
Shared test configuration and fixtures.
"""

import os
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet
from fastapi.testclient import TestClient

TEST_ENV = {
    "SESSION_SECRET_KEY": "test-secret",
    "BASE_URL": "http://testserver",
    "TOKEN_ENCRYPTION_KEY": Fernet.generate_key().decode(),
}

# Configure the environment before importing app
with patch.dict(os.environ, TEST_ENV):
    from ghoauth.main import app

from ghoauth.infrastructure.encryption import reset_encryption  # noqa: E402
from ghoauth.infrastructure.github_client import GitHubOAuth2Client  # noqa: E402
from ghoauth.oauth.config import (  # noqa: E402
    GitHubOAuthConfig,
    WebConfig,
    get_web_config,
)
from ghoauth.oauth.dependencies import get_github_client  # noqa: E402

client = TestClient(app)


@pytest.fixture(autouse=True)
def encryption_key():
    """Provide a token encryption key to every test."""
    with patch.dict(os.environ, {"TOKEN_ENCRYPTION_KEY": TEST_ENV["TOKEN_ENCRYPTION_KEY"]}):
        reset_encryption()
        yield
    reset_encryption()


@pytest.fixture
def github_config():
    """GitHub OAuth app configuration used across tests."""
    return GitHubOAuthConfig(
        app_id="test-client-id",
        app_secret="test-client-secret",
        user_agent="ghoauth-tests/1.0",
        scopes="read:org",
    )


@pytest.fixture
def github_client(github_config):
    """GitHub client built from the test configuration."""
    return GitHubOAuth2Client(github_config)


@pytest.fixture
def app_client(github_client):
    """Test client with the GitHub client and web config overridden."""
    app.dependency_overrides[get_github_client] = lambda: github_client
    app.dependency_overrides[get_web_config] = lambda: WebConfig(
        base_url="http://testserver"
    )

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_github_client, None)
    app.dependency_overrides.pop(get_web_config, None)
