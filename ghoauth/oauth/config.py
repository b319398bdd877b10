"""
OAuth2 configuration for the GitHub provider.

Loaded from environment variables. The client configuration is validated at
construction so a misconfigured deployment fails fast.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from ghoauth.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ghoauth/0.1"

PROVIDER_NAME = "github"


@dataclass(frozen=True)
class GitHubOAuthConfig:
    """
    Credentials and options for the GitHub OAuth app.

    GitHub rejects API requests without a User-Agent header; it may also use
    it to contact the app owner about problems.
    """

    app_id: str
    app_secret: str
    user_agent: str = DEFAULT_USER_AGENT
    # Space or comma separated; empty means GitHub's default scope.
    scopes: str = ""

    def __post_init__(self) -> None:
        if not self.app_id or not self.app_id.strip():
            raise ConfigurationError("app_id is required")
        if not self.app_secret or not self.app_secret.strip():
            raise ConfigurationError("app_secret is required")

    def __repr__(self) -> str:
        return (
            f"GitHubOAuthConfig(app_id={self.app_id!r}, app_secret='***', "
            f"user_agent={self.user_agent!r}, scopes={self.scopes!r})"
        )

    @classmethod
    def from_env(cls) -> "GitHubOAuthConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If GITHUB_CLIENT_ID or GITHUB_CLIENT_SECRET is missing
        """
        return cls(
            app_id=os.getenv("GITHUB_CLIENT_ID", ""),
            app_secret=os.getenv("GITHUB_CLIENT_SECRET", ""),
            user_agent=os.getenv("GITHUB_USER_AGENT") or DEFAULT_USER_AGENT,
            scopes=os.getenv("GITHUB_SCOPES", ""),
        )


@dataclass
class WebConfig:
    """Settings of the web surface."""

    base_url: str

    @classmethod
    def from_env(cls) -> "WebConfig":
        """Load configuration from environment variables."""
        return cls(base_url=os.getenv("BASE_URL", "").rstrip("/"))

    def get_callback_url(self) -> str:
        """Callback URL registered with the GitHub OAuth app."""
        return f"{self.base_url}/oauth/{PROVIDER_NAME}/callback"


@lru_cache()
def get_oauth_config() -> GitHubOAuthConfig:
    """Get GitHub OAuth configuration singleton."""
    config = GitHubOAuthConfig.from_env()
    logger.info(
        "Loaded GitHub OAuth configuration",
        extra={"extra_fields": {"client_id": config.app_id, "scopes": config.scopes}},
    )
    return config


@lru_cache()
def get_web_config() -> WebConfig:
    """Get web configuration singleton."""
    return WebConfig.from_env()
