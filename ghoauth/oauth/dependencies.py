"""
FastAPI dependencies for OAuth and GitHub endpoints.

Provides dependency injection for the GitHub client, the OAuth orchestrator
and the signed-in session.
"""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from ghoauth.core.oauth_service import OAuthService
from ghoauth.infrastructure.encryption import EncryptionError, decrypt_token
from ghoauth.infrastructure.github_client import GitHubOAuth2Client
from ghoauth.oauth.config import (
    GitHubOAuthConfig,
    WebConfig,
    get_oauth_config,
    get_web_config,
)


logger = logging.getLogger(__name__)

SESSION_TOKEN_KEY = "github_token"
SESSION_USER_KEY = "github_user"


@lru_cache()
def _client_for(config: GitHubOAuthConfig) -> GitHubOAuth2Client:
    return GitHubOAuth2Client(config)


def get_github_client(
    config: Annotated[GitHubOAuthConfig, Depends(get_oauth_config)],
) -> GitHubOAuth2Client:
    """
    Provide the GitHub client dependency.

    The client only holds immutable configuration, so one instance per
    configuration is shared across requests.
    """
    return _client_for(config)


def get_oauth_service(
    client: Annotated[GitHubOAuth2Client, Depends(get_github_client)],
) -> OAuthService:
    """Provide the OAuth orchestrator wired to the GitHub client."""
    return OAuthService(provider=client, provider_name=client.provider_name)


async def get_current_user(request: Request) -> dict:
    """
    Dependency to get the signed-in GitHub user from the session.

    Raises:
        HTTPException: 401 if not signed in
    """
    user = request.session.get(SESSION_USER_KEY)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated - sign in at /oauth/github/login",
        )
    return user


async def get_access_token(request: Request) -> str:
    """
    Dependency to get the decrypted GitHub access token from the session.

    A token that no longer decrypts (e.g. after key rotation) is dropped and
    treated as signed out.

    Raises:
        HTTPException: 401 if there is no usable token
    """
    encrypted = request.session.get(SESSION_TOKEN_KEY)
    if not encrypted:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated - sign in at /oauth/github/login",
        )

    try:
        return decrypt_token(encrypted)
    except EncryptionError as e:
        logger.warning(f"Discarding unreadable session token: {e}")
        request.session.clear()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired - sign in again",
        )


# Type aliases for cleaner dependency injection
GitHubClient = Annotated[GitHubOAuth2Client, Depends(get_github_client)]
OAuthFlow = Annotated[OAuthService, Depends(get_oauth_service)]
Web = Annotated[WebConfig, Depends(get_web_config)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
AccessToken = Annotated[str, Depends(get_access_token)]
