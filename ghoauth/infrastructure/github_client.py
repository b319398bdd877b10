"""
GitHub OAuth2 client.

Implements the three hooks of the authorization-code flow (login URL, code
exchange, profile) and the paginated organization and team listings.
See https://docs.github.com/en/apps/oauth-apps for the endpoints.
"""

import json
import logging
from typing import Annotated, Any, Optional
from urllib.parse import parse_qs, quote

import httpx
from pydantic import BeforeValidator, TypeAdapter, ValidationError

from ghoauth.core.domain import Collection, Profile
from ghoauth.core.exceptions import DeserializationError
from ghoauth.infrastructure.pagination import (
    DEFAULT_TIMEOUT,
    GITHUB_API_ROOT,
    PaginatedFetcher,
    fetch,
    parse_json,
)
from ghoauth.oauth.config import GitHubOAuthConfig


logger = logging.getLogger(__name__)

AUTHORIZATION_ENDPOINT = "https://github.com/login/oauth/authorize"
TOKEN_ENDPOINT = "https://github.com/login/oauth/access_token"
USER_ENDPOINT = f"{GITHUB_API_ROOT}/user"
ORGS_ENDPOINT = f"{GITHUB_API_ROOT}/user/orgs"
USER_TEAMS_ENDPOINT = f"{GITHUB_API_ROOT}/user/teams"
# GitHub's documented org teams path; there is no /user/orgs/{org}/teams.
ORG_TEAMS_ENDPOINT = GITHUB_API_ROOT + "/orgs/{org}/teams"


def _stringify_scalar(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


_profile_adapter = TypeAdapter(
    dict[str, Annotated[Optional[str], BeforeValidator(_stringify_scalar)]]
)


class GitHubOAuth2Client:
    """
    OAuth2 provider adapter for GitHub.

    Stateless apart from its immutable configuration, so one instance can be
    shared by concurrent callers. The access token is passed in on every call.
    """

    provider_name = "github"

    def __init__(self, config: GitHubOAuthConfig, timeout: float = DEFAULT_TIMEOUT):
        self._config = config
        self._timeout = timeout
        self._fetcher = PaginatedFetcher(
            user_agent=config.user_agent,
            base_url=GITHUB_API_ROOT,
            timeout=timeout,
        )

    @property
    def config(self) -> GitHubOAuthConfig:
        return self._config

    def build_login_url(self, return_url: str) -> str:
        """
        Build the GitHub authorization URL.

        Args:
            return_url: Callback URL, sent verbatim as redirect_uri

        Returns:
            Authorization URL with client_id, redirect_uri and scope
        """
        url = httpx.URL(
            AUTHORIZATION_ENDPOINT,
            params={
                "client_id": self._config.app_id,
                "redirect_uri": return_url,
                "scope": self._config.scopes,
            },
        )
        return str(url)

    async def exchange_code(
        self, return_url: str, authorization_code: str
    ) -> Optional[str]:
        """
        Exchange an authorization code for an access token.

        GitHub answers with a URL-encoded body such as
        `access_token=...&scope=repo&token_type=bearer`. An empty body, or a
        body without access_token (e.g. `error=bad_verification_code`), means
        the exchange failed and None is returned.

        Raises:
            FetchError: On transport errors or a non-2xx status
        """
        url = httpx.URL(
            TOKEN_ENDPOINT,
            params={
                "client_id": self._config.app_id,
                "redirect_uri": return_url,
                "client_secret": self._config.app_secret,
                "code": authorization_code,
            },
        )
        response = await fetch(str(url), self._config.user_agent, self._timeout)

        body = response.text
        if not body:
            return None

        fields = parse_qs(body.strip())
        if "error" in fields:
            logger.debug(f"GitHub token exchange returned error: {fields['error'][0]}")
        values = fields.get("access_token")
        return values[0] if values else None

    async def fetch_profile(self, access_token: str) -> Profile:
        """
        Fetch the authenticated user's profile as a flat string mapping.

        Numbers and booleans are stringified, nested objects and arrays
        (e.g. `plan`) become compact JSON text, null stays None.

        Raises:
            FetchError: On transport errors or a non-2xx status
            ParseError: If the body is not valid JSON
            DeserializationError: If the body is not a JSON object
        """
        url = self._with_token(USER_ENDPOINT, access_token)
        response = await fetch(url, self._config.user_agent, self._timeout)
        data = parse_json(response, url)

        try:
            return _profile_adapter.validate_python(data)
        except ValidationError as e:
            raise DeserializationError(
                f"GitHub profile is not a JSON object: {e}"
            ) from e

    async def list_organizations(self, access_token: str) -> Collection:
        """List the organizations of the authenticated user."""
        return await self._fetcher.fetch_all(
            self._with_token(ORGS_ENDPOINT, access_token)
        )

    async def list_user_teams(self, access_token: str) -> Collection:
        """List the teams the authenticated user belongs to."""
        return await self._fetcher.fetch_all(
            self._with_token(USER_TEAMS_ENDPOINT, access_token)
        )

    async def list_teams(self, org: str, access_token: str) -> Collection:
        """
        List the teams of an organization.

        Args:
            org: GitHub login of the organization, encoded as one path segment
            access_token: OAuth access token
        """
        endpoint = ORG_TEAMS_ENDPOINT.format(org=quote(org, safe=""))
        return await self._fetcher.fetch_all(self._with_token(endpoint, access_token))

    @staticmethod
    def _with_token(endpoint: str, access_token: str) -> str:
        return str(httpx.URL(endpoint, params={"access_token": access_token}))
