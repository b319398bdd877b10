"""
Unit tests for the GitHub OAuth2 client.
"""

import httpx
import pytest
from respx import MockRouter

from ghoauth.core.exceptions import DeserializationError, FetchError, ParseError
from ghoauth.infrastructure.github_client import GitHubOAuth2Client
from ghoauth.oauth.config import GitHubOAuthConfig

RETURN_URL = "https://app.example.com/oauth/github/callback?next=/home&x=a b"


class TestBuildLoginUrl:
    """Tests for build_login_url."""

    def test_login_url_carries_parameters(self, github_client):
        """Test client_id, redirect_uri and scope are present and exact."""
        url = httpx.URL(github_client.build_login_url(RETURN_URL))

        assert url.scheme == "https"
        assert url.host == "github.com"
        assert url.path == "/login/oauth/authorize"
        assert url.params["client_id"] == "test-client-id"
        assert url.params["redirect_uri"] == RETURN_URL
        assert url.params["scope"] == "read:org"

    def test_login_url_is_idempotent(self, github_client):
        """Test identical inputs give identical URLs."""
        assert github_client.build_login_url(RETURN_URL) == github_client.build_login_url(
            RETURN_URL
        )

    def test_login_url_with_empty_scope(self):
        """Test an empty scope is still sent."""
        client = GitHubOAuth2Client(GitHubOAuthConfig(app_id="id", app_secret="secret"))

        url = httpx.URL(client.build_login_url(RETURN_URL))

        assert "scope" in url.params
        assert url.params["scope"] == ""

    def test_login_url_has_no_secret(self, github_client):
        """Test the client secret never reaches the browser."""
        assert "test-client-secret" not in github_client.build_login_url(RETURN_URL)


class TestExchangeCode:
    """Tests for exchange_code."""

    @pytest.mark.asyncio
    async def test_exchange_returns_access_token(
        self, respx_mock: MockRouter, github_client
    ):
        """Test a URL-encoded token body yields the token."""
        route = respx_mock.get("https://github.com/login/oauth/access_token").mock(
            return_value=httpx.Response(200, text="access_token=XYZ&scope=repo")
        )

        token = await github_client.exchange_code(RETURN_URL, "the-code")

        assert token == "XYZ"
        request = route.calls.last.request
        assert request.url.params["client_id"] == "test-client-id"
        assert request.url.params["client_secret"] == "test-client-secret"
        assert request.url.params["redirect_uri"] == RETURN_URL
        assert request.url.params["code"] == "the-code"
        assert request.headers["User-Agent"] == "ghoauth-tests/1.0"

    @pytest.mark.asyncio
    async def test_exchange_empty_body_returns_none(
        self, respx_mock: MockRouter, github_client
    ):
        """Test an empty body signals a failed exchange, not an error."""
        respx_mock.get("https://github.com/login/oauth/access_token").mock(
            return_value=httpx.Response(200, text="")
        )

        assert await github_client.exchange_code(RETURN_URL, "the-code") is None

    @pytest.mark.asyncio
    async def test_exchange_error_body_returns_none(
        self, respx_mock: MockRouter, github_client
    ):
        """Test GitHub's error body without access_token yields None."""
        respx_mock.get("https://github.com/login/oauth/access_token").mock(
            return_value=httpx.Response(
                200,
                text="error=bad_verification_code&error_description=The+code+is+incorrect",
            )
        )

        assert await github_client.exchange_code(RETURN_URL, "stale-code") is None

    @pytest.mark.asyncio
    async def test_exchange_server_error_raises(
        self, respx_mock: MockRouter, github_client
    ):
        """Test a non-2xx token response is a FetchError with the secret masked."""
        respx_mock.get("https://github.com/login/oauth/access_token").mock(
            return_value=httpx.Response(503)
        )

        with pytest.raises(FetchError) as exc_info:
            await github_client.exchange_code(RETURN_URL, "SECRETCODE123")

        assert exc_info.value.status_code == 503
        assert "test-client-secret" not in str(exc_info.value)
        assert "SECRETCODE123" not in str(exc_info.value)
        assert "code=***" in str(exc_info.value)


class TestFetchProfile:
    """Tests for fetch_profile."""

    @pytest.mark.asyncio
    async def test_profile_flattened_to_strings(
        self, respx_mock: MockRouter, github_client
    ):
        """Test scalars are stringified and null is kept."""
        route = respx_mock.get("https://api.github.com/user").mock(
            return_value=httpx.Response(
                200,
                json={
                    "login": "octocat",
                    "id": 583231,
                    "site_admin": False,
                    "name": "The Octocat",
                    "company": None,
                },
            )
        )

        profile = await github_client.fetch_profile("tok")

        assert profile == {
            "login": "octocat",
            "id": "583231",
            "site_admin": "false",
            "name": "The Octocat",
            "company": None,
        }
        request = route.calls.last.request
        assert request.url.params["access_token"] == "tok"
        assert request.headers["User-Agent"] == "ghoauth-tests/1.0"

    @pytest.mark.asyncio
    async def test_nested_values_rendered_as_json(
        self, respx_mock: MockRouter, github_client
    ):
        """Test nested objects and arrays become compact JSON text."""
        respx_mock.get("https://api.github.com/user").mock(
            return_value=httpx.Response(
                200,
                json={
                    "login": "octocat",
                    "plan": {"name": "free", "private_repos": 10000},
                    "emails": ["a@example.com"],
                },
            )
        )

        profile = await github_client.fetch_profile("tok")

        assert profile["login"] == "octocat"
        assert profile["plan"] == '{"name":"free","private_repos":10000}'
        assert profile["emails"] == '["a@example.com"]'

    @pytest.mark.asyncio
    async def test_non_object_profile_raises_deserialization_error(
        self, respx_mock: MockRouter, github_client
    ):
        """Test a profile body that is not a JSON object is rejected."""
        respx_mock.get("https://api.github.com/user").mock(
            return_value=httpx.Response(200, json=["octocat"])
        )

        with pytest.raises(DeserializationError):
            await github_client.fetch_profile("tok")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(
        self, respx_mock: MockRouter, github_client
    ):
        """Test a non-JSON profile body raises ParseError."""
        respx_mock.get("https://api.github.com/user").mock(
            return_value=httpx.Response(200, text="not json")
        )

        with pytest.raises(ParseError):
            await github_client.fetch_profile("tok")

    @pytest.mark.asyncio
    async def test_unauthorized_raises_fetch_error(
        self, respx_mock: MockRouter, github_client
    ):
        """Test a rejected token raises FetchError with status 401."""
        respx_mock.get("https://api.github.com/user").mock(
            return_value=httpx.Response(401, json={"message": "Bad credentials"})
        )

        with pytest.raises(FetchError) as exc_info:
            await github_client.fetch_profile("bad-token")

        assert exc_info.value.status_code == 401


class TestListings:
    """Tests for the paginated organization and team listings."""

    @pytest.mark.asyncio
    async def test_list_organizations_follows_pages(
        self, respx_mock: MockRouter, github_client
    ):
        """Test organizations are aggregated across pages."""
        route = respx_mock.get(host="api.github.com", path="/user/orgs")
        route.side_effect = [
            httpx.Response(
                200,
                json=[{"login": "org-a"}],
                headers={
                    "Link": '<https://api.github.com/user/orgs?access_token=tok&page=2>; rel="next"'
                },
            ),
            httpx.Response(200, json=[{"login": "org-b"}]),
        ]

        orgs = await github_client.list_organizations("tok")

        assert orgs == [{"login": "org-a"}, {"login": "org-b"}]
        assert route.calls[0].request.url.params["access_token"] == "tok"

    @pytest.mark.asyncio
    async def test_list_user_teams(self, respx_mock: MockRouter, github_client):
        """Test user teams come from /user/teams."""
        route = respx_mock.get(host="api.github.com", path="/user/teams").mock(
            return_value=httpx.Response(200, json=[{"slug": "core"}])
        )

        teams = await github_client.list_user_teams("tok")

        assert teams == [{"slug": "core"}]
        assert route.calls.last.request.url.params["access_token"] == "tok"

    @pytest.mark.asyncio
    async def test_list_teams_substitutes_org(
        self, respx_mock: MockRouter, github_client
    ):
        """Test the organization is placed in the path."""
        route = respx_mock.get(host="api.github.com", path="/orgs/octo-org/teams").mock(
            return_value=httpx.Response(200, json=[{"slug": "justice-league"}])
        )

        teams = await github_client.list_teams("octo-org", "tok")

        assert teams == [{"slug": "justice-league"}]
        assert route.calls.last.request.url.params["access_token"] == "tok"

    @pytest.mark.asyncio
    async def test_list_teams_encodes_org_segment(
        self, respx_mock: MockRouter, github_client
    ):
        """Test an org value cannot escape its path segment."""
        route = respx_mock.get(host="api.github.com").mock(
            return_value=httpx.Response(200, json=[])
        )

        await github_client.list_teams("a/b", "tok")

        assert route.calls.last.request.url.raw_path.startswith(b"/orgs/a%2Fb/teams")
