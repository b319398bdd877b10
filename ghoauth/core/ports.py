"""
Port definitions (interfaces) for the core domain.

The OAuth orchestrator depends on this contract, not on a concrete provider.
Infrastructure adapters (e.g., GitHubOAuth2Client) implement it.
"""

from typing import Optional, Protocol

from ghoauth.core.domain import Profile


class OAuth2Provider(Protocol):
    """
    Port (interface) for an OAuth2 authorization-code provider.

    Implementations hold no per-call state: the access token is threaded
    through by the caller.
    """

    def build_login_url(self, return_url: str) -> str:
        """
        Build the provider's authorization URL.

        Args:
            return_url: Callback URL the provider redirects back to

        Returns:
            Absolute URL to send the user's browser to
        """
        ...

    async def exchange_code(
        self, return_url: str, authorization_code: str
    ) -> Optional[str]:
        """
        Exchange an authorization code for an access token.

        Args:
            return_url: The callback URL used when building the login URL
            authorization_code: Code received on the callback

        Returns:
            The access token, or None when the provider signals failure
        """
        ...

    async def fetch_profile(self, access_token: str) -> Profile:
        """
        Fetch the authenticated user's profile.

        Args:
            access_token: Token returned by exchange_code

        Returns:
            Flat mapping of profile field names to string values
        """
        ...
