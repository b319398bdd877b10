"""
Core service for handling OAuth 2.0 authorization-code flows.

Provider-agnostic: it only needs the three hooks of the OAuth2Provider port.
It adds what the providers leave out, namely the `state` round-trip that
protects the callback against cross-site request forgery, and the shaping of
the outcome into an AuthenticationResult.
"""

import hmac
import logging
from typing import MutableMapping, Optional

import httpx
from authlib.common.security import generate_token

from ghoauth.core.domain import AuthenticationResult
from ghoauth.core.ports import OAuth2Provider


logger = logging.getLogger(__name__)

STATE_LENGTH = 32


class OAuthService:
    """
    A service for handling OAuth 2.0 login flows with a single provider.
    """

    def __init__(self, provider: OAuth2Provider, provider_name: str = "github"):
        self.provider = provider
        self.provider_name = provider_name

    @property
    def state_key(self) -> str:
        return f"_oauth_state_{self.provider_name}"

    def begin_login(self, session: MutableMapping, return_url: str) -> str:
        """
        Start the login flow.

        Stores a fresh state value in the session and returns the provider's
        authorization URL carrying it.

        Args:
            session: Per-user session storage
            return_url: Callback URL the provider redirects back to

        Returns:
            URL to redirect the user's browser to
        """
        state = generate_token(STATE_LENGTH)
        session[self.state_key] = state

        login_url = httpx.URL(self.provider.build_login_url(return_url))
        return str(login_url.copy_add_param("state", state))

    async def complete_login(
        self,
        session: MutableMapping,
        return_url: str,
        code: Optional[str],
        state: Optional[str],
    ) -> AuthenticationResult:
        """
        Finish the login flow on the provider callback.

        Failures the provider signals through values (missing code, empty
        token) come back as a failed result. Transport and parsing errors
        raised by the provider propagate.

        Args:
            session: Per-user session storage used by begin_login
            return_url: The callback URL passed to begin_login
            code: `code` query parameter of the callback
            state: `state` query parameter of the callback

        Returns:
            AuthenticationResult describing the outcome
        """
        expected_state = session.pop(self.state_key, None)
        if not expected_state or not state or not hmac.compare_digest(
            expected_state.encode(), state.encode()
        ):
            logger.warning(f"OAuth state mismatch for provider: {self.provider_name}")
            return AuthenticationResult.failed(self.provider_name, "state_mismatch")

        if not code:
            return AuthenticationResult.failed(self.provider_name, "missing_code")

        access_token = await self.provider.exchange_code(return_url, code)
        if not access_token:
            logger.warning(f"Token exchange failed for provider: {self.provider_name}")
            return AuthenticationResult.failed(
                self.provider_name, "token_exchange_failed"
            )

        profile = await self.provider.fetch_profile(access_token)

        user_id = profile.get("id")
        user_name = profile.get("login") or profile.get("name") or user_id

        return AuthenticationResult(
            is_successful=True,
            provider=self.provider_name,
            provider_user_id=user_id,
            user_name=user_name,
            access_token=access_token,
            extra_data=profile,
        )
