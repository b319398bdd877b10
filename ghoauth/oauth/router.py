"""
OAuth2 API endpoints.

Provides the sign-in flow with GitHub:
- GET /oauth/github/login - Start OAuth flow
- GET /oauth/github/callback - Handle callback, keep the token in the session
- POST /oauth/github/logout - Forget the session
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from ghoauth.infrastructure.encryption import encrypt_token
from ghoauth.oauth.dependencies import (
    SESSION_TOKEN_KEY,
    SESSION_USER_KEY,
    OAuthFlow,
    Web,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oauth/github", tags=["oauth"])


@router.get("/login")
async def login(request: Request, oauth: OAuthFlow, web: Web):
    """
    Start OAuth2 authorization flow.

    Redirects the user to GitHub's authorization page. A fresh `state` value
    is kept in the session and checked on the callback.

    Returns:
        Redirect to GitHub's authorization page
    """
    redirect_uri = web.get_callback_url()
    login_url = oauth.begin_login(request.session, redirect_uri)

    logger.info(
        "Starting OAuth flow for provider: github",
        extra={"extra_fields": {"provider": "github", "redirect_uri": redirect_uri}},
    )

    return RedirectResponse(url=login_url)


@router.get("/callback")
async def callback(
    request: Request,
    oauth: OAuthFlow,
    web: Web,
    code: Optional[str] = None,
    state: Optional[str] = None,
):
    """
    Handle OAuth2 callback from GitHub.

    Exchanges the authorization code for a token, fetches the profile and
    stores the encrypted token and a user summary in the session.

    Returns:
        Redirect to dashboard on success

    Raises:
        HTTPException: 401 when GitHub refused the sign-in
    """
    result = await oauth.complete_login(
        request.session, web.get_callback_url(), code, state
    )

    if not result.is_successful or not result.access_token:
        logger.error(
            f"OAuth sign-in failed: {result.error}",
            extra={"extra_fields": {"provider": result.provider, "error": result.error}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"OAuth authorization failed: {result.error}",
        )

    request.session[SESSION_TOKEN_KEY] = encrypt_token(result.access_token)
    request.session[SESSION_USER_KEY] = {
        "id": result.provider_user_id,
        "login": result.user_name,
        "name": result.extra_data.get("name"),
    }

    logger.info(
        "Successfully signed in with github",
        extra={"extra_fields": {"provider": "github", "user_id": result.provider_user_id}},
    )

    return RedirectResponse(url="/dashboard", status_code=status.HTTP_302_FOUND)


@router.post("/logout")
async def logout(request: Request):
    """
    Sign out.

    Drops the token and the user summary from the session. GitHub tokens do
    not expire; revoking them is left to the user's GitHub settings.
    """
    request.session.clear()
    return {
        "status": "success",
        "message": "Signed out from github",
    }
