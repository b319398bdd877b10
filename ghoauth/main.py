"""
FastAPI application for signing in with GitHub.

This module wires dependencies and configures the application.
Client logic is in ghoauth/core and ghoauth/infrastructure.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from ghoauth.logging_config import setup_global_logging

setup_global_logging()

# Now import other modules (they will use the configured logging)
from fastapi import Depends, FastAPI, Request, status  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.middleware.sessions import SessionMiddleware  # noqa: E402

from ghoauth.api import github  # noqa: E402
from ghoauth.core.exceptions import (  # noqa: E402
    ConfigurationError,
    DeserializationError,
    FetchError,
    ParseError,
)
from ghoauth.oauth import router as oauth_router  # noqa: E402
from ghoauth.oauth.dependencies import get_current_user  # noqa: E402

logger = logging.getLogger(__name__)

# Upstream statuses passed through to the caller; anything else is a 502.
PASSTHROUGH_STATUSES = {
    status.HTTP_401_UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN,
    status.HTTP_404_NOT_FOUND,
}


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Nothing to set up or tear down: HTTP clients are opened per request.
    """
    logger.info("Application starting up...")
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="GitHub OAuth2 Client",
    description="Sign in with GitHub and list organizations and teams",
    version="0.1.0",
    lifespan=lifespan,
)

# Session middleware required for OAuth2 state and the encrypted token
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
if not SESSION_SECRET_KEY:
    raise ValueError("SESSION_SECRET_KEY is not set in the environment.")
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET_KEY)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """
    Handle missing or invalid configuration.

    Returns 503 Service Unavailable: the deployment, not the request, is at fault.
    """
    logger.error(f"Configuration error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "error",
            "message": "GitHub sign-in is not configured",
        },
    )


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError):
    """
    Handle failed calls to GitHub.

    Authentication and not-found statuses are passed through; everything
    else is reported as 502 Bad Gateway.
    """
    logger.error(
        f"GitHub request failed: {str(exc)}",
        extra={"extra_fields": {"upstream_status": exc.status_code}},
    )
    status_code = (
        exc.status_code
        if exc.status_code in PASSTHROUGH_STATUSES
        else status.HTTP_502_BAD_GATEWAY
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": str(exc),
        },
    )


@app.exception_handler(ParseError)
@app.exception_handler(DeserializationError)
async def response_error_handler(request: Request, exc: Exception):
    """Handle GitHub responses that could not be understood."""
    logger.error(f"Unexpected GitHub response: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "status": "error",
            "message": "Unexpected response from GitHub",
        },
    )


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "ghoauth",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# ============================================================================
# Protected Endpoints
# ============================================================================


@app.get("/dashboard")
async def dashboard(current_user: dict = Depends(get_current_user)):
    """
    Protected dashboard endpoint.

    Requires a signed-in session.

    Args:
        current_user: GitHub user summary stored in the session

    Returns:
        Welcome message with user information
    """
    logger.info(f"Dashboard accessed by user: {current_user.get('login')}")

    return {
        "status": "success",
        "message": "Welcome, you are signed in with GitHub!",
        "user": current_user,
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(oauth_router.router)
app.include_router(github.router)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
