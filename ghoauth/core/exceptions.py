"""
Domain exceptions for the GitHub OAuth2 client.

These exceptions propagate to the immediate caller. The web layer maps them
to HTTP responses through the centralized exception handlers in main.py.
"""

import re


_SECRET_PARAMS = re.compile(r"([?&](?:access_token|client_secret|code)=)[^&#]*")


def redact_url(url: str) -> str:
    """Mask credentials and authorization codes carried as query parameters."""
    return _SECRET_PARAMS.sub(r"\1***", url)


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class ConfigurationError(GitHubClientError):
    """
    Raised when the client configuration is invalid.

    Fatal: raised at construction time and never recovered.
    """

    pass


class FetchError(GitHubClientError):
    """
    Raised when a request fails at the transport level or with a non-2xx status.

    The message shows the URL with credentials masked; the `url` attribute
    keeps the exact URL that failed.
    """

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(f"{message} ({redact_url(url)})")
        self.url = url
        self.status_code = status_code


class ParseError(GitHubClientError):
    """Raised when a response body or header cannot be parsed."""

    pass


class DeserializationError(GitHubClientError):
    """Raised when a profile cannot be coerced into a flat string mapping."""

    pass
