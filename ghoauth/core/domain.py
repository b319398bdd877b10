"""
Core domain models for the GitHub OAuth2 client.

These models are independent of the HTTP transport and of the web layer.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue


# Profile fields are opaque strings; GitHub sends null for unset fields.
Profile = dict[str, Optional[str]]

# Listing endpoints return provider-defined objects, kept as generic JSON.
Collection = list[JsonValue]


class LinkEntry(BaseModel):
    """One typed hyperlink from a `Link` response header."""

    model_config = ConfigDict(frozen=True)

    rel: str = Field(default="", description="Relation type, e.g. next or last")
    target: str = Field(description="Absolute target URL")


class Page(BaseModel):
    """A single page of a paginated collection."""

    items: Collection = Field(default_factory=list)
    link_header: Optional[str] = Field(
        default=None, description="Raw Link header of the response, if any"
    )


class AuthenticationResult(BaseModel):
    """
    Outcome of a completed authorization-code flow.

    A failed result is a value, not an exception: callers check
    `is_successful` and read `error` for the reason.
    """

    is_successful: bool
    provider: str
    provider_user_id: Optional[str] = None
    user_name: Optional[str] = None
    access_token: Optional[str] = Field(default=None, repr=False)
    extra_data: Profile = Field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def failed(cls, provider: str, error: str) -> "AuthenticationResult":
        """Build a failed result for the given provider."""
        return cls(is_successful=False, provider=provider, error=error)
