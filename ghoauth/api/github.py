"""
GitHub API router.

Read-only endpoints over the signed-in user's GitHub data. Collections are
aggregated across all pages before they are returned.
"""

import logging

from fastapi import APIRouter

from ghoauth.oauth.dependencies import AccessToken, GitHubClient


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/github", tags=["github"])


@router.get("/profile")
async def get_profile(client: GitHubClient, token: AccessToken):
    """Get the signed-in user's GitHub profile."""
    return await client.fetch_profile(token)


@router.get("/orgs")
async def list_organizations(client: GitHubClient, token: AccessToken):
    """List the organizations the signed-in user belongs to."""
    orgs = await client.list_organizations(token)
    return {"status": "success", "count": len(orgs), "items": orgs}


@router.get("/teams")
async def list_user_teams(client: GitHubClient, token: AccessToken):
    """List the teams the signed-in user belongs to."""
    teams = await client.list_user_teams(token)
    return {"status": "success", "count": len(teams), "items": teams}


@router.get("/orgs/{org}/teams")
async def list_org_teams(org: str, client: GitHubClient, token: AccessToken):
    """
    List the teams of an organization.

    Args:
        org: GitHub login of the organization
    """
    teams = await client.list_teams(org, token)
    return {"status": "success", "org": org, "count": len(teams), "items": teams}
