#!/usr/bin/env python3
"""
Script to list GitHub organizations and teams for an access token.
Useful for checking a token and the pagination against the real API.

GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET are read from the environment or
from a .env file.

Usage:
    python scripts/list_github_resources.py <access_token> [--org ORG]
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from ghoauth.core.exceptions import GitHubClientError
from ghoauth.infrastructure.github_client import GitHubOAuth2Client
from ghoauth.oauth.config import GitHubOAuthConfig


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("access_token", help="GitHub OAuth access token")
    parser.add_argument("--org", help="List the teams of this organization")
    return parser.parse_args()


async def list_resources(access_token: str, org: str | None) -> None:
    """Print the profile, organizations and teams visible to the token."""
    client = GitHubOAuth2Client(GitHubOAuthConfig.from_env())

    profile = await client.fetch_profile(access_token)
    print(f"Signed in as: {profile.get('login')} (id {profile.get('id')})\n")

    orgs = await client.list_organizations(access_token)
    print(f"Organizations ({len(orgs)}):")
    for item in orgs:
        print(f"  - {item.get('login') if isinstance(item, dict) else item}")

    teams = await client.list_user_teams(access_token)
    print(f"\nTeams ({len(teams)}):")
    for item in teams:
        print(f"  - {item.get('slug') if isinstance(item, dict) else item}")

    if org:
        org_teams = await client.list_teams(org, access_token)
        print(f"\nTeams in {org} ({len(org_teams)}):")
        print(json.dumps(org_teams, indent=2))


def main() -> int:
    load_dotenv()
    args = parse_args()
    try:
        asyncio.run(list_resources(args.access_token, args.org))
    except GitHubClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
