"""
Link-header pagination for GitHub collection endpoints.

GitHub signals more data only through a `Link: <...>; rel="next"` header;
there is no page or total count in the body. The fetcher follows `next`
links until none remains and returns every element in fetch order.
"""

import json
import logging

import httpx

from ghoauth.core.domain import Collection, Page
from ghoauth.core.exceptions import FetchError, ParseError, redact_url
from ghoauth.infrastructure.link_header import find_link, parse_links


logger = logging.getLogger(__name__)

GITHUB_API_ROOT = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


async def fetch(
    url: str, user_agent: str, timeout: float = DEFAULT_TIMEOUT
) -> httpx.Response:
    """
    Issue a single GET with the User-Agent GitHub requires.

    The client lives only for this request.

    Raises:
        FetchError: On transport errors or a non-2xx status
    """
    headers = {"User-Agent": user_agent}
    try:
        async with httpx.AsyncClient(
            headers=headers, timeout=timeout, follow_redirects=True
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"GitHub request failed with status {e.response.status_code}",
            url=url,
            status_code=e.response.status_code,
        ) from e
    except httpx.RequestError as e:
        raise FetchError(f"Network error while calling GitHub: {e}", url=url) from e


def parse_json(response: httpx.Response, url: str):
    """Decode a JSON body, raising ParseError when it is not valid JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON returned by {redact_url(url)}: {e}") from e


class PaginatedFetcher:
    """
    Aggregates a multi-page JSON array collection into one list.

    There is no page cap: a server that keeps returning `next` links keeps
    the loop going.
    """

    def __init__(
        self,
        user_agent: str,
        base_url: str = GITHUB_API_ROOT,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._user_agent = user_agent
        self._base_url = base_url
        self._timeout = timeout

    async def fetch_page(self, url: str) -> Page:
        """
        Fetch one page of a collection.

        Raises:
            FetchError: If the request fails
            ParseError: If the body is not a JSON array
        """
        response = await fetch(url, self._user_agent, self._timeout)
        data = parse_json(response, url)
        if not isinstance(data, list):
            raise ParseError(
                f"Expected a JSON array from {redact_url(url)}, got {type(data).__name__}"
            )
        return Page(items=data, link_header=response.headers.get("Link"))

    def next_url(self, link_header: str | None) -> str | None:
        """Resolve the `next` link of a page, or None when the chain ends."""
        if not link_header:
            return None
        links = parse_links(self._base_url, link_header)
        return find_link(links, "next") or None

    async def fetch_all(self, start_url: str) -> Collection:
        """
        Fetch every page starting at `start_url`.

        `start_url` must already carry its authentication query parameters;
        `next` URLs are followed verbatim.

        Args:
            start_url: Absolute URL of the first page

        Returns:
            All elements of all pages, in fetch order

        Raises:
            FetchError: If any page fails; no partial result is returned
            ParseError: If any page is not a JSON array
        """
        items: Collection = []
        url: str | None = start_url
        page_number = 0

        while url:
            page_number += 1
            logger.debug(f"Fetching page {page_number}: {redact_url(url)}")
            page = await self.fetch_page(url)
            items.extend(page.items)
            url = self.next_url(page.link_header)

        logger.debug(f"Fetched {len(items)} items in {page_number} page(s)")
        return items
