"""
Parser for HTTP `Link` headers (web linking).

Turns a header such as

    <https://api.github.com/user/orgs?page=2>; rel="next",
    <https://api.github.com/user/orgs?page=5>; rel="last"

into an ordered list of LinkEntry values.
"""

import logging
from typing import Iterable, Optional
from urllib.parse import urljoin

import httpx

from ghoauth.core.domain import LinkEntry
from ghoauth.core.exceptions import ParseError


logger = logging.getLogger(__name__)


def _split_entries(header_value: str) -> list[str]:
    """
    Split a header into comma-separated entries.

    Commas inside `<...>` or inside quoted strings do not separate entries.
    A `<` whose `>` is missing before the next quote or `<` is treated as
    unclosed; the entry is left for the entry parser to reject.
    """
    entries: list[str] = []
    start = 0
    i = 0
    in_quote = False
    length = len(header_value)

    while i < length:
        char = header_value[i]
        if in_quote:
            if char == "\\":
                i += 1
            elif char == '"':
                in_quote = False
        elif char == '"':
            in_quote = True
        elif char == "<":
            j = i + 1
            while j < length and header_value[j] not in '<>"':
                j += 1
            if j < length and header_value[j] == ">":
                i = j
        elif char == ",":
            entries.append(header_value[start:i])
            start = i + 1
        i += 1

    if in_quote:
        raise ParseError(f"Unterminated quoted string in Link header: {header_value!r}")

    entries.append(header_value[start:])
    return entries


def _split_params(params: str) -> list[str]:
    """Split `; key=value` parameters, respecting quoted values."""
    parts: list[str] = []
    current: list[str] = []
    in_quote = False
    escaped = False

    for char in params:
        if escaped:
            current.append(char)
            escaped = False
        elif in_quote and char == "\\":
            current.append(char)
            escaped = True
        elif char == '"':
            in_quote = not in_quote
            current.append(char)
        elif char == ";" and not in_quote:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)

    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        inner = value[1:-1]
        out: list[str] = []
        escaped = False
        for char in inner:
            if escaped:
                out.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            else:
                out.append(char)
        return "".join(out)
    return value


def _parse_entry(base_url: str, raw_entry: str) -> Optional[LinkEntry]:
    entry = raw_entry.strip()
    if not entry.startswith("<"):
        return None

    close = entry.find(">")
    if close == -1:
        return None

    target = entry[1:close].strip()
    if not target:
        return None

    try:
        resolved = str(httpx.URL(urljoin(base_url, target)))
    except (httpx.InvalidURL, ValueError):
        return None

    rel = ""
    for param in _split_params(entry[close + 1 :]):
        name, sep, value = param.partition("=")
        if sep and name.strip().lower() == "rel":
            rel = _unquote(value)
            break

    return LinkEntry(rel=rel, target=resolved)


def parse_links(base_url: str, header_value: Optional[str]) -> list[LinkEntry]:
    """
    Parse a `Link` header value into typed hyperlinks.

    Args:
        base_url: URL that relative targets are resolved against
        header_value: Raw header value (None or empty yields no links)

    Returns:
        Link entries in header order. Malformed entries are skipped.

    Raises:
        ParseError: If the header cannot be segmented into entries
    """
    if not header_value or not header_value.strip():
        return []

    links: list[LinkEntry] = []
    for raw_entry in _split_entries(header_value):
        if not raw_entry.strip():
            continue
        link = _parse_entry(base_url, raw_entry)
        if link is None:
            logger.debug(f"Skipping malformed Link entry: {raw_entry.strip()!r}")
            continue
        links.append(link)
    return links


def find_link(links: Iterable[LinkEntry], rel: str) -> Optional[str]:
    """Return the target of the first link whose relation matches `rel`."""
    wanted = rel.lower()
    for link in links:
        if link.rel.lower() == wanted:
            return link.target
    return None
