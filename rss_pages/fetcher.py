from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import feedparser
import httpx

from .exceptions import RSSFetchError

logger = logging.getLogger(__name__)


@dataclass
class Feed:
    url: str
    title: str
    entries: List[Dict[str, Any]] = field(default_factory=list)


async def fetch_feed(client: httpx.AsyncClient, url: str, *, timeout: float = 15.0) -> Feed:
    """
    Fetch a single feed URL and return its display title and entries.

    Raises RSSFetchError on network errors, non-2xx responses, or when the
    body is malformed (bozo) and yields no entries.
    """
    try:
        response = await client.get(url, timeout=timeout)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise RSSFetchError(f"Failed to fetch feed: {url} ({e})") from e

    # the Content-Type charset is often the only encoding declaration
    headers = {k.lower(): v for k, v in response.headers.items()}
    parsed = feedparser.parse(response.content, response_headers=headers)
    entries = getattr(parsed, "entries", None)
    if not isinstance(entries, list):
        raise RSSFetchError(f"Feed has no entries: {url}")

    if getattr(parsed, "bozo", 0):
        exc = getattr(parsed, "bozo_exception", None)
        if not entries:
            msg = f"Invalid RSS/Atom feed: {url}"
            if exc:
                msg += f" ({exc})"
            raise RSSFetchError(msg)
        # feedparser flags recoverable problems (e.g. a wrong charset) as bozo too
        logger.debug("Feed %s parsed with warnings: %s", url, exc)

    title = (parsed.feed.get("title") or "").strip() or url
    return Feed(url=url, title=title, entries=entries)
