from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from .dates import struct_time_to_iso
from .exceptions import ParseError
from .models import FeedItem


def _first_str(entry: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        val = entry.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


def _dicts(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    if isinstance(value, dict):
        return [value]
    return []


def _iso_date(entry: Dict[str, Any]) -> Optional[str]:
    """
    ISO timestamp from feedparser's parsed date fields.
    Priority: published_parsed -> updated_parsed -> created_parsed -> None.
    """
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        val = entry.get(key)
        if isinstance(val, time.struct_time):
            try:
                return struct_time_to_iso(val)
            except (OverflowError, ValueError):
                continue
    return None


def _enclosure_url(entry: Dict[str, Any]) -> Optional[str]:
    for enc in _dicts(entry.get("enclosures")):
        href = enc.get("href") or enc.get("url")
        if isinstance(href, str) and href:
            return href
    # Atom feeds expose enclosures as links with rel="enclosure"
    for link in _dicts(entry.get("links")):
        if link.get("rel") == "enclosure" and link.get("href"):
            return link["href"]
    return None


def _media_url(entry: Dict[str, Any]) -> Optional[str]:
    for key in ("media_content", "media_thumbnail"):
        for media in _dicts(entry.get(key)):
            url = media.get("url")
            if isinstance(url, str) and url:
                return url
    return None


def _content(entry: Dict[str, Any]) -> str:
    for block in _dicts(entry.get("content")):
        value = block.get("value")
        if isinstance(value, str) and value.strip():
            return value
    return ""


def parse_entry(entry: Dict[str, Any]) -> FeedItem:
    """
    Map a raw feed entry (from feedparser) to a FeedItem.

    `pub_date` keeps the date string exactly as the feed sent it, since it
    feeds the fingerprint; `iso_date` is the normalized form when feedparser
    could read it.
    """
    if not isinstance(entry, dict):
        raise ParseError(f"Feed entry must be a mapping, got {type(entry).__name__}")

    summary = _first_str(entry, "summary", "description") or ""
    return FeedItem(
        title=_first_str(entry, "title") or "",
        link=_first_str(entry, "link", "feedburner_origlink") or "",
        pub_date=_first_str(entry, "published", "pubDate", "updated") or "",
        iso_date=_iso_date(entry),
        guid=_first_str(entry, "id", "guid"),
        enclosure_url=_enclosure_url(entry),
        content=_content(entry),
        summary=summary,
        media_url=_media_url(entry),
    )
