from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import Any, Mapping, Optional, Union

from .models import FeedItem

SLUG_MAX_LENGTH = 80
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _field(item: Union[FeedItem, Mapping[str, Any]], name: str) -> str:
    if isinstance(item, Mapping):
        value = item.get(name)
    else:
        value = getattr(item, name, None)
    return value or ""


def fingerprint(item: Union[FeedItem, Mapping[str, Any]]) -> str:
    """
    Deduplication key of a feed item.

    SHA-256 of `title|link|pub_date`, using the raw publish date string as the
    feed sent it. Missing fields count as empty strings, so two items with the
    same title, link and date collide whatever else differs between them.
    """
    normalized = "|".join(_field(item, k) for k in ("title", "link", "pub_date"))
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def slugify(text: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    text = unicodedata.normalize("NFKD", text or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = _NON_ALNUM.sub("-", text).strip("-")
    return text[:max_length].rstrip("-")


def make_slug(title: Optional[str], id: Optional[str] = None) -> str:
    """
    URL and filename safe identifier: slugified title plus 8 hex chars of MD5(id).

    Falls back to hashing the title when `id` is empty.
    """
    base = slugify(title or "") or "article"
    digest = hashlib.md5(str(id or title).encode("utf-8")).hexdigest()[:8]
    return f"{base}-{digest}"
