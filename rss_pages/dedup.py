from __future__ import annotations

from typing import Iterable, List, Set

from .dates import sort_key
from .models import Article

MAX_ARTICLES = 1000


def build_seen_set(articles: Iterable[Article]) -> Set[str]:
    return {a.fingerprint for a in articles if a.fingerprint}


def deduplicate(articles: Iterable[Article]) -> List[Article]:
    """
    Remove duplicates by fingerprint.
    Keeps the first occurrence and preserves original order.
    """
    seen: Set[str] = set()
    out: List[Article] = []
    for a in articles:
        if a.fingerprint in seen:
            continue
        seen.add(a.fingerprint)
        out.append(a)
    return out


def merge_articles(
    new: Iterable[Article],
    prior: Iterable[Article],
    limit: int = MAX_ARTICLES,
) -> List[Article]:
    """
    Combine this cycle's articles with the stored ones.

    New articles go first so they win a fingerprint tie with a stored copy.
    The result is sorted newest first and then cut to `limit`, so the oldest
    articles are the ones dropped. Ties keep their merged order.
    """
    merged = deduplicate([*new, *prior])
    merged.sort(key=lambda a: sort_key(a.published), reverse=True)
    if limit >= 0:
        merged = merged[:limit]
    return merged
