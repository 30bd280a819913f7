from __future__ import annotations

import re
import secrets
from typing import Optional

from bs4 import BeautifulSoup

from .dates import now_iso
from .fingerprint import fingerprint, make_slug
from .models import FALLBACK_IMAGE, FALLBACK_THUMB, Article, FeedItem, ImageVariants

EXCERPT_LENGTH = 300
DEFAULT_TITLE = "Untitled"

_IMG_SRC = re.compile(r"""<img[^>]+src=["']([^"']+)["']""", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"</?[a-zA-Z][^<>]*>")
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "ol", "p", "pre", "section", "table", "td", "th",
    "tr", "ul",
]


def extract_image_url(item: FeedItem) -> Optional[str]:
    """
    Best-effort image URL for an item.
    Priority: enclosure -> first <img src> in content, then summary -> media URL.
    """
    if item.enclosure_url:
        return item.enclosure_url
    for html in (item.content, item.summary):
        match = _IMG_SRC.search(html or "")
        if match:
            return match.group(1)
    return item.media_url or None


def _text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    # inline tags join their neighbours; block tags separate words
    for tag in soup(_BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    return soup.get_text()


def clean_excerpt(html: str, limit: int = EXCERPT_LENGTH) -> str:
    """Plain text of `html` with whitespace collapsed, cut to `limit` chars."""
    if not html:
        return ""
    text = _text(html)
    # entity-escaped markup decodes into real tags; a bare "<" in prose is kept
    for _ in range(2):
        if not _TAG.search(text):
            break
        text = _text(text)
    text = _TAG.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    return text[:limit]


def resolve_published(item: FeedItem) -> str:
    return item.iso_date or item.pub_date or now_iso()


def to_article(
    item: FeedItem,
    source: str,
    images: Optional[ImageVariants] = None,
    *,
    fp: Optional[str] = None,
) -> Article:
    """
    Convert a FeedItem into an Article.

    `images` is the result of image acquisition; None falls back to the shared
    fallback pair. `fp` may carry a fingerprint the caller already computed.
    """
    article_id = item.guid or item.link or secrets.token_hex(8)
    title = item.title or DEFAULT_TITLE
    slug = make_slug(title, article_id)

    return Article(
        id=article_id,
        fingerprint=fp or fingerprint(item),
        slug=slug,
        title=title,
        url=item.link or "#",
        source=source,
        published=resolve_published(item),
        excerpt=clean_excerpt(item.summary or item.content),
        image=images.image if images else FALLBACK_IMAGE,
        thumb=images.thumb if images else FALLBACK_THUMB,
        site_url=f"/articles/{slug}.html",
    )
