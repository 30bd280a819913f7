"""Static article pages and the sitemap."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timezone
from pathlib import Path
from typing import Iterable, List
from urllib.parse import urlparse

from jinja2 import Environment, PackageLoader, select_autoescape

from .dates import iso_or_raw, parse_timestamp
from .models import Article
from .normalizer import FALLBACK_IMAGE

logger = logging.getLogger(__name__)

SITEMAP_LIMIT = 500
PAGE_LANG = "en"
READ_MORE = "Read the original"

env = Environment(
    loader=PackageLoader("rss_pages", "templates"),
    autoescape=select_autoescape(["html", "xml"]),
)


def safe_url(url: str) -> str:
    """Keep http(s) and site-relative URLs; anything else becomes `#`."""
    url = (url or "").strip()
    if not url:
        return "#"
    scheme = urlparse(url).scheme.lower()
    if scheme in ("http", "https") or (not scheme and not url.startswith("//")):
        return url
    return "#"


def _byline_time(published: str) -> str:
    dt = parse_timestamp(published)
    if dt is None:
        return published
    try:
        return dt.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    except (ValueError, OverflowError):
        return published


def render_article(article: Article) -> str:
    safe = replace(article, url=safe_url(article.url))
    return env.get_template("article.html").render(
        article=safe,
        image=safe_url(article.image or FALLBACK_IMAGE),
        published=iso_or_raw(article.published),
        byline_time=_byline_time(article.published),
        lang=PAGE_LANG,
        read_more=READ_MORE,
    )


def write_article_page(article: Article, articles_dir: Path) -> Path:
    """Write `<articles_dir>/<slug>.html`, replacing any previous version."""
    articles_dir.mkdir(parents=True, exist_ok=True)
    path = articles_dir / f"{article.slug}.html"
    path.write_text(render_article(article), encoding="utf-8")
    return path


def sitemap_entries(articles: Iterable[Article], base_url: str = "") -> List[dict]:
    return [
        {
            "loc": f"{base_url}{a.site_url or f'/articles/{a.slug}.html'}",
            "lastmod": iso_or_raw(a.published),
        }
        for a in articles
    ]


def render_sitemap(articles: Iterable[Article], base_url: str = "") -> str:
    return env.get_template("sitemap.xml").render(entries=sitemap_entries(articles, base_url))


def write_sitemap(
    articles: Iterable[Article],
    path: Path,
    *,
    limit: int = SITEMAP_LIMIT,
    base_url: str = "",
) -> Path:
    """Write the sitemap for the first `limit` articles in store order."""
    top = list(articles)[:limit]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_sitemap(top, base_url), encoding="utf-8")
    logger.info("Wrote sitemap with %d urls to %s", len(top), path)
    return path
