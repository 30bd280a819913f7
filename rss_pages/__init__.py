"""
rss_pages

Turns RSS/Atom feeds into a static news site: a JSON article store, one HTML
page per article and a sitemap, refreshed on a schedule.

Core ideas:
- Input: RSS/Atom feed URLs
- Process: fetch → parse → skip seen fingerprints → acquire image → normalize
  → write page → merge with the stored articles (newest first, bounded)
- Output: data/articles.json, public/articles/<slug>.html, public/sitemap.xml

Example
-------
import asyncio
from rss_pages import IngestionCycle, Settings

settings = Settings.from_env().with_overrides(
    feeds=("https://feeds.bbci.co.uk/news/world/rss.xml",),
)
result = asyncio.run(IngestionCycle(settings).run())

for article in result.new_articles:
    print(article.published, article.source, article.title)
"""
from .models import Article, FeedItem, ImageVariants, Store
from .config import Settings
from .core import CycleResult, IngestionCycle
from .scheduler import Scheduler
from .fingerprint import fingerprint, make_slug

__all__ = [
    "Article",
    "FeedItem",
    "ImageVariants",
    "Store",
    "Settings",
    "CycleResult",
    "IngestionCycle",
    "Scheduler",
    "fingerprint",
    "make_slug",
]
