from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional, Set
from urllib.parse import urljoin

import httpx

from .config import Settings
from .dedup import build_seen_set, merge_articles
from .exceptions import RSSFetchError
from .fetcher import Feed, fetch_feed
from .fingerprint import fingerprint
from .images import acquire_image, ensure_fallback, make_filename_base
from .models import Article
from .normalizer import extract_image_url, to_article
from .pages import write_article_page, write_sitemap
from .parser import parse_entry
from .store import load_store, save_store

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    new_articles: List[Article] = field(default_factory=list)
    total_articles: int = 0
    failed_feeds: List[str] = field(default_factory=list)
    generated: Optional[str] = None


class IngestionCycle:
    """
    One full ingestion run.

    Pipeline: load store → fetch each feed → parse → skip seen fingerprints →
    acquire image → build article → write page → merge → save store → sitemap

    `run` never raises: feed and item failures are logged and skipped, and an
    unexpected error ends the cycle with an empty result.
    """

    def __init__(self, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self._client = client

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
            timeout=self.settings.timeout,
        ) as client:
            yield client

    def prepare(self) -> None:
        s = self.settings
        for d in (s.data_dir, s.image_dir, s.public_dir, s.articles_dir):
            d.mkdir(parents=True, exist_ok=True)
        ensure_fallback(s)

    async def run(self) -> CycleResult:
        try:
            return await self._run()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Ingestion cycle failed")
            return CycleResult()

    async def _run(self) -> CycleResult:
        s = self.settings
        await asyncio.to_thread(self.prepare)

        prior = await asyncio.to_thread(load_store, s.store_file)
        seen = build_seen_set(prior.articles)
        result = CycleResult()

        async with self._http() as client:
            for url in s.feeds:
                try:
                    feed = await fetch_feed(client, url, timeout=s.timeout)
                except RSSFetchError as e:
                    logger.warning("Skipping feed: %s", e)
                    result.failed_feeds.append(url)
                    continue
                articles = await self.process_feed(client, feed, seen)
                logger.info("Feed %s: %d new articles", feed.title, len(articles))
                result.new_articles.extend(articles)

        merged = merge_articles(result.new_articles, prior.articles, s.max_articles)
        store = await asyncio.to_thread(save_store, s.store_file, merged)
        result.total_articles = len(store.articles)
        result.generated = store.generated

        try:
            await asyncio.to_thread(
                write_sitemap,
                store.articles,
                s.sitemap_file,
                limit=s.sitemap_limit,
                base_url=s.site_base_url,
            )
        except (OSError, ValueError, OverflowError) as e:
            logger.warning("Could not write sitemap: %s", e)

        logger.info(
            "Cycle done: %d new, %d stored, %d feeds failed",
            len(result.new_articles), result.total_articles, len(result.failed_feeds),
        )
        return result

    async def process_feed(self, client: httpx.AsyncClient, feed: Feed, seen: Set[str]) -> List[Article]:
        """
        Turn the first `max_items_per_feed` entries of `feed` into new articles.

        `seen` is updated in place so later feeds in the same cycle skip the
        same items.
        """
        out: List[Article] = []
        for entry in feed.entries[: self.settings.max_items_per_feed]:
            try:
                article = await self.process_entry(client, entry, feed.title, seen)
            except Exception as e:
                logger.warning("Skipping entry from %s: %s", feed.url, e)
                continue
            if article is not None:
                out.append(article)
        return out

    async def process_entry(self, client: httpx.AsyncClient, entry, source: str, seen: Set[str]) -> Optional[Article]:
        s = self.settings
        item = parse_entry(entry)
        fp = fingerprint(item)
        # checked before any image download
        if fp in seen:
            return None

        images = None
        image_url = extract_image_url(item)
        if image_url:
            if item.link:
                image_url = urljoin(item.link, image_url)
            images = await acquire_image(client, image_url, make_filename_base(), s)

        article = to_article(item, source, images, fp=fp)
        seen.add(fp)

        try:
            await asyncio.to_thread(write_article_page, article, s.articles_dir)
        except Exception as e:
            logger.warning("Could not write page for %s: %s", article.slug, e)
        return article
