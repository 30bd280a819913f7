from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError

DEFAULT_FEEDS = (
    "https://feeds.bbci.co.uk/news/world/rss.xml",
    "https://rss.nytimes.com/services/xml/rss/nyt/World.xml",
)


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def _feeds(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw or not raw.strip():
        return DEFAULT_FEEDS
    return tuple(u for u in (p.strip() for p in re.split(r"[,\s]+", raw)) if u)


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    `from_env` reads the environment (after loading a `.env` file if present);
    every option has a default so an empty environment is a valid setup.
    """
    feeds: Tuple[str, ...] = DEFAULT_FEEDS
    timeout_ms: int = 15000
    port: int = 3000  # consumed by the static server that serves public_dir/data_dir
    data_dir: Path = Path("data")
    public_dir: Path = Path("public")
    image_quality: int = 75
    thumb_quality: int = 70
    thumb_width: int = 400
    max_items_per_feed: int = 20
    max_articles: int = 1000
    sitemap_limit: int = 500
    schedule_minutes: int = 15
    site_base_url: str = ""
    user_agent: str = "rss-pages/1.0 (RSS reader)"
    log_level: str = "INFO"
    fallback_source: Optional[Path] = field(default=None)

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        fallback = os.getenv("FALLBACK_IMAGE")
        schedule_minutes = _int("SCHEDULE_MINUTES", 15)
        if schedule_minutes < 1:
            raise ConfigError("SCHEDULE_MINUTES must be at least 1")
        return cls(
            feeds=_feeds(os.getenv("FEEDS")),
            timeout_ms=_int("HTTP_TIMEOUT_MS", 15000),
            port=_int("PORT", 3000),
            data_dir=Path(os.getenv("DATA_DIR", "data")),
            public_dir=Path(os.getenv("PUBLIC_DIR", "public")),
            image_quality=_int("IMAGE_QUALITY", 75),
            thumb_quality=_int("THUMB_QUALITY", 70),
            thumb_width=_int("THUMB_WIDTH", 400),
            max_items_per_feed=_int("MAX_ITEMS_PER_FEED", 20),
            max_articles=_int("MAX_ARTICLES", 1000),
            sitemap_limit=_int("SITEMAP_LIMIT", 500),
            schedule_minutes=schedule_minutes,
            site_base_url=os.getenv("SITE_BASE_URL", "").rstrip("/"),
            user_agent=os.getenv("USER_AGENT", cls.user_agent),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            fallback_source=Path(fallback) if fallback else None,
        )

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def image_dir(self) -> Path:
        return self.data_dir / "images"

    @property
    def store_file(self) -> Path:
        return self.data_dir / "articles.json"

    @property
    def articles_dir(self) -> Path:
        return self.public_dir / "articles"

    @property
    def sitemap_file(self) -> Path:
        return self.public_dir / "sitemap.xml"

    @property
    def fallback_image(self) -> Path:
        return self.fallback_source or self.public_dir / "assets" / "fallback.jpg"
