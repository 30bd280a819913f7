from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .exceptions import ParseError

FALLBACK_IMAGE = "/data/images/fallback.webp"
FALLBACK_THUMB = "/data/images/thumb_fallback.webp"


@dataclass(frozen=True)
class FeedItem:
    """
    One feed entry reduced to the fields the pipeline reads.

    RSS and Atom entries expose images, bodies and dates under different keys;
    `rss_pages.parser.parse_entry` resolves them into this single shape so
    nothing downstream has to inspect raw entries.
    """
    title: str = ""
    link: str = ""
    pub_date: str = ""
    iso_date: Optional[str] = None
    guid: Optional[str] = None
    enclosure_url: Optional[str] = None
    content: str = ""
    summary: str = ""
    media_url: Optional[str] = None


@dataclass(frozen=True)
class ImageVariants:
    """Public paths of the files stored for one acquired image."""
    image: str
    thumb: str
    original: str


# JSON key for each Article attribute, in snapshot order.
_ARTICLE_KEYS = (
    ("id", "id"),
    ("fingerprint", "fingerprint"),
    ("slug", "slug"),
    ("title", "title"),
    ("url", "url"),
    ("source", "source"),
    ("published", "published"),
    ("excerpt", "excerpt"),
    ("image", "image"),
    ("thumb", "thumb"),
    ("site_url", "siteUrl"),
)

# Records without these cannot be deduplicated or linked; the rest get defaults.
_REQUIRED_KEYS = ("fingerprint", "slug", "published")


@dataclass(frozen=True)
class Article:
    """
    Stable public model of a stored article.

    WARNING: Do not change fields lightly. The JSON form produced by `to_dict`
    is read by the static server and the browser client.
    """
    id: str
    fingerprint: str
    slug: str
    title: str
    url: str
    source: str
    published: str
    excerpt: str
    image: str
    thumb: str
    site_url: str

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in _ARTICLE_KEYS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Article":
        if not isinstance(data, Mapping):
            raise ParseError(f"Article record must be an object, got {type(data).__name__}")
        missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
        if missing:
            raise ParseError(f"Article record lacks fields: {', '.join(missing)}")
        values = {attr: data.get(key) for attr, key in _ARTICLE_KEYS}
        values["id"] = values["id"] or values["fingerprint"]
        values["title"] = values["title"] or "Untitled"
        values["url"] = values["url"] or "#"
        values["image"] = values["image"] or FALLBACK_IMAGE
        values["thumb"] = values["thumb"] or FALLBACK_THUMB
        values["site_url"] = values["site_url"] or f"/articles/{values['slug']}.html"
        return cls(**{k: "" if v is None else str(v) for k, v in values.items()})


@dataclass(frozen=True)
class Store:
    """A snapshot of the article store: generation time plus ordered articles."""
    generated: Optional[str] = None
    articles: List[Article] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated": self.generated,
            "articles": [a.to_dict() for a in self.articles],
        }
