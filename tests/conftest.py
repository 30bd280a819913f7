"""Shared fixtures: isolated settings, generated images, canned feeds."""

import asyncio
import io
from typing import Callable, Dict, Iterable, Optional

import httpx
import pytest
from PIL import Image

from rss_pages.config import Settings
from rss_pages.core import CycleResult, IngestionCycle

FEED_URL = "https://feeds.test/world.xml"


def jpeg(width: int = 800, height: int = 600, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, "JPEG")
    return buf.getvalue()


def rss_item(
    title: str,
    link: str,
    pub_date: Optional[str] = None,
    description: str = "",
    guid: Optional[str] = None,
    enclosure: Optional[str] = None,
) -> str:
    parts = [f"<title>{title}</title>", f"<link>{link}</link>"]
    if pub_date:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    if guid:
        parts.append(f'<guid isPermaLink="false">{guid}</guid>')
    if enclosure:
        parts.append(f'<enclosure url="{enclosure}" type="image/jpeg" length="1"/>')
    if description:
        parts.append(f"<description><![CDATA[{description}]]></description>")
    return "<item>" + "".join(parts) + "</item>"


def rss_feed(items: Iterable[str], title: str = "Test Wire") -> bytes:
    body = "".join(items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://feeds.test/</link><description>test</description>"
        f"{body}</channel></rss>"
    ).encode("utf-8")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        feeds=(FEED_URL,),
        data_dir=tmp_path / "data",
        public_dir=tmp_path / "public",
    )


@pytest.fixture
def jpeg_bytes() -> bytes:
    return jpeg()


@pytest.fixture
def fallback_asset(settings) -> None:
    path = settings.fallback_image
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(jpeg(640, 480, (90, 90, 90)))


class Routes:
    """URL → response table for httpx.MockTransport; records every request."""

    def __init__(self, table: Dict[str, object]) -> None:
        self.table = table
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        value = self.table.get(url)
        if value is None:
            return httpx.Response(404)
        if isinstance(value, httpx.Response):
            return value
        if isinstance(value, int):
            return httpx.Response(value)
        if isinstance(value, Exception):
            raise value
        return httpx.Response(200, content=value)

    def hits(self, url: str) -> int:
        return self.requests.count(url)


@pytest.fixture
def run_cycle() -> Callable[[Settings, Routes], CycleResult]:
    def _run(settings: Settings, routes: Routes) -> CycleResult:
        async def go() -> CycleResult:
            async with httpx.AsyncClient(transport=httpx.MockTransport(routes)) as client:
                return await IngestionCycle(settings, client=client).run()

        return asyncio.run(go())

    return _run
