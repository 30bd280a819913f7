"""Image download and WebP transcoding."""

from __future__ import annotations

import asyncio
import io
import logging
import secrets
import shutil
import string
import time
from pathlib import Path
from typing import Optional

import httpx
from PIL import Image

from .config import Settings
from .exceptions import ImageError
from .models import ImageVariants

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/data/images/"
FALLBACK_BASE = "fallback"
_BASE36 = string.digits + string.ascii_lowercase


def make_filename_base() -> str:
    """`<epoch ms>_<7 random base36 chars>`, unique across acquisitions."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{int(time.time() * 1000)}_{suffix}"


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    # WebP has no palette/CMYK modes
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() or "transparency" in img.info else "RGB")
    return img


def transcode(data: bytes, image_dir: Path, base: str, settings: Settings) -> None:
    """
    Write `<base>.webp` and `thumb_<base>.webp` from raw image bytes.

    The thumbnail is capped at `settings.thumb_width` wide; narrower images
    keep their size.
    """
    full = image_dir / f"{base}.webp"
    small = image_dir / f"thumb_{base}.webp"
    try:
        img = _open(data)
        img.save(full, "WEBP", quality=settings.image_quality)

        thumb = img
        if img.width > settings.thumb_width:
            height = max(1, round(img.height * settings.thumb_width / img.width))
            thumb = img.resize((settings.thumb_width, height), Image.Resampling.LANCZOS)
        thumb.save(small, "WEBP", quality=settings.thumb_quality)
    except Exception as e:
        # Pillow decoders raise SyntaxError, struct.error and others besides OSError
        for p in (full, small):
            p.unlink(missing_ok=True)
        raise ImageError(f"Cannot transcode image {base}: {e}") from e


async def download(client: httpx.AsyncClient, url: str, timeout: float) -> bytes:
    try:
        response = await client.get(url, timeout=timeout)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise ImageError(f"Failed to download {url}: {e}") from e
    return response.content


async def acquire_image(
    client: httpx.AsyncClient,
    url: str,
    filename_base: str,
    settings: Settings,
) -> Optional[ImageVariants]:
    """
    Download `url` and store the original plus full and thumbnail WebP variants.

    Returns None on any failure; the caller substitutes the fallback pair.
    """
    image_dir = settings.image_dir
    try:
        data = await download(client, url, settings.timeout)
        await asyncio.to_thread(transcode, data, image_dir, filename_base, settings)
        await asyncio.to_thread((image_dir / f"{filename_base}.jpg").write_bytes, data)
    except (ImageError, OSError) as e:
        logger.warning("Image acquisition failed for %s: %s", url, e)
        return None

    return ImageVariants(
        image=f"{PUBLIC_PREFIX}{filename_base}.webp",
        thumb=f"{PUBLIC_PREFIX}thumb_{filename_base}.webp",
        original=f"{PUBLIC_PREFIX}{filename_base}.jpg",
    )


def ensure_fallback(settings: Settings) -> bool:
    """
    Provision the shared fallback variants in the image directory.

    Copies the bundled fallback asset the first time and transcodes it the
    same way as downloaded images. A missing asset only logs a warning.
    Returns True when the fallback variants exist afterwards.
    """
    image_dir = settings.image_dir
    image_dir.mkdir(parents=True, exist_ok=True)
    target = image_dir / f"{FALLBACK_BASE}.jpg"
    variants = (image_dir / f"{FALLBACK_BASE}.webp", image_dir / f"thumb_{FALLBACK_BASE}.webp")

    if target.exists() and all(p.exists() for p in variants):
        return True

    source = settings.fallback_image
    if not source.exists():
        logger.warning("No fallback image found at %s", source)
        return False

    try:
        shutil.copyfile(source, target)
        transcode(target.read_bytes(), image_dir, FALLBACK_BASE, settings)
    except (ImageError, OSError) as e:
        logger.warning("Could not provision fallback image: %s", e)
        return False
    logger.info("Provisioned fallback image variants in %s", image_dir)
    return True
