"""Read and write the article store snapshot (`articles.json`)."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from .dates import now_iso
from .exceptions import ParseError, StoreError
from .models import Article, Store

logger = logging.getLogger(__name__)


def read_store(path: Path) -> Store:
    """
    Read a snapshot, raising StoreError when the file is not a snapshot.

    Individual malformed article records are skipped with a warning.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise StoreError(f"Cannot read store {path}: {e}") from e

    if not isinstance(data, dict):
        raise StoreError(f"Store {path} is not a JSON object")
    records = data.get("articles") or []
    if not isinstance(records, list):
        raise StoreError(f"Store {path} has a non-list 'articles' field")

    articles: List[Article] = []
    for i, record in enumerate(records):
        try:
            articles.append(Article.from_dict(record))
        except ParseError as e:
            logger.warning("Skipping stored article #%d: %s", i, e)
    generated = data.get("generated")
    return Store(generated=generated if isinstance(generated, str) else None, articles=articles)


def load_store(path: Path) -> Store:
    """Load the prior snapshot; a missing or unreadable file is an empty store."""
    if not path.exists():
        return Store()
    try:
        return read_store(path)
    except StoreError as e:
        logger.warning("%s; starting from an empty store", e)
        return Store()


def save_store(path: Path, articles: Iterable[Article], generated: Optional[str] = None) -> Store:
    """
    Write a snapshot through a temp file in the same directory and rename it
    into place, so readers never see a half-written file.
    """
    store = Store(generated=generated or now_iso(), articles=list(articles))
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(store.to_dict(), f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.info("Wrote %d articles to %s", len(store.articles), path)
    return store
