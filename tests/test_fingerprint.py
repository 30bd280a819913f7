"""Tests for rss_pages.fingerprint module."""

import hashlib

from rss_pages.fingerprint import fingerprint, make_slug, slugify
from rss_pages.models import FeedItem


class TestFingerprint:
    def test_deterministic_output(self) -> None:
        item = {"title": "Storm hits coast", "link": "https://x/1", "pub_date": "2024-01-01T00:00:00Z"}
        assert fingerprint(item) == fingerprint(dict(item))

    def test_matches_sha256_of_joined_fields(self) -> None:
        item = FeedItem(title="A", link="https://x/1", pub_date="Mon, 01 Jan 2024 00:00:00 GMT")
        expected = hashlib.sha256(b"A|https://x/1|Mon, 01 Jan 2024 00:00:00 GMT").hexdigest()
        assert fingerprint(item) == expected

    def test_missing_fields_are_empty_strings(self) -> None:
        assert fingerprint({}) == hashlib.sha256(b"||").hexdigest()
        assert fingerprint({"title": None, "link": "l"}) == hashlib.sha256(b"|l|").hexdigest()

    def test_feed_item_and_mapping_agree(self) -> None:
        item = FeedItem(title="t", link="l", pub_date="d")
        assert fingerprint(item) == fingerprint({"title": "t", "link": "l", "pub_date": "d"})

    def test_each_field_changes_output(self) -> None:
        base = {"title": "t", "link": "l", "pub_date": "d"}
        variants = [
            {**base, "title": "t2"},
            {**base, "link": "l2"},
            {**base, "pub_date": "d2"},
        ]
        fps = {fingerprint(base)} | {fingerprint(v) for v in variants}
        assert len(fps) == 4

    def test_ignores_other_fields(self) -> None:
        a = FeedItem(title="t", link="l", pub_date="d", summary="one", guid="1")
        b = FeedItem(title="t", link="l", pub_date="d", summary="two", guid="2")
        assert fingerprint(a) == fingerprint(b)


class TestMakeSlug:
    def test_same_inputs_same_slug(self) -> None:
        assert make_slug("Storm hits coast", "guid-1") == make_slug("Storm hits coast", "guid-1")

    def test_same_title_different_ids(self) -> None:
        assert make_slug("Storm hits coast", "guid-1") != make_slug("Storm hits coast", "guid-2")

    def test_format(self) -> None:
        slug = make_slug("Storm hits coast!", "guid-1")
        digest = hashlib.md5(b"guid-1").hexdigest()[:8]
        assert slug == f"storm-hits-coast-{digest}"

    def test_falls_back_to_title_hash(self) -> None:
        digest = hashlib.md5(b"Hello").hexdigest()[:8]
        assert make_slug("Hello", None) == f"hello-{digest}"

    def test_filesystem_safe(self) -> None:
        slug = make_slug('Ça va? <script>/../"etc"', "x")
        assert all(c.isalnum() or c == "-" for c in slug)
        assert slug.startswith("ca-va-script-etc-")

    def test_empty_title(self) -> None:
        assert make_slug("", "id").startswith("article-")
        assert make_slug("!!!", "id").startswith("article-")

    def test_prefix_is_bounded(self) -> None:
        slug = make_slug("word " * 100, "id")
        prefix = slug.rsplit("-", 1)[0]
        assert len(prefix) <= 80
        assert not prefix.endswith("-")


class TestSlugify:
    def test_collapses_runs(self) -> None:
        assert slugify("  Hello,   World -- again ") == "hello-world-again"
