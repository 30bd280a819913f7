"""Timestamp helpers."""

from __future__ import annotations

import calendar
import time
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser

# Timezone abbreviations seen in RSS pubDate strings
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
}

OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def to_iso(dt: datetime) -> str:
    """Render `dt` in UTC as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def struct_time_to_iso(value: time.struct_time) -> str:
    # feedparser normalizes *_parsed values to UTC
    return to_iso(datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc))


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 or RFC 822 timestamp; None when it cannot be read."""
    if not value:
        return None
    try:
        dt = date_parser.parse(value, tzinfos=TZINFOS)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sort_key(value: Optional[str]) -> datetime:
    """Sort key for a stored timestamp; unreadable values sort as oldest."""
    return parse_timestamp(value) or OLDEST


def iso_or_raw(value: Optional[str]) -> str:
    dt = parse_timestamp(value)
    if dt is not None:
        try:
            return to_iso(dt)
        except (ValueError, OverflowError):
            # e.g. year 9999 with a negative offset is past datetime.max in UTC
            pass
    return value or ""
