"""
Text, date and identifier helpers shared by the parsers.

Responsibility: Normalize scraped strings into stable values
"""

import re
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union
from urllib.parse import urljoin

from dateutil import parser as date_parser
from dateutil import tz

from .hash_utils import short_hash

DEFAULT_TIMEZONE = "America/Chicago"

_WHITESPACE_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-z0-9-]")
_DASH_RUN_RE = re.compile(r"-+")

IdPart = Union[str, int, date, datetime, None]


def safe_text(value: Optional[str]) -> str:
    """Trim and collapse internal whitespace; None becomes an empty string"""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value.strip())


def normalize_date(value: Optional[str], timezone_name: str = DEFAULT_TIMEZONE) -> Optional[datetime]:
    """
    Parse a human-written date/time into a naive UTC datetime.

    Inputs without an explicit offset are read in ``timezone_name``
    (the local time of the publishing government). Unparseable input
    returns None.

    Example:
        >>> normalize_date("January 15, 2025 10:00 AM")
        datetime.datetime(2025, 1, 15, 16, 0)
    """
    text = safe_text(value)
    if not text:
        return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz.gettz(timezone_name))

    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def parse_day(value: Optional[str]) -> Optional[date]:
    """Parse a calendar date, ignoring any time component"""
    text = safe_text(value)
    if not text:
        return None
    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError):
        return None


def _part_to_text(part: IdPart) -> str:
    if isinstance(part, datetime):
        return part.date().isoformat()
    if isinstance(part, date):
        return part.isoformat()
    return str(part)


def create_external_id(parts: Iterable[IdPart]) -> str:
    """
    Build a stable slug identifier from the given parts.

    None parts are skipped; dates contribute their ISO day. If nothing
    survives slugging, a short digest of the raw parts is used instead.

    Example:
        >>> create_external_id(["austin-meeting", "Jan 15, 2025", "Regular Meeting"])
        'austin-meeting-jan-15-2025-regular-meeting'
    """
    parts = list(parts)
    joined = "-".join(_part_to_text(p) for p in parts if p is not None).lower()
    slug = _DASH_RUN_RE.sub("-", _NON_SLUG_RE.sub("-", joined)).strip("-")
    if slug:
        return slug
    return short_hash("".join(_part_to_text(p) for p in parts if p is not None))


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve a possibly relative link against the page it came from"""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("javascript:", "mailto:", "#")):
        return None
    return urljoin(base_url, href)


def truncate(value: Optional[str], limit: int) -> str:
    if not value:
        return ""
    return value if len(value) <= limit else value[:limit]
