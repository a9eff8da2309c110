"""
Document model builder: turns parsed metadata plus body text into a Post.

Validation happens here rather than in the parser so the same rules apply
to posts built from any source (files, tests, other tooling).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, timedelta, tzinfo
from pathlib import Path
from types import MappingProxyType
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import InvalidDate, MalformedFrontMatter, MissingRequiredField
from ..utils.text import is_valid_slug
from .types import Post


KNOWN_KEYS = frozenset(
    {"title", "slug", "date", "tags", "category", "link", "description", "type"}
)

# "2024-01-31 14:09:07 UTC+05:30", "2024-01-31 14:09 UTC", "2024-01-31 14:09:07"
_UTC_STYLE_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:[ T](?P<time>\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?))?"
    r"(?:\s*(?:UTC|GMT)(?:\s*(?P<sign>[+-])(?P<hh>\d{1,2})(?::?(?P<mm>\d{2}))?)?)?$",
    re.IGNORECASE,
)


def normalize_tags(raw: str | None) -> frozenset[str]:
    """Split a tag string into a set of trimmed, non-empty tags.

    Comma-separated when the value contains a comma ("async, event loop"),
    whitespace-separated otherwise ("python asyncio").
    """
    if not raw:
        return frozenset()
    parts = raw.split(",") if "," in raw else raw.split()
    return frozenset(part.strip() for part in parts if part.strip())


def parse_post_date(raw: str, default_tz: str = "UTC") -> datetime:
    """Parse a post date into a timezone-aware UTC datetime.

    Accepts the ``YYYY-MM-DD HH:MM:SS UTC+HH:MM`` form written by blog
    engines, ISO 8601 (``Z`` or numeric offsets), and bare dates. Values
    without an offset are interpreted in ``default_tz``.

    Raises:
        InvalidDate: If the value matches none of the accepted forms, or
            falls outside the representable range once converted to UTC.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidDate(raw)

    parsed = _parse_utc_style(value)
    if parsed is None:
        iso = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
        try:
            parsed = datetime.fromisoformat(iso)
        except ValueError as exc:
            raise InvalidDate(raw) from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=_resolve_timezone(default_tz))
    # Offsets near year 1 or 9999 can push the UTC value out of range
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError) as exc:
        raise InvalidDate(raw) from exc


def _parse_utc_style(value: str) -> datetime | None:
    match = _UTC_STYLE_RE.match(value)
    if match is None:
        return None
    hour, rest = (match.group("time") or "00:00").split(":", 1)
    if ":" not in rest:
        rest += ":00"
    try:
        parsed = datetime.fromisoformat(f"{match.group('date')}T{int(hour):02d}:{rest}")
    except ValueError as exc:
        raise InvalidDate(value) from exc

    has_utc_marker = bool(re.search(r"UTC|GMT", value, re.IGNORECASE))
    if match.group("sign"):
        hours = int(match.group("hh"))
        minutes = int(match.group("mm") or 0)
        if hours > 23 or minutes > 59:
            raise InvalidDate(value)
        delta = timedelta(hours=hours, minutes=minutes)
        if match.group("sign") == "-":
            delta = -delta
        return parsed.replace(tzinfo=timezone(delta))
    if has_utc_marker:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def build_post(
    metadata: Mapping[str, str],
    body: str,
    source: Path | None = None,
    unknown_keys: str = "preserve",
    default_tz: str = "UTC",
) -> Post:
    """Validate metadata and construct an immutable Post.

    Args:
        metadata: Parsed front-matter mapping (lower-case keys)
        body: Markdown body text
        source: File the post came from
        unknown_keys: "preserve", "ignore" or "reject" for keys outside KNOWN_KEYS
        default_tz: Zone for dates without an explicit offset

    Returns:
        The constructed Post

    Raises:
        MissingRequiredField: title, slug, date or body is missing
        MalformedFrontMatter: slug is not URL-safe, or an unknown key is
            present under the "reject" policy
        InvalidDate: date cannot be parsed
    """
    title = (metadata.get("title") or "").strip()
    slug = (metadata.get("slug") or "").strip()
    if not title:
        raise MissingRequiredField("title")
    if not slug:
        raise MissingRequiredField("slug")
    if not is_valid_slug(slug):
        raise MalformedFrontMatter(f"slug {slug!r} is not URL-safe")

    raw_date = (metadata.get("date") or "").strip()
    if not raw_date:
        raise MissingRequiredField("date")
    date = parse_post_date(raw_date, default_tz)

    if not body.strip():
        raise MissingRequiredField("body")

    extra = {k: v for k, v in metadata.items() if k not in KNOWN_KEYS}
    if extra and unknown_keys == "reject":
        raise MalformedFrontMatter(f"unknown keys: {', '.join(sorted(extra))}")
    if unknown_keys != "preserve":
        extra = {}

    return Post(
        title=title,
        slug=slug,
        date=date,
        body=body.rstrip(),
        tags=normalize_tags(metadata.get("tags")),
        category=(metadata.get("category") or "").strip() or None,
        description=(metadata.get("description") or "").strip() or None,
        type=(metadata.get("type") or "").strip() or "text",
        link=(metadata.get("link") or "").strip() or None,
        extra=MappingProxyType(extra),
        source=source,
    )
