"""Slug helpers shared by the post model and the index pages."""

from __future__ import annotations

import re
from typing import Iterable


SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


def slugify(value: str) -> str:
    """Convert a string to a URL-safe slug.

    Converts to lowercase, replaces non-alphanumeric characters with
    hyphens, and collapses consecutive hyphens.

    Args:
        value: The string to slugify

    Returns:
        A URL-safe slug string

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Tech & Science")
        'tech-science'
    """
    lowered = value.strip().lower()
    cleaned = []
    last_dash = False
    for ch in lowered:
        if ch.isascii() and ch.isalnum():
            cleaned.append(ch)
            last_dash = False
        else:
            # Only add dash if previous char wasn't a dash (avoid consecutive dashes)
            if not last_dash:
                cleaned.append("-")
                last_dash = True
    slug = "".join(cleaned).strip("-")
    return slug or "section"


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_RE.match(value))


def unique_slugs(names: Iterable[str], reserved: Iterable[str] = ()) -> dict[str, str]:
    """Assign each name a distinct slug, suffixing collisions with -2, -3, ...

    Names are processed in sorted order so the assignment is stable across runs.
    Slugs in ``reserved`` are never handed out.
    """
    taken: set[str] = set(reserved)
    assigned: dict[str, str] = {}
    for name in sorted(set(names)):
        base = slugify(name)
        candidate = base
        count = 1
        while candidate in taken:
            count += 1
            candidate = f"{base}-{count}"
        taken.add(candidate)
        assigned[name] = candidate
    return assigned
