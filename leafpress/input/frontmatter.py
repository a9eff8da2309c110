"""
Front-matter parser for ``.. key: value`` metadata blocks.

A post starts with an optional metadata block wrapped in a comment so that
Markdown renderers ignore it:

    <!--
    .. title: Understanding Promises
    .. slug: understanding-promises
    .. date: 2024-01-31 14:09:07 UTC+05:30
    .. tags: javascript, async
    -->

    Body text...

The block must come before any body content. Blank lines inside the block
are skipped; every other line must be a key line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..errors import MalformedFrontMatter, MissingRequiredField


KEY_LINE_RE = re.compile(r"^\.\.\s+([A-Za-z0-9_-]+):\s*(.*)$")

DEFAULT_REQUIRED = ("title", "slug")


@dataclass(frozen=True)
class FrontMatter:
    """Parsed metadata and the body that follows it.

    Attributes:
        metadata: Key/value pairs in source order; keys are lower case
        body: Document text after the block
        body_line: 1-based line number where the body starts
        body_offset: Character offset where the body starts
    """

    metadata: dict[str, str] = field(default_factory=dict)
    body: str = ""
    body_line: int = 1
    body_offset: int = 0


def parse_front_matter(
    text: str,
    open_marker: str = "<!--",
    close_marker: str = "-->",
    required: Iterable[str] = DEFAULT_REQUIRED,
) -> FrontMatter:
    """Split a document into its metadata block and body.

    Args:
        text: Raw document text
        open_marker: Line that opens the block
        close_marker: Line that closes the block
        required: Keys that must be present with a non-empty value

    Returns:
        FrontMatter with the metadata mapping, body and body position

    Raises:
        MalformedFrontMatter: A block line is not ``.. key: value``, a key is
            repeated, or the block is never closed
        MissingRequiredField: A required key is absent or empty
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)

    index = 0
    while index < len(lines) and not lines[index].strip():
        index += 1

    metadata: dict[str, str] = {}
    if index < len(lines) and lines[index].strip() == open_marker:
        index = _read_block(lines, index + 1, close_marker, metadata)
        # Skip blank separator lines between block and body
        while index < len(lines) and not lines[index].strip():
            index += 1
    else:
        index = 0

    for key in required:
        if not metadata.get(key):
            raise MissingRequiredField(key)

    offset = sum(len(line) for line in lines[:index])
    return FrontMatter(
        metadata=metadata,
        body="".join(lines[index:]),
        body_line=index + 1,
        body_offset=offset,
    )


def _read_block(
    lines: list[str], start: int, close_marker: str, metadata: dict[str, str]
) -> int:
    """Fill ``metadata`` from block lines; return the index after the close marker."""
    for index in range(start, len(lines)):
        line = lines[index].rstrip("\r\n")
        if line.strip() == close_marker:
            return index + 1
        if not line.strip():
            continue
        match = KEY_LINE_RE.match(line.strip())
        if match is None:
            raise MalformedFrontMatter(f"expected '.. key: value', got {line.strip()!r}", index + 1)
        key = match.group(1).lower()
        if key in metadata:
            raise MalformedFrontMatter(f"duplicate key {key!r}", index + 1)
        metadata[key] = (match.group(2) or "").strip()
    raise MalformedFrontMatter(f"metadata block is not closed with {close_marker!r}", start)


def serialize_front_matter(
    metadata: Mapping[str, str],
    open_marker: str = "<!--",
    close_marker: str = "-->",
) -> str:
    """Write a metadata mapping back as a block.

    Keys are written in lower case, as the parser reads them. Values must be
    single-line; parsing the result yields the same mapping.
    """
    out = [open_marker]
    seen: set[str] = set()
    for key, value in metadata.items():
        if not KEY_LINE_RE.match(f".. {key}: x"):
            raise ValueError(f"invalid front-matter key: {key!r}")
        key = key.lower()
        if key in seen:
            raise ValueError(f"duplicate front-matter key: {key!r}")
        seen.add(key)
        value = str(value).strip()
        if "\n" in value or "\r" in value:
            raise ValueError(f"front-matter value for {key!r} spans lines")
        out.append(f".. {key}: {value}" if value else f".. {key}:")
    out.append(close_marker)
    return "\n".join(out) + "\n"
