"""
Error taxonomy for the publishing pipeline.

Per-post errors (front-matter and date problems) are collected by the runner
and reported per file. ``DuplicateSlug`` is fatal for a whole build since
page URLs would be ambiguous. ``RenderDegraded`` is never raised: it records
a post whose Markdown could not be rendered and was emitted as literal text.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class LeafpressError(Exception):
    """Base class for all pipeline errors."""

    kind = "error"


class FrontMatterError(LeafpressError):
    """Base class for problems found while reading a single post."""


class MalformedFrontMatter(FrontMatterError):
    """A metadata line does not match ``.. key: value`` or the block is broken."""

    kind = "malformed_front_matter"

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class MissingRequiredField(FrontMatterError):
    """A required field (title, slug, body) is absent or empty."""

    kind = "missing_required_field"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing required field: {field}")


class InvalidDate(FrontMatterError):
    """The ``date`` value cannot be parsed into a timestamp."""

    kind = "invalid_date"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"unparsable date: {value!r}")


class DuplicateSlug(LeafpressError):
    """Two posts in one collection share a slug."""

    kind = "duplicate_slug"

    def __init__(self, slug: str, first: Path | None, second: Path | None):
        self.slug = slug
        self.sources = (first, second)
        super().__init__(f"duplicate slug {slug!r}: {first} and {second}")


@dataclass(frozen=True)
class RenderDegraded:
    """A post rendered as literal text because its Markdown failed to render."""

    slug: str
    message: str

    kind = "render_degraded"
