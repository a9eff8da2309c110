"""
Core data types for the publishing pipeline.

This module defines the fundamental data structures used throughout the pipeline:
- Post: A parsed, validated source document
- PostSummary: The subset of a Post shown in listing pages
- PostFailure: A source file that could not become a Post
- BuildReport: Outcome of one build run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..errors import RenderDegraded


@dataclass(frozen=True)
class Post:
    """Represents one post parsed from a source document.

    Attributes:
        title: The post headline
        slug: URL-safe identifier, unique within a collection
        date: Publication timestamp, timezone-aware and normalized to UTC
        body: Raw Markdown body (never empty)
        tags: Normalized tag set, possibly empty
        category: Optional category name
        description: Optional short description used in listings
        type: Post type from the metadata (e.g. "text")
        link: Optional external link associated with the post
        extra: Front-matter keys the pipeline does not interpret
        source: Path of the file the post was read from
    """

    title: str
    slug: str
    date: datetime
    body: str
    tags: frozenset[str] = frozenset()
    category: str | None = None
    description: str | None = None
    type: str = "text"
    link: str | None = None
    # Mapping proxies are unhashable; extra still takes part in equality
    extra: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )
    source: Path | None = field(default=None, compare=False)

    @property
    def sorted_tags(self) -> list[str]:
        return sorted(self.tags)

    def summary(self, url: str | None = None) -> PostSummary:
        return PostSummary(
            title=self.title,
            slug=self.slug,
            date=self.date,
            description=self.description,
            url=url,
        )


@dataclass(frozen=True)
class PostSummary:
    """A Post as it appears in a listing.

    Attributes:
        title: The post headline
        slug: Post identifier
        date: Publication timestamp (UTC)
        description: Optional short description
        url: Site-relative URL of the post page, when known
    """

    title: str
    slug: str
    date: datetime
    description: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "slug": self.slug,
            "date": self.date.isoformat(),
            "description": self.description,
            "url": self.url,
        }


@dataclass(frozen=True)
class PostFailure:
    """A source file rejected during parse or validation.

    Attributes:
        source: Path of the offending file
        kind: Error kind (e.g. "invalid_date")
        message: Human-readable reason
    """

    source: Path
    kind: str
    message: str


@dataclass
class BuildReport:
    """Outcome of one pipeline run.

    Attributes:
        succeeded: Slugs of posts rendered to pages
        failed: Per-file failures that did not stop the run
        degraded: Posts rendered as literal text
        fatal: Message of an error that aborted the build, if any
        fatal_kind: Error kind of the fatal error, if any
        written: Output files written, relative to the output directory
        strict: Whether per-post failures count as a failed build
    """

    succeeded: list[str] = field(default_factory=list)
    failed: list[PostFailure] = field(default_factory=list)
    degraded: list[RenderDegraded] = field(default_factory=list)
    fatal: str | None = None
    fatal_kind: str | None = None
    written: list[str] = field(default_factory=list)
    strict: bool = False

    @property
    def ok(self) -> bool:
        if self.fatal is not None:
            return False
        if self.strict and self.failed:
            return False
        return True

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def to_dict(self, relative_to: Path | None = None) -> dict[str, Any]:
        def _source(path: Path) -> str:
            if relative_to is not None:
                try:
                    return path.relative_to(relative_to).as_posix()
                except ValueError:
                    pass
            return path.as_posix()

        return {
            "ok": self.ok,
            "fatal": (
                {"kind": self.fatal_kind, "message": self.fatal}
                if self.fatal is not None
                else None
            ),
            "succeeded": list(self.succeeded),
            "failed": [
                {"source": _source(f.source), "kind": f.kind, "message": f.message}
                for f in self.failed
            ],
            "degraded": [{"slug": d.slug, "message": d.message} for d in self.degraded],
        }
