"""
Collection of posts for one pipeline run.

A collection is built once every post has been constructed; it enforces
slug uniqueness and fixes the listing order (newest first, slug ascending
for equal dates).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from ..errors import DuplicateSlug
from .types import Post


def listing_order(posts: Iterable[Post]) -> list[Post]:
    """Sort posts by date descending, breaking ties by slug ascending."""
    by_slug = sorted(posts, key=lambda post: post.slug)
    # Stable sort keeps slug order among equal dates
    return sorted(by_slug, key=lambda post: post.date, reverse=True)


@dataclass(frozen=True)
class Collection:
    """An ordered, immutable sequence of posts with unique slugs."""

    posts: tuple[Post, ...] = ()

    def __iter__(self) -> Iterator[Post]:
        return iter(self.posts)

    def __len__(self) -> int:
        return len(self.posts)

    def get(self, slug: str) -> Post | None:
        for post in self.posts:
            if post.slug == slug:
                return post
        return None

    @property
    def tags(self) -> list[str]:
        return sorted({tag for post in self.posts for tag in post.tags})

    @property
    def categories(self) -> list[str]:
        return sorted({post.category for post in self.posts if post.category})


def build_collection(posts: Iterable[Post]) -> Collection:
    """Aggregate posts into a Collection.

    Raises:
        DuplicateSlug: If two posts share a slug.
    """
    seen: dict[str, Post] = {}
    for post in posts:
        existing = seen.get(post.slug)
        if existing is not None:
            raise DuplicateSlug(post.slug, existing.source, post.source)
        seen[post.slug] = post
    return Collection(posts=tuple(listing_order(seen.values())))
