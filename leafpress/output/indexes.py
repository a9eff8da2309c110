"""
Index/collection builder: listings by date, tag and category.

Listings are lazy and restartable: each iteration walks the underlying
posts again and yields fresh PostSummary records, so a listing can be
consumed by several pages (or by the JSON manifest) without being copied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

from ..core.collection import Collection, listing_order
from ..core.types import Post, PostSummary
from ..utils.text import unique_slugs


# Group pages share a directory with the overview page
RESERVED_SLUGS = ("index",)


def post_url(slug: str, posts_dir: str = "posts") -> str:
    return f"{posts_dir}/{slug}.html"


class Listing:
    """A finite, restartable sequence of PostSummary in listing order."""

    def __init__(
        self,
        name: str,
        posts: tuple[Post, ...],
        url_for: Callable[[str], str] = post_url,
        slug: str | None = None,
    ):
        self.name = name
        self.slug = slug
        self._posts = posts
        self._url_for = url_for

    def __iter__(self) -> Iterator[PostSummary]:
        for post in self._posts:
            yield post.summary(url=self._url_for(post.slug))

    def __len__(self) -> int:
        return len(self._posts)

    def __bool__(self) -> bool:
        return bool(self._posts)

    def __repr__(self) -> str:
        return f"Listing(name={self.name!r}, size={len(self._posts)})"


@dataclass
class SiteIndex:
    """All listings produced for a collection.

    Attributes:
        chronological: Every post, newest first
        by_tag: One listing per distinct tag, keyed by tag name (sorted)
        by_category: One listing per distinct category, keyed by name (sorted)
    """

    chronological: Listing
    by_tag: dict[str, Listing] = field(default_factory=dict)
    by_category: dict[str, Listing] = field(default_factory=dict)


def build_indexes(collection: Collection, posts_dir: str = "posts") -> SiteIndex:
    """Group a collection into chronological, per-tag and per-category listings."""

    def url_for(slug: str) -> str:
        return post_url(slug, posts_dir)

    ordered = tuple(listing_order(collection))
    tag_slugs = unique_slugs(collection.tags, RESERVED_SLUGS)
    category_slugs = unique_slugs(collection.categories, RESERVED_SLUGS)

    by_tag = {
        tag: Listing(
            tag,
            tuple(post for post in ordered if tag in post.tags),
            url_for,
            slug=tag_slugs[tag],
        )
        for tag in collection.tags
    }
    by_category = {
        category: Listing(
            category,
            tuple(post for post in ordered if post.category == category),
            url_for,
            slug=category_slugs[category],
        )
        for category in collection.categories
    }
    return SiteIndex(
        chronological=Listing("all", ordered, url_for),
        by_tag=by_tag,
        by_category=by_category,
    )
