"""
Core domain models and business logic.

This package contains data types and business logic that is
independent of any specific pipeline stage.
"""

from .types import BuildReport, Post, PostFailure, PostSummary
from .post import build_post, normalize_tags, parse_post_date
from .collection import Collection, build_collection, listing_order

__all__ = [
    "Post",
    "PostSummary",
    "PostFailure",
    "BuildReport",
    "build_post",
    "normalize_tags",
    "parse_post_date",
    "Collection",
    "build_collection",
    "listing_order",
]
