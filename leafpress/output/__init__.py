"""Output rendering: Markdown bodies, pages, listings and manifests."""

from .indexes import Listing, SiteIndex, build_indexes, post_url
from .manifest import manifest_payload, write_manifest, write_report
from .markdown import RenderResult, check_extensions, render_markdown
from .renderer import (
    render_groups_page,
    render_listing_page,
    render_post_page,
    root_for,
    write_page,
)

__all__ = [
    "Listing",
    "SiteIndex",
    "build_indexes",
    "post_url",
    "manifest_payload",
    "write_manifest",
    "write_report",
    "RenderResult",
    "check_extensions",
    "render_markdown",
    "render_groups_page",
    "render_listing_page",
    "render_post_page",
    "root_for",
    "write_page",
]
