"""
Page rendering for posts and listings.

This module fills Jinja2 templates with post metadata and rendered Markdown.
Pages carry no build-time values (no generation timestamps), so rebuilding
unchanged input yields byte-identical files.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape

from ..config import OutputConfig, RenderConfig
from ..core.types import Post
from .indexes import Listing


BUNDLED_TEMPLATES = Path(__file__).parent / "templates"


@lru_cache(maxsize=8)
def _environment(template_dir: str | None, date_format: str) -> Environment:
    """Build a Jinja2 environment; a user template dir overrides bundled files."""
    loaders = []
    if template_dir:
        loaders.append(FileSystemLoader(template_dir))
    loaders.append(FileSystemLoader(str(BUNDLED_TEMPLATES)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )

    def datefmt(value: datetime) -> str:
        return value.strftime(date_format)

    env.filters["datefmt"] = datefmt
    return env


def root_for(subdir: str) -> str:
    """Relative prefix from a page in ``subdir`` back to the site root."""
    return "../" * len(Path(subdir).parts)


def get_environment(render: RenderConfig) -> Environment:
    return _environment(render.template_dir, render.date_format)


def render_post_page(
    post: Post,
    body_html: str,
    render: RenderConfig,
    output: OutputConfig,
    tag_slugs: Mapping[str, str],
    category_slugs: Mapping[str, str],
) -> str:
    """Render one post page.

    Args:
        post: The post to render
        body_html: Rendered Markdown body, inserted without escaping
        render: Render settings (site title, date format, templates)
        output: Output layout, used for links to tag and category pages
        tag_slugs: Tag name to page slug
        category_slugs: Category name to page slug

    Returns:
        The page markup
    """
    template = get_environment(render).get_template("post.html")
    root = root_for(output.posts_dir)
    return template.render(
        **_site_context(render, output, root),
        post=post,
        body_html=body_html,
        tags=[
            {"name": tag, "url": f"{root}{output.tags_dir}/{tag_slugs[tag]}.html"}
            for tag in post.sorted_tags
        ],
        category=(
            {
                "name": post.category,
                "url": f"{root}{output.categories_dir}/{category_slugs[post.category]}.html",
            }
            if post.category
            else None
        ),
        extra=sorted(post.extra.items()),
    )


def render_listing_page(
    listing: Listing,
    title: str,
    render: RenderConfig,
    output: OutputConfig,
    root: str = "",
) -> str:
    """Render a listing page (home page, one tag, or one category).

    Args:
        listing: Summaries to show, in listing order
        title: Page heading
        render: Render settings
        output: Output layout, used for navigation links
        root: Relative prefix from the page to the site root
    """
    template = get_environment(render).get_template("listing.html")
    return template.render(
        **_site_context(render, output, root),
        title=title,
        items=list(listing),
        total=len(listing),
    )


def render_groups_page(
    groups: Mapping[str, Listing],
    title: str,
    render: RenderConfig,
    output: OutputConfig,
    root: str = "../",
) -> str:
    """Render the overview of all tags or all categories with post counts."""
    template = get_environment(render).get_template("groups.html")
    return template.render(
        **_site_context(render, output, root),
        title=title,
        groups=[
            {"name": name, "url": f"{listing.slug}.html", "count": len(listing)}
            for name, listing in groups.items()
        ],
    )


def write_page(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _site_context(render: RenderConfig, output: OutputConfig, root: str) -> dict[str, str]:
    return {
        "site_title": render.site_title,
        "root": root,
        "tags_dir": output.tags_dir,
        "categories_dir": output.categories_dir,
    }
