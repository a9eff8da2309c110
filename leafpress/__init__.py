"""
leafpress - static site builder for Markdown posts.

This package reads Markdown posts carrying a ``.. key: value`` front-matter
block and renders them into an HTML site with post pages and index pages
by date, tag and category.

Main entry point is the CLI via `leafpress build` command.

Example:
    $ leafpress build -i posts/ -o site/
"""

__all__ = [
    "__version__",
    "parse_front_matter",
    "build_post",
    "build_collection",
    "build_indexes",
    "render_markdown",
    "run_build",
]
__version__ = "0.1.0"

from .core.collection import build_collection
from .core.post import build_post
from .input.frontmatter import parse_front_matter
from .output.indexes import build_indexes
from .output.markdown import render_markdown
from .runner import run_build
