"""Input parsing: front-matter blocks and source files."""

from .frontmatter import FrontMatter, parse_front_matter, serialize_front_matter
from .loader import discover_sources, load_post, load_post_text

__all__ = [
    "FrontMatter",
    "parse_front_matter",
    "serialize_front_matter",
    "discover_sources",
    "load_post",
    "load_post_text",
]
