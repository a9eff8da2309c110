"""
Source discovery and loading: files on disk to Post records.
"""

from __future__ import annotations

from pathlib import Path

from ..config import ContentConfig
from ..core.post import build_post
from ..core.types import Post
from .frontmatter import parse_front_matter


def discover_sources(input_dir: Path, extensions: list[str]) -> list[Path]:
    """List post files under ``input_dir`` recursively, sorted by path."""
    suffixes = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    return sorted(
        path
        for path in input_dir.rglob("*")
        if path.is_file() and path.suffix.lower() in suffixes
    )


def load_post_text(text: str, cfg: ContentConfig, source: Path | None = None) -> Post:
    """Parse and validate one document's text."""
    front = parse_front_matter(
        text,
        open_marker=cfg.front_matter_open,
        close_marker=cfg.front_matter_close,
        required=cfg.required_fields,
    )
    return build_post(
        front.metadata,
        front.body,
        source=source,
        unknown_keys=cfg.unknown_keys,
        default_tz=cfg.default_timezone,
    )


def load_post(path: Path, cfg: ContentConfig) -> Post:
    """Read a UTF-8 source file and build its Post.

    Raises:
        FrontMatterError: On malformed metadata, missing fields or bad dates
        OSError / UnicodeDecodeError: If the file cannot be read
    """
    text = path.read_text(encoding="utf-8")
    return load_post_text(text, cfg, source=path)
