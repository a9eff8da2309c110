"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ContentConfig: Source discovery and front-matter rules
- RenderConfig: Markdown extensions and site metadata for templates
- OutputConfig: Output layout
- BuildConfig: Parallelism and failure policy
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml


UNKNOWN_KEY_POLICIES = ("preserve", "ignore", "reject")


@dataclass
class ContentConfig:
    """Configuration for reading source posts.

    Attributes:
        extensions: File suffixes treated as posts (searched recursively)
        front_matter_open: Line that opens the metadata block
        front_matter_close: Line that closes the metadata block
        required_fields: Metadata keys that must be present and non-empty
        unknown_keys: "preserve" keeps extra keys on the post, "ignore" drops
            them, "reject" fails the post
        default_timezone: IANA zone applied to dates without an offset
    """

    extensions: list[str] = field(default_factory=lambda: [".md", ".markdown"])
    front_matter_open: str = "<!--"
    front_matter_close: str = "-->"
    required_fields: list[str] = field(default_factory=lambda: ["title", "slug"])
    unknown_keys: str = "preserve"
    default_timezone: str = "UTC"


@dataclass
class RenderConfig:
    """Configuration for page rendering.

    Attributes:
        site_title: Title shown in page headers and listing titles
        markdown_extensions: Extensions passed to the Markdown renderer
        template_dir: Optional directory overriding the bundled templates
        date_format: strftime format for displayed dates
    """

    site_title: str = "Blog"
    markdown_extensions: list[str] = field(
        default_factory=lambda: ["fenced_code", "tables", "sane_lists"]
    )
    template_dir: str | None = None
    date_format: str = "%Y-%m-%d %H:%M UTC"


@dataclass
class OutputConfig:
    """Configuration for output layout.

    Attributes:
        posts_dir: Subdirectory for post pages
        tags_dir: Subdirectory for tag listings
        categories_dir: Subdirectory for category listings
        write_manifest: Whether to write posts.json
        write_report: Whether to write build_report.json
    """

    posts_dir: str = "posts"
    tags_dir: str = "tags"
    categories_dir: str = "categories"
    write_manifest: bool = True
    write_report: bool = True


@dataclass
class BuildConfig:
    """Configuration for build execution.

    Attributes:
        workers: Threads used to load and render posts (1 runs sequentially)
        strict: Treat any per-post failure as a failed build
    """

    workers: int = 4
    strict: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file in the output directory
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "build.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    content: ContentConfig = field(default_factory=ContentConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    cfg = _merge_config(AppConfig(), raw)
    _validate(cfg)
    return cfg


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "content": {
            "extensions": list(cfg.content.extensions),
            "front_matter_open": cfg.content.front_matter_open,
            "front_matter_close": cfg.content.front_matter_close,
            "required_fields": list(cfg.content.required_fields),
            "unknown_keys": cfg.content.unknown_keys,
            "default_timezone": cfg.content.default_timezone,
        },
        "render": {
            "site_title": cfg.render.site_title,
            "markdown_extensions": list(cfg.render.markdown_extensions),
            "template_dir": cfg.render.template_dir,
            "date_format": cfg.render.date_format,
        },
        "output": {
            "posts_dir": cfg.output.posts_dir,
            "tags_dir": cfg.output.tags_dir,
            "categories_dir": cfg.output.categories_dir,
            "write_manifest": cfg.output.write_manifest,
            "write_report": cfg.output.write_report,
        },
        "build": {
            "workers": cfg.build.workers,
            "strict": cfg.build.strict,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        content=ContentConfig(**data["content"]),
        render=RenderConfig(**data["render"]),
        output=OutputConfig(**data["output"]),
        build=BuildConfig(**data["build"]),
        logging=LoggingConfig(**data["logging"]),
    )


def _validate(cfg: AppConfig) -> None:
    if cfg.content.unknown_keys not in UNKNOWN_KEY_POLICIES:
        raise ValueError(
            "Unsupported unknown_keys policy. Use 'preserve', 'ignore', or 'reject'."
        )
    if cfg.build.workers < 1:
        raise ValueError("build.workers must be at least 1")
    if cfg.content.default_timezone.upper() != "UTC":
        try:
            ZoneInfo(cfg.content.default_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {cfg.content.default_timezone}") from exc
