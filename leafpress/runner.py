"""
Main pipeline orchestration.

This module coordinates the entire build:
1. Discover source files
2. Parse and validate each post (per-file failures are collected)
3. Build the collection (duplicate slugs abort the build)
4. Render one page per post
5. Render index pages by date, tag and category
6. Write the posts.json manifest and the build report

Loading and rendering run on a thread pool; results are consumed in source
order, so the output never depends on scheduling.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, TypeVar

from jinja2 import TemplateError
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from .config import AppConfig
from .core.collection import Collection, build_collection
from .core.types import BuildReport, Post, PostFailure
from .errors import DuplicateSlug, FrontMatterError, RenderDegraded
from .input.loader import discover_sources, load_post
from .output.indexes import SiteIndex, build_indexes
from .output.manifest import write_manifest, write_report
from .output.markdown import check_extensions, render_markdown
from .output.renderer import (
    render_groups_page,
    render_listing_page,
    render_post_page,
    root_for,
    write_page,
)
from .utils.logging import log_event, log_warning, setup_logging


T = TypeVar("T")
R = TypeVar("R")


class _Tracker:
    """Thin wrapper over an optional Rich progress bar."""

    def __init__(self, progress: Progress | None):
        self._progress = progress

    def add(self, description: str, total: int) -> int | None:
        if self._progress is None:
            return None
        return self._progress.add_task(description, total=total)

    def advance(self, task: int | None) -> None:
        if self._progress is not None and task is not None:
            self._progress.advance(task, 1)


@contextmanager
def _tracking(show_progress: bool, console: Console | None) -> Iterator[_Tracker]:
    if not show_progress:
        yield _Tracker(None)
        return
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console or Console(),
    )
    with progress:
        yield _Tracker(progress)


def _parallel_map(func: Callable[[T], R], items: Iterable[T], workers: int) -> list[R]:
    """Apply ``func`` to every item, preserving input order in the result."""
    items = list(items)
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(func, items))


def run_build(
    input_dir: Path,
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
) -> BuildReport:
    """Run the complete build from source directory to site directory.

    Args:
        input_dir: Directory holding source posts
        output_dir: Directory for generated pages
        cfg: Application configuration
        show_progress: Whether to display progress bars
        console: Rich console for progress output

    Returns:
        The BuildReport; ``report.ok`` is False on a fatal error (or on any
        per-post failure in strict mode)
    """
    logger = setup_logging(cfg.logging, output_dir if cfg.logging.file else None)
    check_extensions(cfg.render.markdown_extensions)
    report = BuildReport(strict=cfg.build.strict)

    log_event(
        logger,
        "Build start",
        event="build_start",
        input=str(input_dir),
        output=str(output_dir),
    )
    removed = _clean_output(output_dir, cfg)
    if removed:
        log_event(logger, "Removed previous pages", event="output_cleaned", count=removed)

    with _tracking(show_progress, console) as tracker:
        stage_task = tracker.add("Stages", total=4)

        posts = _load_posts(input_dir, cfg, report, logger, tracker)
        tracker.advance(stage_task)

        collection = _collect(posts, report, logger)
        tracker.advance(stage_task)
        if collection is None:
            _finish(report, input_dir, output_dir, cfg, logger)
            return report

        index = build_indexes(collection, cfg.output.posts_dir)
        _render_posts(collection, index, output_dir, cfg, report, logger, tracker)
        tracker.advance(stage_task)

        _render_indexes(index, output_dir, cfg, report)
        if cfg.output.write_manifest:
            write_manifest(index, output_dir / "posts.json")
            report.written.append("posts.json")
        tracker.advance(stage_task)

    _finish(report, input_dir, output_dir, cfg, logger)
    return report


def run_check(input_dir: Path, cfg: AppConfig) -> BuildReport:
    """Parse and validate every post without writing anything."""
    logger = setup_logging(cfg.logging, None)
    report = BuildReport(strict=cfg.build.strict)
    posts = _load_posts(input_dir, cfg, report, logger, _Tracker(None))
    collection = _collect(posts, report, logger)
    if collection is not None:
        report.succeeded.extend(post.slug for post in collection)
    return report


def _clean_output(output_dir: Path, cfg: AppConfig) -> int:
    """Delete pages and JSON files left by a previous build.

    Only files this pipeline writes are touched: ``*.html`` directly inside
    the post, tag and category directories, plus the root index and JSON
    files. Returns the number of files removed.
    """
    if not output_dir.is_dir():
        return 0
    output = cfg.output
    stale: set[Path] = set()
    for subdir in (output.posts_dir, output.tags_dir, output.categories_dir):
        target = output_dir / subdir
        if target.is_dir():
            stale.update(target.glob("*.html"))
    for name in ("index.html", "posts.json", "build_report.json"):
        path = output_dir / name
        if path.is_file():
            stale.add(path)
    for existing in sorted(stale):
        existing.unlink()
    return len(stale)


def _load_posts(
    input_dir: Path,
    cfg: AppConfig,
    report: BuildReport,
    logger: logging.Logger,
    tracker: _Tracker,
) -> list[Post]:
    sources = discover_sources(input_dir, cfg.content.extensions)
    log_event(logger, "Sources discovered", event="sources_discovered", count=len(sources))
    load_task = tracker.add("Parse", total=len(sources))

    def _load(path: Path) -> Post | PostFailure:
        try:
            return load_post(path, cfg.content)
        except FrontMatterError as exc:
            return PostFailure(source=path, kind=exc.kind, message=str(exc))
        except (OSError, UnicodeDecodeError) as exc:
            return PostFailure(source=path, kind="read_error", message=str(exc))
        finally:
            tracker.advance(load_task)

    posts: list[Post] = []
    for result in _parallel_map(_load, sources, cfg.build.workers):
        if isinstance(result, PostFailure):
            report.failed.append(result)
            log_warning(
                logger,
                f"Skipping {result.source}: {result.message}",
                event="post_failed",
                source=str(result.source),
                kind=result.kind,
            )
        else:
            posts.append(result)
    return posts


def _collect(
    posts: list[Post], report: BuildReport, logger: logging.Logger
) -> Collection | None:
    try:
        return build_collection(posts)
    except DuplicateSlug as exc:
        report.fatal = str(exc)
        report.fatal_kind = exc.kind
        logger.error(str(exc), extra={"event": "duplicate_slug", "slug": exc.slug})
        return None


def _render_posts(
    collection: Collection,
    index: SiteIndex,
    output_dir: Path,
    cfg: AppConfig,
    report: BuildReport,
    logger: logging.Logger,
    tracker: _Tracker,
) -> None:
    tag_slugs = {name: listing.slug for name, listing in index.by_tag.items()}
    category_slugs = {name: listing.slug for name, listing in index.by_category.items()}
    render_task = tracker.add("Render", total=len(collection))

    def _render(post: Post) -> RenderDegraded | PostFailure | None:
        try:
            result = render_markdown(post.body, cfg.render.markdown_extensions)
            page = render_post_page(
                post, result.html, cfg.render, cfg.output, tag_slugs, category_slugs
            )
            write_page(output_dir / cfg.output.posts_dir / f"{post.slug}.html", page)
            if result.degraded:
                return RenderDegraded(slug=post.slug, message=result.message)
            return None
        except (TemplateError, OSError) as exc:
            return PostFailure(
                source=post.source or Path(post.slug), kind="render_error", message=str(exc)
            )
        finally:
            tracker.advance(render_task)

    for post, outcome in zip(collection, _parallel_map(_render, collection, cfg.build.workers)):
        if isinstance(outcome, PostFailure):
            report.failed.append(outcome)
            log_warning(
                logger,
                f"Failed to render {post.slug}: {outcome.message}",
                event="post_failed",
                source=str(outcome.source),
                kind=outcome.kind,
            )
            continue
        report.succeeded.append(post.slug)
        report.written.append(f"{cfg.output.posts_dir}/{post.slug}.html")
        if outcome is not None:
            report.degraded.append(outcome)
            log_warning(
                logger,
                f"Rendered {post.slug} as literal text: {outcome.message}",
                event="render_degraded",
                slug=post.slug,
            )


def _render_indexes(
    index: SiteIndex, output_dir: Path, cfg: AppConfig, report: BuildReport
) -> None:
    render_cfg, output_cfg = cfg.render, cfg.output

    def _write(relative: str, content: str) -> None:
        write_page(output_dir / relative, content)
        report.written.append(relative)

    _write(
        "index.html",
        render_listing_page(index.chronological, render_cfg.site_title, render_cfg, output_cfg),
    )

    for subdir, groups, heading, label in (
        (output_cfg.tags_dir, index.by_tag, "Tags", "Tag"),
        (output_cfg.categories_dir, index.by_category, "Categories", "Category"),
    ):
        root = root_for(subdir)
        _write(
            f"{subdir}/index.html",
            render_groups_page(groups, heading, render_cfg, output_cfg, root),
        )
        for name, listing in groups.items():
            _write(
                f"{subdir}/{listing.slug}.html",
                render_listing_page(listing, f"{label}: {name}", render_cfg, output_cfg, root),
            )


def _finish(
    report: BuildReport,
    input_dir: Path,
    output_dir: Path,
    cfg: AppConfig,
    logger: logging.Logger,
) -> None:
    if cfg.output.write_report:
        write_report(report, output_dir / "build_report.json", input_dir)
    log_event(
        logger,
        "Build complete" if report.ok else "Build failed",
        event="build_complete",
        succeeded=len(report.succeeded),
        failed=len(report.failed),
        degraded=len(report.degraded),
        fatal=report.fatal,
    )


def render_report(report: BuildReport, console: Console) -> None:
    """Display the build report as a table of succeeded and failed posts."""
    table = Table(title="Build report")
    table.add_column("Status")
    table.add_column("Post")
    table.add_column("Detail")
    degraded = {item.slug: item.message for item in report.degraded}
    for slug in report.succeeded:
        if slug in degraded:
            table.add_row("[yellow]degraded[/yellow]", slug, degraded[slug])
        else:
            table.add_row("[green]ok[/green]", slug, "")
    for failure in report.failed:
        table.add_row("[red]failed[/red]", str(failure.source), f"{failure.kind}: {failure.message}")
    console.print(table)
    if report.fatal:
        console.print(f"[bold red]Fatal[/bold red]: {report.fatal}")
    console.print(
        "[bold]Summary[/bold]: "
        f"succeeded={len(report.succeeded)}, failed={len(report.failed)}, "
        f"degraded={len(report.degraded)}"
    )
