"""Integration tests for the build pipeline."""

import json
from pathlib import Path

import pytest
from jinja2 import TemplateError

from leafpress.output.markdown import RenderResult
from leafpress.runner import run_build, run_check


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_build_writes_posts_and_indexes(tmp_path, posts_dir, write_post, cfg):
    write_post("x.md", title="X", slug="x", body="# Hello\n")
    write_post(
        "nested/promises.md",
        title="Promises",
        slug="promises",
        date="2024-02-01 10:00:00 UTC",
        tags="javascript, async",
        category="Tutorials",
    )
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.ok
    assert report.succeeded == ["promises", "x"]
    assert "<h1>Hello</h1>" in (out / "posts" / "x.html").read_text(encoding="utf-8")
    assert (out / "index.html").exists()
    assert (out / "tags" / "index.html").exists()
    assert (out / "tags" / "async.html").exists()
    assert (out / "tags" / "javascript.html").exists()
    assert (out / "categories" / "tutorials.html").exists()
    assert (out / "categories" / "index.html").exists()

    manifest = json.loads((out / "posts.json").read_text(encoding="utf-8"))
    assert [p["slug"] for p in manifest["posts"]] == ["promises", "x"]
    assert manifest["tags"]["async"] == {"slug": "async", "posts": ["promises"]}

    saved = json.loads((out / "build_report.json").read_text(encoding="utf-8"))
    assert saved["ok"] is True
    assert saved["failed"] == []


def test_rebuild_is_byte_identical(tmp_path, posts_dir, write_post, cfg):
    """Running the pipeline twice on unchanged input yields identical output."""
    write_post("a.md", title="A", slug="a", tags="one two")
    write_post("b.md", title="B", slug="b", category="Notes", body="Text\n\n    code  here\n")
    write_post("c.md", title="C", slug="c")
    out = tmp_path / "site"

    run_build(posts_dir, out, cfg, show_progress=False)
    first = _snapshot(out)
    run_build(posts_dir, out, cfg, show_progress=False)

    assert _snapshot(out) == first


def test_malformed_post_does_not_block_others(tmp_path, posts_dir, write_post, cfg):
    """A broken post is reported while the rest of the site is built."""
    write_post("good.md", title="Good", slug="good")
    (posts_dir / "broken.md").write_text(
        "<!--\n.. title: Broken\nthis is not a key line\n-->\nbody\n", encoding="utf-8"
    )
    write_post("bad-date.md", title="Bad", slug="bad", date="someday")
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.ok
    assert report.succeeded == ["good"]
    assert sorted((f.source.name, f.kind) for f in report.failed) == [
        ("bad-date.md", "invalid_date"),
        ("broken.md", "malformed_front_matter"),
    ]
    assert (out / "posts" / "good.html").exists()

    saved = json.loads((out / "build_report.json").read_text(encoding="utf-8"))
    assert {item["source"] for item in saved["failed"]} == {"bad-date.md", "broken.md"}


def test_strict_mode_fails_on_any_post_failure(tmp_path, posts_dir, write_post, cfg):
    write_post("good.md", title="Good", slug="good")
    write_post("bad.md", title="Bad", slug="bad", date="someday")
    cfg.build.strict = True

    report = run_build(posts_dir, tmp_path / "site", cfg, show_progress=False)

    assert not report.ok
    assert report.exit_code == 1
    assert report.succeeded == ["good"]


def test_duplicate_slug_aborts_build(tmp_path, posts_dir, write_post, cfg):
    write_post("one.md", title="One", slug="a")
    write_post("two.md", title="Two", slug="a")
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert not report.ok
    assert report.fatal_kind == "duplicate_slug"
    assert report.exit_code == 1
    assert not (out / "posts").exists()
    assert not (out / "index.html").exists()
    saved = json.loads((out / "build_report.json").read_text(encoding="utf-8"))
    assert saved["fatal"]["kind"] == "duplicate_slug"


def test_degraded_render_is_reported(tmp_path, posts_dir, write_post, cfg, monkeypatch):
    write_post("fine.md", title="Fine", slug="fine")
    write_post("odd.md", title="Odd", slug="odd", body="weird <body>\n")

    from leafpress import runner

    real = runner.render_markdown

    def fake_render(body, extensions):
        if "weird" in body:
            return RenderResult(html="<pre>weird &lt;body&gt;</pre>", degraded=True, message="boom")
        return real(body, extensions)

    monkeypatch.setattr(runner, "render_markdown", fake_render)
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.ok
    assert sorted(report.succeeded) == ["fine", "odd"]
    assert [(d.slug, d.message) for d in report.degraded] == [("odd", "boom")]
    assert "weird &lt;body&gt;" in (out / "posts" / "odd.html").read_text(encoding="utf-8")


def test_sequential_and_parallel_builds_match(tmp_path, posts_dir, write_post, cfg):
    for i in range(6):
        write_post(f"p{i}.md", title=f"P{i}", slug=f"p{i}", tags=f"t{i % 2}")

    cfg.build.workers = 1
    run_build(posts_dir, tmp_path / "seq", cfg, show_progress=False)
    cfg.build.workers = 4
    run_build(posts_dir, tmp_path / "par", cfg, show_progress=False)

    assert _snapshot(tmp_path / "seq") == _snapshot(tmp_path / "par")


def test_build_with_progress_bar(tmp_path, posts_dir, write_post, cfg):
    from rich.console import Console

    write_post("x.md", title="X", slug="x")
    console = Console(file=open(tmp_path / "console.txt", "w"), force_terminal=False)

    report = run_build(posts_dir, tmp_path / "site", cfg, show_progress=True, console=console)
    console.file.close()

    assert report.ok


def test_check_validates_without_writing(tmp_path, posts_dir, write_post, cfg):
    write_post("x.md", title="X", slug="x")
    write_post("bad.md", title="Bad", slug="bad", date="nope")

    report = run_check(posts_dir, cfg)

    assert report.succeeded == ["x"]
    assert [f.kind for f in report.failed] == ["invalid_date"]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["posts"]


def test_out_of_range_date_fails_only_that_post(tmp_path, posts_dir, write_post, cfg):
    write_post("good.md", title="Good", slug="good")
    write_post("old.md", title="Old", slug="old", date="0001-01-01 00:00:00 UTC+05:00")
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.ok
    assert report.succeeded == ["good"]
    assert [(f.source.name, f.kind) for f in report.failed] == [("old.md", "invalid_date")]
    assert (out / "build_report.json").exists()


def test_tag_named_index_keeps_overview_page(tmp_path, posts_dir, write_post, cfg):
    write_post("a.md", title="A", slug="a", tags="index, other")
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    overview = (out / "tags" / "index.html").read_text(encoding="utf-8")
    assert "other.html" in overview
    assert "index-2.html" in overview
    assert (out / "tags" / "index-2.html").exists()
    assert len(report.written) == len(set(report.written))


def test_rebuild_removes_pages_of_deleted_posts(tmp_path, posts_dir, write_post, cfg):
    write_post("a.md", title="A", slug="a")
    b = write_post("b.md", title="B", slug="b", tags="only-b", category="Gone")
    out = tmp_path / "site"
    run_build(posts_dir, out, cfg, show_progress=False)
    assert (out / "posts" / "b.html").exists()

    b.unlink()
    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.succeeded == ["a"]
    assert (out / "posts" / "a.html").exists()
    assert not (out / "posts" / "b.html").exists()
    assert not (out / "tags" / "only-b.html").exists()
    assert not (out / "categories" / "gone.html").exists()


def test_duplicate_slug_removes_previous_site(tmp_path, posts_dir, write_post, cfg):
    write_post("one.md", title="One", slug="a")
    out = tmp_path / "site"
    run_build(posts_dir, out, cfg, show_progress=False)
    (out / "notes.txt").write_text("kept", encoding="utf-8")

    write_post("two.md", title="Two", slug="a")
    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.fatal_kind == "duplicate_slug"
    assert not (out / "index.html").exists()
    assert not (out / "posts" / "a.html").exists()
    assert (out / "notes.txt").read_text(encoding="utf-8") == "kept"


@pytest.mark.parametrize("error", [TemplateError("bad template"), OSError("disk full")])
def test_page_render_error_fails_only_that_post(
    tmp_path, posts_dir, write_post, cfg, monkeypatch, error
):
    write_post("fine.md", title="Fine", slug="fine")
    write_post("broken.md", title="Broken", slug="broken")

    from leafpress import runner

    real = runner.render_post_page

    def fake_render_post_page(post, *args, **kwargs):
        if post.slug == "broken":
            raise error
        return real(post, *args, **kwargs)

    monkeypatch.setattr(runner, "render_post_page", fake_render_post_page)
    out = tmp_path / "site"

    report = run_build(posts_dir, out, cfg, show_progress=False)

    assert report.ok
    assert report.succeeded == ["fine"]
    assert [(f.source.name, f.kind) for f in report.failed] == [("broken.md", "render_error")]
    assert (out / "posts" / "fine.html").exists()
    assert not (out / "posts" / "broken.html").exists()
