from pathlib import Path

import pytest

from leafpress.config import AppConfig


def make_post(
    *,
    title: str = "Post",
    slug: str = "post",
    date: str = "2024-01-31 14:09:07 UTC+05:30",
    tags: str = "",
    category: str | None = None,
    description: str | None = None,
    body: str = "# Hello\n\nSome text.\n",
    extra: dict[str, str] | None = None,
) -> str:
    lines = [
        "<!--",
        f".. title: {title}",
        f".. slug: {slug}",
        f".. date: {date}",
        f".. tags: {tags}",
    ]
    if category is not None:
        lines.append(f".. category: {category}")
    if description is not None:
        lines.append(f".. description: {description}")
    for key, value in (extra or {}).items():
        lines.append(f".. {key}: {value}")
    lines.append(".. type: text")
    lines.append("-->")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "posts"
    path.mkdir()
    return path


@pytest.fixture
def write_post(posts_dir: Path):
    def _write(name: str, **kwargs) -> Path:
        path = posts_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(make_post(**kwargs), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cfg() -> AppConfig:
    config = AppConfig()
    config.logging.console = False
    config.build.workers = 2
    return config
