"""
JSON manifest and build report files.

``posts.json`` lists every post in listing order together with the tag and
category page slugs, for tooling that consumes the site without parsing
HTML. ``build_report.json`` records which posts succeeded or failed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..core.types import BuildReport
from .indexes import SiteIndex


def manifest_payload(index: SiteIndex) -> dict[str, Any]:
    return {
        "posts": [summary.to_dict() for summary in index.chronological],
        "tags": {
            name: {"slug": listing.slug, "posts": [s.slug for s in listing]}
            for name, listing in index.by_tag.items()
        },
        "categories": {
            name: {"slug": listing.slug, "posts": [s.slug for s in listing]}
            for name, listing in index.by_category.items()
        },
    }


def write_manifest(index: SiteIndex, path: Path) -> Path:
    _write_json(path, manifest_payload(index))
    return path


def write_report(report: BuildReport, path: Path, input_dir: Path | None = None) -> Path:
    _write_json(path, report.to_dict(relative_to=input_dir))
    return path


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{json.dumps(payload, ensure_ascii=False, indent=2)}\n", encoding="utf-8")
