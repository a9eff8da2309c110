"""
Markdown to HTML conversion for post bodies.

Uses Python-Markdown. Indented and fenced code blocks are emitted verbatim
(HTML-escaped, whitespace intact). If the renderer fails on a body, the body
is emitted as escaped literal text and the result is flagged as degraded so
the caller can report it without stopping the build.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Sequence

import markdown


DEFAULT_EXTENSIONS = ("fenced_code", "tables", "sane_lists")


@dataclass(frozen=True)
class RenderResult:
    """HTML produced for one body.

    Attributes:
        html: Rendered markup
        degraded: True when the body was emitted as literal text
        message: Reason for degradation, empty otherwise
    """

    html: str
    degraded: bool = False
    message: str = ""


def render_markdown(body: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> RenderResult:
    """Render a Markdown body to HTML, falling back to literal text on failure."""
    # A fresh instance per call: Markdown objects keep state between conversions
    md = markdown.Markdown(extensions=list(extensions), output_format="html")
    try:
        rendered = md.convert(body)
    except Exception as exc:  # noqa: BLE001
        return RenderResult(
            html=literal_html(body),
            degraded=True,
            message=f"{type(exc).__name__}: {exc}",
        )
    return RenderResult(html=rendered)


def literal_html(body: str) -> str:
    return f'<pre class="literal">{html.escape(body)}</pre>'


def check_extensions(extensions: Sequence[str]) -> None:
    """Fail early when a configured extension cannot be loaded.

    Raises:
        ValueError: If Python-Markdown cannot load one of the extensions.
    """
    try:
        markdown.Markdown(extensions=list(extensions))
    except (ImportError, AttributeError, TypeError) as exc:
        raise ValueError(f"Cannot load Markdown extensions {list(extensions)}: {exc}") from exc
