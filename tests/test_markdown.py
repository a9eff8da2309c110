"""Tests for Markdown body rendering."""

import markdown
import pytest

from leafpress.output.markdown import check_extensions, render_markdown


def test_heading_renders_as_h1():
    result = render_markdown("# Hello")

    assert result.html == "<h1>Hello</h1>"
    assert not result.degraded


def test_indented_code_block_keeps_whitespace():
    """Indented code is emitted verbatim, with inner indentation intact."""
    body = "Example:\n\n    function f() {\n        return a < b;\n    }\n"

    html = render_markdown(body).html

    assert "<pre><code>function f() {\n    return a &lt; b;\n}\n</code></pre>" in html


def test_fenced_code_is_not_reinterpreted():
    body = "```js\nconst x = *y* + __z__;\n  indented();\n```\n"

    html = render_markdown(body).html

    assert "const x = *y* + __z__;\n  indented();" in html
    assert "<em>" not in html
    assert "<strong>" not in html


def test_inline_elements_and_blockquote():
    body = (
        "Some *emphasis*, **strong**, `a < b` and [a link](https://example.com).\n\n"
        "> quoted text\n"
    )

    html = render_markdown(body).html

    assert "<em>emphasis</em>" in html
    assert "<strong>strong</strong>" in html
    assert "<code>a &lt; b</code>" in html
    assert '<a href="https://example.com">a link</a>' in html
    assert "<blockquote>" in html
    assert "quoted text" in html


def test_renderer_failure_degrades_to_literal_text(monkeypatch):
    """A crashing renderer yields escaped literal text instead of an error."""

    def boom(self, source):
        raise RuntimeError("parser blew up")

    monkeypatch.setattr(markdown.Markdown, "convert", boom)

    result = render_markdown("# Title <b>")

    assert result.degraded
    assert "RuntimeError: parser blew up" == result.message
    assert result.html == '<pre class="literal"># Title &lt;b&gt;</pre>'


def test_unknown_extension_is_rejected_early():
    with pytest.raises(ValueError):
        check_extensions(["no_such_extension_xyz"])
