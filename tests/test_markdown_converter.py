from __future__ import annotations

from markviewer.markdown_converter import parse_front_matter, render_markdown_html


class RecordingAdapter:
    def __init__(self) -> None:
        self.calls: list[tuple[str | None, str]] = []

    def render_code(self, lang, code):
        self.calls.append((lang, code))
        return "CODE"

    def open_pre(self, attributes):
        return "<pre " + ",".join(f"{k}={v}" for k, v in attributes.items()) + ">"

    def open_code(self, attributes):
        return "<code>"


def test_basic_markdown() -> None:
    html = render_markdown_html("# Hello\n\nThis is **bold** and *italic*.")
    assert "<h1" in html
    assert "<strong>bold</strong>" in html
    assert "<em>italic</em>" in html


def test_heading_ids_are_prefixed() -> None:
    html = render_markdown_html("# Hello World\n\n## Hello World\n")
    assert 'id="heading-hello-world"' in html
    assert html.count('id="heading-hello-world') == 2


def test_table() -> None:
    html = render_markdown_html("| A | B |\n|---|---|\n| 1 | 2 |")
    assert "<table>" in html
    assert "<th>" in html


def test_tasklist() -> None:
    html = render_markdown_html("- [ ] Todo\n- [x] Done")
    assert 'type="checkbox"' in html


def test_strikethrough_and_superscript() -> None:
    html = render_markdown_html("~~gone~~ and 2^10^")
    assert "<del>gone</del>" in html
    assert "<sup>10</sup>" in html


def test_autolink() -> None:
    html = render_markdown_html("Visit https://example.com today")
    assert '<a href="https://example.com"' in html


def test_footnotes_and_description_lists() -> None:
    html = render_markdown_html("Text[^1]\n\n[^1]: The note.\n\nTerm\n:   Definition\n")
    assert 'class="footnote"' in html
    assert "<dl>" in html
    assert "<dd>Definition</dd>" in html


def test_shortcodes() -> None:
    html = render_markdown_html("Nice :smile:")
    assert ":smile:" not in html
    assert "\U0001f604" in html


def test_front_matter_is_stripped() -> None:
    html = render_markdown_html("---\ntitle: Doc\ntags: [a, b]\n---\n# Hi\n")
    assert "title: Doc" not in html
    assert "<h1" in html


def test_parse_front_matter() -> None:
    assert parse_front_matter("---\ntitle: Doc\n---\nbody") == {"title": "Doc"}
    assert parse_front_matter("# no front matter") == {}
    assert parse_front_matter("---\nnever closed\n") == {}
    assert parse_front_matter("---\n: : [\n---\n") == {}


def test_raw_html_passes_through() -> None:
    div = '<div class="special-block mermaid" id="special-block-0" data-block-type="mermaid"></div>'
    html = render_markdown_html(f"# Title\n\n{div}\n\nAfter.\n")
    assert div in html


def test_code_block_is_highlighted() -> None:
    html = render_markdown_html("```rust\nfn main() {}\n```")
    assert '<pre lang="rust"><code>' in html
    assert 'class="hl-' in html
    assert "</code></pre>" in html


def test_tilde_fence_without_language() -> None:
    html = render_markdown_html("~~~\na < b\n~~~\n")
    assert "<pre><code>a &lt; b\n</code></pre>" in html


def test_adapter_receives_fences() -> None:
    adapter = RecordingAdapter()
    html = render_markdown_html("Intro\n\n```python title=demo.py\nx = 1\n```\n", adapter=adapter)

    assert adapter.calls == [("python", "x = 1\n")]
    assert "<pre lang=python,data-meta=title=demo.py><code>CODE</code></pre>" in html


def test_code_is_not_reparsed_as_markdown() -> None:
    html = render_markdown_html("```text\n**not bold**\n# not a heading\n```\n")
    assert "<strong>" not in html
    assert "<h1" not in html


def test_unparseable_front_matter_is_still_stripped() -> None:
    html = render_markdown_html("---\n: : [\n---\n# Hi\n")
    assert ": : [" not in html
    assert "<h1" in html
