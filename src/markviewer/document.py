"""Assemble a rendered document into a standalone HTML page via Jinja2."""

from __future__ import annotations

import html
import json
import re
from collections.abc import Callable
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .commands import render_markdown
from .errors import RenderError
from .highlighter import THEME_STYLES, get_registry, highlight_code
from .image_resolver import local_file_uri, replace_local_paths
from .log_renderer import render_log
from .markdown_converter import parse_front_matter
from .models import RenderOptions, RenderResult, SpecialBlock
from .special_blocks import extract_special_blocks
from .themes import highlight_css

TEMPLATES_DIR = Path(__file__).parent / "templates"

PLACEHOLDER_RE = re.compile(
    r'(<div class="special-block [^"]*" id="(special-block-\d+)"[^>]*>)(</div>)'
)
H1_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$")

MARKDOWN_SUFFIXES = {"md", "markdown"}
LOG_SUFFIXES = {"log"}
TEXT_SUFFIXES = {"txt", "text"}


def document_title(markdown: str, source_path: Path | None = None) -> str:
    """Front matter title, else the first level-one heading, else the file stem."""
    title = parse_front_matter(markdown).get("title")
    if title:
        return str(title)

    # Headings inside fences don't count
    processed, _ = extract_special_blocks(markdown)
    in_fence = False
    for line in processed.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_fence = not in_fence
            continue
        m = H1_RE.match(line)
        if m and not in_fence:
            return m.group(1)

    if source_path is not None:
        return source_path.stem
    return "Untitled"


def fill_placeholders(result: RenderResult) -> str:
    """Put each special block's source inside its placeholder, for static output."""
    by_id = {b.placeholder_id: b for b in result.special_blocks}

    def _fill(m: re.Match) -> str:
        block = by_id.get(m.group(2))
        if block is None:
            return m.group(0)
        source = html.escape(block.content)
        return f'{m.group(1)}<pre class="special-block-source">{source}</pre>{m.group(3)}'

    return PLACEHOLDER_RE.sub(_fill, result.html)


def _blocks_json(blocks: list[SpecialBlock]) -> str:
    # "</" would end the surrounding <script> element
    return json.dumps([b.to_dict() for b in blocks]).replace("</", "<\\/")


def _environment() -> Environment:
    return Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=False)


def _render_page(
    title: str,
    theme: str,
    body: str,
    body_class: str = "markdown-body",
    static: bool = True,
    special_blocks: list[SpecialBlock] | None = None,
    page_css: str = "",
) -> str:
    blocks = special_blocks or []
    css = (TEMPLATES_DIR / "styles.css").read_text(encoding="utf-8")
    template = _environment().get_template("document.html.j2")
    return template.render(
        title=html.escape(title),
        theme=theme,
        css=css + "\n" + highlight_css(theme) + page_css,
        body=body,
        body_class=body_class,
        static=static,
        special_blocks_json=_blocks_json(blocks),
        has_special_blocks=bool(blocks),
    )


def render_document_html(
    markdown: str,
    source_path: Path | None = None,
    theme: str = "light",
    title: str | None = None,
    static: bool = False,
    image_src: Callable[[str], str] = local_file_uri,
    page_css: str = "",
) -> str:
    """Render a Markdown document into a complete HTML page.

    Interactive pages carry the special blocks as JSON for the client-side
    diagram/chart loader; static pages (print, PDF) show their source instead.
    Marked local image paths are passed through ``image_src``.
    """
    options = RenderOptions(
        theme=theme,
        base_path=str(source_path) if source_path is not None else None,
    )
    result = render_markdown(markdown, options)

    body = fill_placeholders(result) if static else result.html
    body = replace_local_paths(body, image_src)

    return _render_page(
        title or document_title(markdown, source_path),
        theme,
        body,
        static=static,
        special_blocks=result.special_blocks,
        page_css=page_css,
    )


def file_type(filename: str) -> str:
    """Classify a file for display: markdown, log, code or text."""
    suffix = Path(filename).suffix.lower().lstrip(".")
    if suffix in MARKDOWN_SUFFIXES:
        return "markdown"
    if suffix in LOG_SUFFIXES:
        return "log"
    if suffix in TEXT_SUFFIXES or not suffix:
        return "text"
    if suffix in get_registry().by_extension:
        return "code"
    return "text"


def render_file_html(
    text: str,
    source_path: Path,
    theme: str = "light",
    static: bool = False,
) -> str:
    """Render any supported file into a page, chosen by its extension."""
    kind = file_type(source_path.name)
    if kind == "markdown":
        return render_document_html(text, source_path=source_path, theme=theme, static=static)
    if theme not in THEME_STYLES:
        raise RenderError(f"Unknown theme {theme!r}")
    if kind == "log":
        return _render_page(source_path.name, theme, render_log(text), body_class="log-body")

    lang = source_path.suffix.lstrip(".")
    if kind == "code":
        body = f'<pre lang="{html.escape(lang)}"><code>{highlight_code(text, lang)}</code></pre>'
    else:
        body = f'<pre class="plain-text">{html.escape(text)}</pre>'
    return _render_page(source_path.name, theme, body, body_class="source-body")
