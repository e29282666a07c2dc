"""Operations exposed to the host: render, highlight, and pasted-image saving."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from functools import lru_cache
from pathlib import Path

from .errors import ImageSaveError, RenderError
from .highlighter import THEME_STYLES, SyntaxHighlighter, highlight_code
from .image_resolver import resolve_image_paths
from .markdown_converter import render_markdown_html
from .models import RenderOptions, RenderResult, SpecialBlock
from .special_blocks import extract_special_blocks

logger = logging.getLogger(__name__)

IMAGES_DIR = "images"
RENDER_CACHE_SIZE = 50


def render_markdown(markdown: str, options: RenderOptions | None = None) -> RenderResult:
    """Render a document to HTML and collect its special blocks.

    Order matters: special blocks are extracted before the Markdown engine
    runs, otherwise its fence handling would consume them. The blocks are
    returned as extracted and never pass through the engine or the image
    resolver.

    Results are cached by content, theme and base path; each call gets its
    own ``RenderResult``.
    """
    options = options or RenderOptions()
    if options.theme not in THEME_STYLES:
        raise RenderError(
            f"Unknown theme {options.theme!r} (expected one of: {', '.join(THEME_STYLES)})"
        )

    html, special_blocks = _render_cached(markdown, options.theme, options.base_path)
    return RenderResult(html=html, special_blocks=list(special_blocks))


@lru_cache(maxsize=RENDER_CACHE_SIZE)
def _render_cached(
    markdown: str, theme: str, base_path: str | None
) -> tuple[str, tuple[SpecialBlock, ...]]:
    # theme only keys the cache; the HTML carries class names, not colors
    processed, special_blocks = extract_special_blocks(markdown)
    html = render_markdown_html(processed, adapter=SyntaxHighlighter())

    if base_path:
        html = resolve_image_paths(html, base_path)

    return html, tuple(special_blocks)


def highlight_code_block(code: str, lang: str) -> str:
    """Highlight a single code block; unknown languages fall back to plain text."""
    return highlight_code(code, lang)


def save_pasted_image(
    base64_data: str,
    base_path: str,
    filename: str | None = None,
) -> str:
    """Save base64 image data into ``images/`` beside the document.

    Accepts raw base64 or a ``data:`` URL. Returns the path relative to the
    document, e.g. ``images/pasted-image-1700000000000.png``.
    """
    data = base64_data.split(",")[-1] if "," in base64_data else base64_data
    try:
        payload = base64.b64decode(data.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageSaveError(f"Failed to decode base64: {e}") from e

    images_dir = Path(base_path).parent / IMAGES_DIR
    try:
        images_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageSaveError(f"Failed to create images dir: {e}") from e

    file_name = filename or f"pasted-image-{int(time.time() * 1000)}.png"
    file_path = images_dir / file_name
    try:
        file_path.write_bytes(payload)
    except OSError as e:
        raise ImageSaveError(f"Failed to write image: {e}") from e

    logger.debug("Saved pasted image (%d bytes) to %s", len(payload), file_path)
    return f"{IMAGES_DIR}/{file_name}"
