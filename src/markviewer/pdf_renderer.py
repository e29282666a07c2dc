"""Render Markdown documents to PDF via Jinja2 + WeasyPrint."""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path

from .config import MARGINS, PAGE_SIZES
from .document import render_document_html
from .image_resolver import local_file_uri
from .models import PdfExportOptions

try:
    import weasyprint

    HAS_PDF_DEPS = True
except (ImportError, OSError):
    # OSError: weasyprint installed without its native libraries
    HAS_PDF_DEPS = False

logger = logging.getLogger(__name__)

PAGE_BACKGROUNDS = {"light": "#ffffff", "dark": "#0f172a"}


def _image_to_base64(path: str, max_width: int) -> str:
    """Inline a local image as a data URI, resizing if too wide.

    Unreadable images fall back to a file:// URI.
    """
    from PIL import Image

    source = Path(path)
    try:
        with Image.open(source) as pil_img:
            fmt = "PNG" if source.suffix.lower() == ".png" else "JPEG"
            if pil_img.width > max_width:
                ratio = max_width / pil_img.width
                new_height = int(pil_img.height * ratio)
                pil_img = pil_img.resize((max_width, new_height), Image.LANCZOS)
            if pil_img.mode in ("RGBA", "P", "LA") and fmt == "JPEG":
                pil_img = pil_img.convert("RGB")

            buf = io.BytesIO()
            pil_img.save(buf, format=fmt, quality=85)
    except OSError as e:
        logger.warning("Could not inline image %s: %s", path, e)
        return local_file_uri(path)

    b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    mime = "image/png" if fmt == "PNG" else "image/jpeg"
    return f"data:{mime};base64,{b64}"


def page_css(options: PdfExportOptions) -> str:
    """@page rule for the chosen size, margins and theme background."""
    width, height = PAGE_SIZES[options.page_size]
    margin = MARGINS[options.margins]
    background = PAGE_BACKGROUNDS.get(options.theme, PAGE_BACKGROUNDS["light"])
    return (
        f"\n@page {{ size: {width}mm {height}mm; margin: {margin}mm; "
        f"background: {background}; }}\n"
        ".markdown-body { max-width: none; padding: 0; }\n"
    )


def render_document_pdf(
    markdown: str,
    output_path: Path,
    source_path: Path | None = None,
    options: PdfExportOptions | None = None,
) -> Path:
    """Render a Markdown document to a PDF file.

    Returns the path to the generated .pdf file.
    Requires weasyprint (install with pip install markviewer[pdf]).
    """
    if not HAS_PDF_DEPS:
        raise RuntimeError("PDF dependencies not installed. Run: pip install markviewer[pdf]")

    options = options or PdfExportOptions()
    if options.page_size not in PAGE_SIZES:
        raise ValueError(f"Unknown page size: {options.page_size}")
    if options.margins not in MARGINS:
        raise ValueError(f"Unknown margins: {options.margins}")

    html_content = render_document_html(
        markdown,
        source_path=source_path,
        theme=options.theme,
        static=True,
        image_src=lambda path: _image_to_base64(path, options.max_image_width),
        page_css=page_css(options),
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    base_url = str(source_path.parent) if source_path is not None else None
    wp = weasyprint.HTML(string=html_content, base_url=base_url)
    wp.write_pdf(str(output_path))

    logger.debug("Wrote %s", output_path)
    return output_path
