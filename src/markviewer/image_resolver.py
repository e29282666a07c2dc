"""Resolve image references in rendered HTML and raw Markdown to loadable paths.

Local paths come back prefixed with ``LOCAL_FILE_MARKER`` so that the host can
apply its own scheme translation (``file://``, a sandboxed asset scheme, an
inline data URI) without this module knowing which one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

logger = logging.getLogger(__name__)

LOCAL_FILE_MARKER = "__LOCAL_FILE__:"

PASSTHROUGH_PREFIXES = ("http://", "https://", "data:", "asset://")
FILE_SCHEME = "file://"

IMG_TAG_RE = re.compile(r'<img\s+([^>]*?)src="([^"]+)"([^>]*)>')
MD_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
LOCAL_SRC_RE = re.compile(r'src="' + re.escape(LOCAL_FILE_MARKER) + r'([^"]*)"')
DRIVE_LETTER_RE = re.compile(r"^[A-Za-z]:")


def _mark(path: str) -> str:
    return f"{LOCAL_FILE_MARKER}{path}"


def resolve_single_path(src: str, base_path: str) -> str:
    """Classify one image target and resolve it against the document location.

    - http(s), data: and asset:// targets are returned unchanged
    - file:// URIs lose their scheme
    - POSIX and drive-letter absolute paths are used as-is (backslashes become /)
    - anything else is joined to the directory holding ``base_path`` and
      canonicalized when the file exists
    """
    if src.startswith(PASSTHROUGH_PREFIXES):
        return src

    if src.startswith(FILE_SCHEME):
        return _mark(src[len(FILE_SCHEME):])

    if src.startswith("/"):
        return _mark(src)

    if DRIVE_LETTER_RE.match(src):
        return _mark(src.replace("\\", "/"))

    base = Path(base_path)
    resolved = base.parent / src
    try:
        resolved = resolved.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        # Missing or unreadable targets keep the joined path
        logger.debug("Could not canonicalize %s: %s", resolved, e)

    return _mark(str(resolved))


def resolve_image_paths(html: str, base_path: str) -> str:
    """Rewrite every ``<img ... src="...">`` into a self-closing tag with a resolved src."""

    def _replace(m: re.Match) -> str:
        before, src, after = m.group(1), m.group(2), m.group(3)
        resolved_src = resolve_single_path(src, base_path)
        after_clean = after.rstrip("/").strip()
        if after_clean:
            return f'<img {before}src="{resolved_src}" {after_clean} />'
        return f'<img {before}src="{resolved_src}" />'

    return IMG_TAG_RE.sub(_replace, html)


def resolve_markdown_image_paths(markdown: str, base_path: str) -> str:
    """Rewrite every ``![alt](src)`` target, keeping the alt text verbatim."""

    def _replace(m: re.Match) -> str:
        return f"![{m.group(1)}]({resolve_single_path(m.group(2), base_path)})"

    return MD_IMAGE_RE.sub(_replace, markdown)


def local_file_uri(path: str) -> str:
    """Translate a resolved local path into a file:// URI."""
    if not path.startswith("/"):
        path = "/" + path
    return FILE_SCHEME + quote(path, safe="/:")


def replace_local_paths(html: str, convert: Callable[[str], str] = local_file_uri) -> str:
    """Apply ``convert`` to every marked local src in rendered HTML."""
    return LOCAL_SRC_RE.sub(lambda m: f'src="{convert(m.group(1))}"', html)
