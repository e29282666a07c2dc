"""Word and character counts for the status display."""

from __future__ import annotations

import re

# Markdown punctuation counted as word separators
_MARKUP_RE = re.compile(r"[#*`\[\]()_~>-]")


def count_words(text: str) -> int:
    cleaned = _MARKUP_RE.sub(" ", text)
    return len(cleaned.split())


def count_characters(text: str) -> int:
    return len(text)
