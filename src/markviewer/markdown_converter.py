"""Convert Markdown text to HTML with Pygments syntax highlighting."""

from __future__ import annotations

import logging

import markdown
from markdown.extensions import Extension
from markdown.extensions.toc import TocExtension, slugify
from markdown.preprocessors import Preprocessor
from pymdownx import emoji
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .fences import CodeFenceAdapter, HighlightedFencesExtension
from .highlighter import SyntaxHighlighter

logger = logging.getLogger(__name__)

HEADING_ID_PREFIX = "heading-"
FRONT_MATTER_DELIMITER = "---"


def heading_slug(value: str, separator: str) -> str:
    """Heading ids carry a fixed prefix so they never collide with placeholder ids."""
    return HEADING_ID_PREFIX + slugify(value, separator)


def _front_matter_end(lines: list[str]) -> int | None:
    """Index of the closing ``---`` of a leading front matter block, if any."""
    if not lines or lines[0].rstrip() != FRONT_MATTER_DELIMITER:
        return None
    for end in range(1, len(lines)):
        if lines[end].rstrip() == FRONT_MATTER_DELIMITER:
            return end
    return None


def parse_front_matter(text: str) -> dict:
    """Return the document's front matter as a dict (empty when absent)."""
    lines = text.split("\n")
    end = _front_matter_end(lines)
    if end is None:
        return {}

    y = YAML(typ="safe", pure=True)
    try:
        data = y.load("\n".join(lines[1:end]))
    except YAMLError as e:
        logger.debug("Unparseable front matter: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


class FrontMatterPreprocessor(Preprocessor):
    def run(self, lines: list[str]) -> list[str]:
        end = _front_matter_end(lines)
        return lines if end is None else lines[end + 1:]


class FrontMatterExtension(Extension):
    """Strip ``---`` fenced front matter; ``parse_front_matter`` reads its values."""

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.registerExtension(self)
        md.preprocessors.register(FrontMatterPreprocessor(md), "front_matter", 27)


def _build_markdown(adapter: CodeFenceAdapter) -> markdown.Markdown:
    extensions = [
        "markdown.extensions.tables",
        "markdown.extensions.footnotes",
        "markdown.extensions.def_list",
        TocExtension(slugify=heading_slug),
        "pymdownx.tilde",
        "pymdownx.caret",
        "pymdownx.magiclink",
        "pymdownx.tasklist",
        "pymdownx.emoji",
        FrontMatterExtension(),
        HighlightedFencesExtension(adapter=adapter),
    ]
    extension_configs = {
        "pymdownx.tilde": {"subscript": False},
        "pymdownx.caret": {"insert": False},
        "pymdownx.emoji": {
            "emoji_index": emoji.gemoji,
            "emoji_generator": emoji.to_alt,
        },
    }
    return markdown.Markdown(extensions=extensions, extension_configs=extension_configs)


def render_markdown_html(text: str, adapter: CodeFenceAdapter | None = None) -> str:
    """Convert markdown text to HTML with syntax-highlighted code blocks.

    A new engine is built per call, so concurrent calls share nothing but the
    read-only grammar registry.
    """
    md = _build_markdown(adapter or SyntaxHighlighter())
    return md.convert(text)
