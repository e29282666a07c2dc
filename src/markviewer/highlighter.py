"""Syntax highlighting with Pygments, emitting class-annotated HTML.

Output carries class names only (prefix ``hl-``) so that the light and dark
themes can be switched with CSS without re-rendering.
"""

from __future__ import annotations

import html
import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

from pygments import highlight
from pygments.formatter import Formatter
from pygments.lexer import Lexer
from pygments.lexers import find_lexer_class, get_all_lexers
from pygments.lexers.special import TextLexer
from pygments.style import Style
from pygments.styles import get_style_by_name
from pygments.token import Token

from .fences import format_attributes

logger = logging.getLogger(__name__)

CLASS_PREFIX = "hl-"
DEFAULT_LANG = "text"

# Pygments style backing each display theme
THEME_STYLES = {
    "light": "default",
    "dark": "github-dark",
}

# Keep the source text untouched: no stripped or appended newlines
LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


@dataclass(frozen=True)
class GrammarRegistry:
    """Read-only lookup tables over the installed Pygments lexers and styles."""

    by_token: Mapping[str, str]  # name/alias -> lexer name
    by_extension: Mapping[str, str]  # "rs" -> lexer name
    themes: Mapping[str, type[Style]]

    @classmethod
    def load(cls) -> GrammarRegistry:
        by_token: dict[str, str] = {}
        by_extension: dict[str, str] = {}

        for name, aliases, filenames, _mimetypes in get_all_lexers():
            by_token.setdefault(name.lower(), name)
            for alias in aliases:
                by_token.setdefault(alias.lower(), name)
            for pattern in filenames:
                # Only plain "*.ext" globs map to an extension
                if not pattern.startswith("*."):
                    continue
                ext = pattern[2:].lower()
                if ext and not any(c in ext for c in "*?[]"):
                    by_extension.setdefault(ext, name)

        themes = {theme: get_style_by_name(style) for theme, style in THEME_STYLES.items()}
        logger.debug(
            "Loaded %d grammar tokens, %d extensions", len(by_token), len(by_extension)
        )
        return cls(
            by_token=MappingProxyType(by_token),
            by_extension=MappingProxyType(by_extension),
            themes=MappingProxyType(themes),
        )


_registry: GrammarRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> GrammarRegistry:
    """Return the process-wide registry, building it on first use."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = GrammarRegistry.load()
    return _registry


def _by_token(registry: GrammarRegistry, lang: str) -> str | None:
    return registry.by_token.get(lang.lower())


def _by_extension(registry: GrammarRegistry, lang: str) -> str | None:
    return registry.by_extension.get(lang.lower().lstrip("."))


def _plain_text(registry: GrammarRegistry, lang: str) -> str | None:
    logger.debug("No grammar for %r, using plain text", lang)
    return TextLexer.name


RESOLUTION_STRATEGIES: tuple[Callable[[GrammarRegistry, str], str | None], ...] = (
    _by_token,
    _by_extension,
    _plain_text,
)


def resolve_lexer(lang: str) -> Lexer:
    """Resolve a fence language to a lexer: token, then extension, then plain text."""
    registry = get_registry()
    token = lang.strip()
    if not token:
        return TextLexer(**LEXER_OPTIONS)
    for strategy in RESOLUTION_STRATEGIES:
        name = strategy(registry, token)
        if name is None:
            continue
        lexer_cls = find_lexer_class(name)
        if lexer_cls is not None:
            return lexer_cls(**LEXER_OPTIONS)
    return TextLexer(**LEXER_OPTIONS)


@lru_cache(maxsize=None)
def token_classes(ttype) -> str:
    """``Token.Keyword.Declaration`` -> ``"hl-keyword hl-declaration"``."""
    return " ".join(CLASS_PREFIX + part.lower() for part in ttype)


class ClassedHtmlFormatter(Formatter):
    """Wrap each token in a classed span, one line at a time.

    Spans never cross a newline and every newline of the source is written
    back exactly where it was.
    """

    name = "Classed HTML"
    aliases = ["classed-html"]

    def format(self, tokensource, outfile):
        for ttype, value in tokensource:
            styled = ttype is not Token and ttype not in Token.Text
            pieces = value.split("\n")
            for i, piece in enumerate(pieces):
                if piece:
                    escaped = html.escape(piece)
                    if styled:
                        outfile.write(f'<span class="{token_classes(ttype)}">{escaped}</span>')
                    else:
                        outfile.write(escaped)
                if i < len(pieces) - 1:
                    outfile.write("\n")


def highlight_code(code: str, lang: str) -> str:
    """Highlight code as classed HTML. Unknown languages come back as escaped text."""
    return highlight(code, resolve_lexer(lang), ClassedHtmlFormatter())


class SyntaxHighlighter:
    """Code fence adapter for the Markdown renderer."""

    def render_code(self, lang: str | None, code: str) -> str:
        return highlight_code(code, lang or DEFAULT_LANG)

    def open_pre(self, attributes: Mapping[str, str]) -> str:
        return f"<pre{format_attributes(attributes)}>"

    def open_code(self, attributes: Mapping[str, str]) -> str:
        return f"<code{format_attributes(attributes)}>"
