"""Fenced code blocks for python-markdown, rendered through a pluggable adapter."""

from __future__ import annotations

import html
import re
from collections.abc import Mapping
from typing import Protocol

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor


class CodeFenceAdapter(Protocol):
    """Renders the pieces of a fenced code block."""

    def render_code(self, lang: str | None, code: str) -> str: ...

    def open_pre(self, attributes: Mapping[str, str]) -> str: ...

    def open_code(self, attributes: Mapping[str, str]) -> str: ...


def format_attributes(attributes: Mapping[str, str]) -> str:
    """Serialize attributes as ` name="value"` pairs in mapping order."""
    return "".join(
        f' {name}="{html.escape(str(value), quote=True)}"'
        for name, value in attributes.items()
    )


class HighlightedFencePreprocessor(Preprocessor):
    """Swap each fenced block for stashed HTML produced by the adapter."""

    FENCED_BLOCK_RE = re.compile(
        r"(?P<fence>^(?:~{3,}|`{3,}))[ ]*(?P<info>[^\n]*?)[ ]*\n"
        r"(?P<code>.*?)(?<=\n)"
        r"(?P=fence)[ ]*$",
        re.MULTILINE | re.DOTALL,
    )

    def __init__(self, md: Markdown, adapter: CodeFenceAdapter) -> None:
        super().__init__(md)
        self.adapter = adapter

    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        index = 0
        while True:
            m = self.FENCED_BLOCK_RE.search(text, index)
            if not m:
                break
            placeholder = self.md.htmlStash.store(self._render(m.group("info"), m.group("code")))
            text = f"{text[:m.start()]}\n{placeholder}\n{text[m.end():]}"
            index = m.start() + 1 + len(placeholder)
        return text.split("\n")

    def _render(self, info: str, code: str) -> str:
        lang, _, meta = info.strip().partition(" ")
        pre_attrs: dict[str, str] = {}
        if lang:
            pre_attrs["lang"] = lang
        if meta.strip():
            pre_attrs["data-meta"] = meta.strip()
        return (
            self.adapter.open_pre(pre_attrs)
            + self.adapter.open_code({})
            + self.adapter.render_code(lang or None, code)
            + "</code></pre>"
        )


class HighlightedFencesExtension(Extension):
    """Register the fence preprocessor in the slot of the stock fenced_code extension."""

    def __init__(self, adapter: CodeFenceAdapter, **kwargs) -> None:
        self.adapter = adapter
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:
        md.registerExtension(self)
        md.preprocessors.register(
            HighlightedFencePreprocessor(md, self.adapter), "highlighted_fences", 25
        )
