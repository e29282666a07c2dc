"""Extract mermaid and chart fences from Markdown, leaving placeholders behind.

The extraction runs before the Markdown engine so that the engine's own fence
handling never sees these blocks.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from .models import SpecialBlock

SPECIAL_BLOCK_TYPES = frozenset({"mermaid", "chart"})
FENCE_CHARS = "`~"
MIN_FENCE_LENGTH = 3
PLACEHOLDER_PREFIX = "special-block-"


@dataclass
class _OpenFence:
    """A fence that has been opened but not yet closed."""

    marker: str
    lang: str
    lines: list[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "".join(line + "\n" for line in self.lines)

    def verbatim(self) -> str:
        return f"{self.marker}{self.lang}\n{self.content}"


def _iter_lines(text: str) -> Iterator[str]:
    """Yield lines without terminators; no trailing empty line for a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def _fence_marker(trimmed: str) -> str | None:
    """The run of fence characters opening ``trimmed``, at least three long."""
    for char in FENCE_CHARS:
        if trimmed.startswith(char * MIN_FENCE_LENGTH):
            return char * (len(trimmed) - len(trimmed.lstrip(char)))
    return None


def _closes(fence: _OpenFence, marker: str | None) -> bool:
    # Same character, and a run at least as long as the opening one
    return (
        marker is not None
        and marker[0] == fence.marker[0]
        and len(marker) >= len(fence.marker)
    )


def placeholder_html(block_type: str, placeholder_id: str) -> str:
    """The empty element the client-side renderer fills in."""
    return (
        f'<div class="special-block {block_type}" id="{placeholder_id}" '
        f'data-block-type="{block_type}"></div>\n'
    )


def extract_special_blocks(markdown: str) -> tuple[str, list[SpecialBlock]]:
    """Replace mermaid/chart fences with placeholder divs.

    Returns the processed Markdown and the extracted blocks in document order.
    Ordinary fences are re-emitted verbatim. A fence is only closed by the same
    marker that opened it, so a ``~~~`` line inside a backtick fence (or the
    reverse) is kept as content, and a fence opened with four or more characters
    needs a run at least as long to close.
    """
    output: list[str] = []
    blocks: list[SpecialBlock] = []
    fence: _OpenFence | None = None

    for line in _iter_lines(markdown):
        trimmed = line.lstrip()
        marker = _fence_marker(trimmed)

        if fence is None:
            if marker is not None:
                fence = _OpenFence(marker=marker, lang=trimmed[len(marker):].strip())
            else:
                output.append(line + "\n")
            continue

        if _closes(fence, marker):
            block_type = fence.lang.lower()
            if block_type in SPECIAL_BLOCK_TYPES:
                placeholder_id = f"{PLACEHOLDER_PREFIX}{len(blocks)}"
                blocks.append(
                    SpecialBlock(
                        block_type=block_type,
                        content=fence.content.strip(),
                        placeholder_id=placeholder_id,
                    )
                )
                output.append(placeholder_html(block_type, placeholder_id))
            else:
                output.append(f"{fence.verbatim()}{fence.marker}\n")
            fence = None
        else:
            fence.lines.append(line)

    # Unclosed fence: hand it to the Markdown engine as-is
    if fence is not None:
        output.append(fence.verbatim())

    return "".join(output), blocks
