"""Data models for rendered Markdown documents."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class SpecialBlock:
    """A diagram or chart fence pulled out of the document for client-side rendering."""

    block_type: str  # "mermaid" or "chart"
    content: str
    placeholder_id: str  # e.g. "special-block-0"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RenderOptions:
    """Options for a single render call."""

    theme: str = "light"  # or "dark"
    base_path: str | None = None  # path to the .md file, for relative images


@dataclass
class RenderResult:
    """Rendered HTML plus the special blocks whose placeholders it contains."""

    html: str
    special_blocks: list[SpecialBlock] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "html": self.html,
            "special_blocks": [b.to_dict() for b in self.special_blocks],
        }


@dataclass
class PdfExportOptions:
    """Page setup for PDF export."""

    theme: str = "light"
    page_size: str = "A4"  # A4, Letter, Legal
    margins: str = "normal"  # normal, narrow, wide
    max_image_width: int = 800


@dataclass
class LogMetadata:
    """One ``├─ key: value`` line under a log entry."""

    key: str
    value: str
    is_last: bool = False


@dataclass
class LogEntry:
    """A parsed log record: header fields, message text and metadata tree."""

    level: str  # info, warn, error, debug, trace, fatal or unknown
    timestamp: str | None
    module: str | None
    message: str
    raw: str
    metadata: list[LogMetadata] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
