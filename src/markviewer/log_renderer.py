"""Parse structured log files and render them as HTML.

Recognized entry headers:

- ``<emoji> 2024-01-15 10:30:00 MODULE LEVEL`` (message on the indented lines below)
- ``2024-01-15T10:30:00Z [LEVEL] message``
- ``[LEVEL] 2024-01-15 10:30:00 message`` (timestamp optional)

Lines like ``├─ key: value`` / ``└─ key: value`` under a header become its
metadata. Anything else is either a message continuation or an entry of
unknown level on its own.
"""

from __future__ import annotations

import html
import re

from .models import LogEntry, LogMetadata


LEVEL_ICONS = {
    "info": "ℹ️",
    "warn": "⚠️",
    "error": "❌",
    "debug": "🔧",
    "trace": "🔍",
    "fatal": "💀",
    "unknown": "📋",
}

# Checked in order; variation selectors are ignored by matching on the base char
EMOJI_LEVELS = (
    ("ℹ", "info"),
    ("⚠", "warn"),
    ("❌", "error"),
    ("🔧", "debug"),
    ("🔍", "trace"),
    ("💀", "fatal"),
)

_LEVEL = r"(INFO|WARN|WARNING|ERROR|DEBUG|TRACE|FATAL)"
_TIMESTAMP = r"(\d{4}[-/]\d{2}[-/]\d{2}[\sT]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)"

STRUCTURED_RE = re.compile(
    r"^(.+?)\s+(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2})\s+(\w+)\s+" + _LEVEL + r"\s*$",
    re.ASCII,
)
TIMESTAMP_FIRST_RE = re.compile(
    r"^" + _TIMESTAMP + r"\s*\[?" + _LEVEL + r"(?![A-Za-z])\]?", re.IGNORECASE
)
BRACKETED_RE = re.compile(
    r"^\[?" + _LEVEL + r"(?![A-Za-z])\]?\s*[-:]?\s*" + _TIMESTAMP + r"?",
    re.IGNORECASE,
)
METADATA_RE = re.compile(r"^\s*[├└]─\s*(\w+):\s*(.+)$")
CONTINUATION_RE = re.compile(r"^\s{2,}(.+)$")

EMPTY_LOG_HTML = '<div class="log-viewer"><div class="log-empty">No log entries found</div></div>'


def detect_level(text: str) -> str:
    upper = text.upper()
    if upper == "INFO":
        return "info"
    if upper in ("WARN", "WARNING"):
        return "warn"
    if upper in ("ERROR", "ERR"):
        return "error"
    if upper in ("DEBUG", "TRACE", "FATAL"):
        return upper.lower()
    return "unknown"


def detect_level_from_emoji(text: str) -> str:
    for char, level in EMOJI_LEVELS:
        if char in text:
            return level
    return "unknown"


class _LogParser:
    """Line-by-line accumulator; one instance per parse."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []
        self.current: LogEntry | None = None
        self.message_lines: list[str] = []

    def start(self, entry: LogEntry) -> None:
        self.finish()
        self.current = entry
        if entry.message:
            self.message_lines.append(entry.message)

    def finish(self) -> None:
        entry = self.current
        if entry is not None:
            if self.message_lines:
                entry.message = "\n".join(self.message_lines).strip()
            if entry.metadata:
                entry.metadata[-1].is_last = True
            self.entries.append(entry)
        self.current = None
        self.message_lines = []

    def feed(self, line: str) -> None:
        m = STRUCTURED_RE.match(line)
        if m:
            level = detect_level(m.group(4))
            if level == "unknown":
                level = detect_level_from_emoji(m.group(1))
            self.start(LogEntry(level, m.group(2), m.group(3), "", line))
            return

        current = self.current
        m = METADATA_RE.match(line)
        if m and current is not None:
            current.metadata.append(LogMetadata(m.group(1), m.group(2)))
            return

        m = CONTINUATION_RE.match(line)
        if m and current is not None and not current.metadata:
            self.message_lines.append(m.group(1).strip())
            return

        m = TIMESTAMP_FIRST_RE.match(line)
        if m:
            rest = line[m.end():].strip()
            self.start(LogEntry(detect_level(m.group(2)), m.group(1), None, rest, line))
            return

        m = BRACKETED_RE.match(line)
        if m:
            rest = line[m.end():].strip()
            self.start(LogEntry(detect_level(m.group(1)), m.group(2), None, rest, line))
            return

        if not line.strip():
            return
        if current is not None:
            # Text after the metadata tree has nowhere to go
            if not current.metadata:
                self.message_lines.append(line.strip())
            return

        self.finish()
        self.entries.append(LogEntry("unknown", None, None, line, line))


def parse_log_content(content: str) -> list[LogEntry]:
    """Split log text into entries, in file order."""
    parser = _LogParser()
    for line in content.split("\n"):
        parser.feed(line.rstrip("\r"))
    parser.finish()
    return parser.entries


def _entry_html(entry: LogEntry) -> str:
    esc = html.escape
    parts = [
        f'<div class="log-entry log-level-{entry.level}">',
        '<div class="log-header">',
        f'<span class="log-icon">{LEVEL_ICONS[entry.level]}</span>',
    ]
    if entry.timestamp:
        parts.append(f'<span class="log-timestamp">{esc(entry.timestamp)}</span>')
    if entry.module:
        parts.append(f'<span class="log-module">{esc(entry.module)}</span>')
    parts.append(f'<span class="log-level-badge">{entry.level.upper()}</span>')
    parts.append("</div>")

    if entry.message:
        parts.append(f'<div class="log-message">{esc(entry.message)}</div>')

    if entry.metadata:
        parts.append('<div class="log-metadata">')
        for meta in entry.metadata:
            prefix = "└─" if meta.is_last else "├─"
            parts.append(
                '<div class="log-meta-item">'
                f'<span class="log-meta-prefix">{prefix}</span>'
                f'<span class="log-meta-key">{esc(meta.key)}:</span>'
                f'<span class="log-meta-value">{esc(meta.value)}</span>'
                "</div>"
            )
        parts.append("</div>")

    parts.append("</div>")
    return "".join(parts)


def render_log_html(entries: list[LogEntry]) -> str:
    """Render parsed entries; all log text is HTML-escaped."""
    if not entries:
        return EMPTY_LOG_HTML
    return '<div class="log-viewer">' + "".join(_entry_html(e) for e in entries) + "</div>"


def render_log(content: str) -> str:
    return render_log_html(parse_log_content(content))
