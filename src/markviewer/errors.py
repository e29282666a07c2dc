"""Exception hierarchy for markviewer."""


class MarkviewerError(Exception):
    """Base exception for all markviewer errors."""


class RenderError(MarkviewerError):
    """Raised when a render request cannot be honored."""


class ImageSaveError(MarkviewerError):
    """Raised when a pasted image cannot be decoded or written to disk."""


class ConfigError(MarkviewerError):
    """Raised for invalid user configuration."""
