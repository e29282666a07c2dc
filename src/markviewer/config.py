"""YAML configuration for rendering and export defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .highlighter import THEME_STYLES

DEFAULT_CONFIG_NAME = "markviewer.yaml"

# Page dimensions (width, height) and margins in millimetres
PAGE_SIZES = {
    "A4": (210.0, 297.0),
    "Letter": (215.9, 279.4),
    "Legal": (215.9, 355.6),
}
MARGINS = {
    "normal": 25.4,
    "narrow": 12.7,
    "wide": 50.8,
}


@dataclass
class ViewerConfig:
    theme: str = "light"
    page_size: str = "A4"
    margins: str = "normal"
    max_image_width: int = 800


def _yaml() -> YAML:
    y = YAML()
    y.default_flow_style = False
    y.preserve_quotes = True
    return y


def _check_choice(key: str, value, choices) -> None:
    if value not in choices:
        raise ConfigError(
            f"Invalid {key} {value!r} (expected one of: {', '.join(choices)})"
        )


def validate_config(config: ViewerConfig) -> ViewerConfig:
    _check_choice("theme", config.theme, THEME_STYLES)
    _check_choice("page_size", config.page_size, PAGE_SIZES)
    _check_choice("margins", config.margins, MARGINS)
    width = config.max_image_width
    if not isinstance(width, int) or isinstance(width, bool) or width <= 0:
        raise ConfigError(
            f"Invalid max_image_width {width!r} (expected a positive integer)"
        )
    return config


def load_config(path: Path | None = None) -> ViewerConfig:
    """Read the config file; a missing default file yields the defaults.

    An explicitly given path must exist.
    """
    if path is None:
        path = Path(DEFAULT_CONFIG_NAME)
        if not path.exists():
            return ViewerConfig()
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    y = _yaml()
    try:
        with open(path, encoding="utf-8") as f:
            data = y.load(f)
    except YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e

    if data is None:
        return ViewerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    defaults = ViewerConfig()
    config = ViewerConfig(
        theme=str(data.get("theme", defaults.theme)),
        page_size=str(data.get("page_size", defaults.page_size)),
        margins=str(data.get("margins", defaults.margins)),
        max_image_width=data.get("max_image_width", defaults.max_image_width),
    )
    return validate_config(config)


def write_config(config: ViewerConfig, path: Path) -> None:
    """Write a config file with every setting spelled out."""
    data = {
        "theme": config.theme,
        "page_size": config.page_size,
        "margins": config.margins,
        "max_image_width": config.max_image_width,
    }
    with open(path, "w", encoding="utf-8") as f:
        _yaml().dump(data, f)
