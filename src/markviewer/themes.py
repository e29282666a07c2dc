"""CSS tables mapping highlight classes to colors for the light and dark themes."""

from __future__ import annotations

from pygments.token import Token

from .highlighter import CLASS_PREFIX, THEME_STYLES, get_registry

THEMES = tuple(THEME_STYLES)

# Dark rules only apply under a `.dark` ancestor, as the viewer toggles it on <body>
THEME_SCOPES = {
    "light": "",
    "dark": ".dark ",
}


def _declarations(style_def: dict) -> list[str]:
    decls = []
    if style_def.get("color"):
        decls.append(f"color: #{style_def['color']}")
    if style_def.get("bgcolor"):
        decls.append(f"background-color: #{style_def['bgcolor']}")
    if style_def.get("bold"):
        decls.append("font-weight: bold")
    if style_def.get("italic"):
        decls.append("font-style: italic")
    if style_def.get("underline"):
        decls.append("text-decoration: underline")
    return decls


def highlight_css(theme: str) -> str:
    """Build the stylesheet for one theme from its Pygments style."""
    if theme not in THEME_STYLES:
        raise ValueError(f"Unknown theme: {theme}")

    style = get_registry().themes[theme]
    scope = THEME_SCOPES[theme]
    lines = [f"/* markviewer highlight classes - {theme} theme ({THEME_STYLES[theme]}) */"]
    if style.background_color:
        lines.append(f"{scope}pre code {{ background-color: {style.background_color}; }}")

    for ttype, style_def in style:
        if ttype is Token:
            continue
        decls = _declarations(style_def)
        if not decls:
            continue
        selector = "".join(f".{CLASS_PREFIX}{part.lower()}" for part in ttype)
        lines.append(f"{scope}{selector} {{ {'; '.join(decls)}; }}")

    return "\n".join(lines) + "\n"
