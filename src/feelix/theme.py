from __future__ import annotations

from dataclasses import dataclass

from feelix.errors import NotFoundError

PRIMARY_ACCENT = "#FF6B6B"
SECONDARY_ACCENT = "#4ECDC4"
TERTIARY_ACCENT = "#45B7D1"


@dataclass(frozen=True)
class ColorScheme:
    name: str
    primary: str
    secondary: str
    tertiary: str


PALETTE: dict[str, str] = {
    "text": "#FFFFFF",
    "background": "#0A0A0A",
    "surface": "#1A1A1A",
    "surface_variant": "#2A2A2A",
    "accent": PRIMARY_ACCENT,
    "secondary_accent": SECONDARY_ACCENT,
    "tertiary_accent": TERTIARY_ACCENT,
    "border": "#333333",
    "placeholder": "#888888",
    "success": "#4CAF50",
    "warning": "#FF9800",
    "error": "#F44336",
    "info": "#2196F3",
}

COLOR_SCHEMES: dict[str, ColorScheme] = {
    "default": ColorScheme("default", PRIMARY_ACCENT, SECONDARY_ACCENT, TERTIARY_ACCENT),
    "ocean": ColorScheme("ocean", "#4ECDC4", "#45B7D1", "#96CEB4"),
    "sunset": ColorScheme("sunset", "#FF6B6B", "#FFA726", "#FF8A65"),
    "forest": ColorScheme("forest", "#66BB6A", "#81C784", "#A5D6A7"),
    "lavender": ColorScheme("lavender", "#BA68C8", "#CE93D8", "#E1BEE7"),
}


def get_color_scheme(name: str) -> ColorScheme:
    scheme = COLOR_SCHEMES.get(name.strip().lower())
    if scheme is None:
        raise NotFoundError(
            f"Unknown color scheme: {name!r}. Supported: {', '.join(COLOR_SCHEMES)}"
        )
    return scheme
