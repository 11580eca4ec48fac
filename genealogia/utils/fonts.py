"""DejaVu font discovery shared by the PDF and PNG renderers.

Installation:
    # Ubuntu/Debian: sudo apt install fonts-dejavu-core
    # macOS: brew install --cask font-dejavu
    # Or place DejaVuSans.ttf + DejaVuSans-Bold.ttf into genealogia/services/fonts/
"""

from __future__ import annotations

from pathlib import Path

_FONT_DIRS = [
    Path(__file__).parent.parent / "services" / "fonts",
    Path("/usr/share/fonts/truetype/dejavu"),
    Path("/usr/share/fonts/TTF"),
    Path("/usr/share/fonts/dejavu"),
    Path.home() / ".fonts",
    Path.home() / "Library" / "Fonts",
]

REGULAR = "DejaVuSans.ttf"
BOLD = "DejaVuSans-Bold.ttf"
OBLIQUE = "DejaVuSans-Oblique.ttf"


def font_dir() -> Path | None:
    """First directory holding DejaVuSans.ttf, or None (renderers fall back to built-in fonts)."""
    for d in _FONT_DIRS:
        if (d / REGULAR).is_file():
            return d
    return None


def font_path(name: str) -> Path | None:
    d = font_dir()
    if d is None:
        return None
    path = d / name
    if path.is_file():
        return path
    # Oblique/Bold variants are optional, regular is not
    return d / REGULAR
