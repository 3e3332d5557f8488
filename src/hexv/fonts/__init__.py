"""Font layer for hexv: glyph presence queries and font discovery."""

from .oracle import (
    FontLoadError,
    FontProgram,
    FontSet,
    GlyphOracle,
    glyph_present,
)
from .resolver import (
    FontNotFoundError,
    FontResolver,
    FontSource,
    load_font_set,
    split_font_names,
)

__all__ = [
    "FontLoadError",
    "FontProgram",
    "FontSet",
    "GlyphOracle",
    "glyph_present",
    "FontNotFoundError",
    "FontResolver",
    "FontSource",
    "load_font_set",
    "split_font_names",
]
