"""hexv.

Re-emit a byte stream with invisible, ambiguous or unrenderable characters
replaced by escapes, while characters the chosen fonts can draw pass through
unchanged.

Progressive API Disclosure:
- Level 1: Simple functions - escape(), escape_file()
- Level 2: Reusable escaper - HexViewer class
- Level 3: Components - EscapeStreamProcessor, CharacterClassifier, FontSet
"""

__version__ = "0.1.0"
__author__ = "hexv contributors"

from .api import HexViewer, escape, escape_file
from .character import (
    CharacterClassifier,
    EscapeStreamProcessor,
    OutputWriteError,
    unescape,
)
from .fonts import (
    FontLoadError,
    FontNotFoundError,
    FontProgram,
    FontSet,
    load_font_set,
)
from .shared import EscapeConfig, ProcessingStatistics

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple escaping functions
    "escape",
    "escape_file",
    "unescape",

    # Level 2: Reusable escaper
    "HexViewer",

    # Level 3: Components
    "EscapeStreamProcessor",
    "CharacterClassifier",
    "FontProgram",
    "FontSet",
    "load_font_set",

    # Configuration and results
    "EscapeConfig",
    "ProcessingStatistics",

    # Errors
    "FontLoadError",
    "FontNotFoundError",
    "OutputWriteError",
]
