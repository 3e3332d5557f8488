"""Character processing layer for hexv.

This package decodes input bytes into characters and invalid byte runs,
classifies each unit against the escape rules, formats escapes and drives
whole streams through the pipeline.
"""

from .classification import (
    CharacterClassifier,
    ClassificationRule,
    Decision,
    EscapeAction,
)
from .decoding import (
    ByteStreamDecoder,
    DecodedUnit,
    decode_units,
)
from .escaping import (
    EscapeWriter,
    OutputWriteError,
    format_byte_escape,
    format_char_escape,
)
from .stream import EscapeStreamProcessor
from .unescaping import UnescapeError, unescape

__all__ = [
    # Modules
    "classification",
    "decoding",
    "escaping",
    "stream",
    "unescaping",
    # Main classes for direct access
    "ByteStreamDecoder",
    "DecodedUnit",
    "decode_units",
    "CharacterClassifier",
    "ClassificationRule",
    "Decision",
    "EscapeAction",
    "EscapeWriter",
    "OutputWriteError",
    "format_byte_escape",
    "format_char_escape",
    "EscapeStreamProcessor",
    "UnescapeError",
    "unescape",
]
