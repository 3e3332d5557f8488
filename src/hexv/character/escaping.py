"""Escaped textual forms for bytes and characters, and the output writer.

Byte escapes are ``\\xHH`` (two lowercase hex digits) or ``\\dNNN`` (three
zero-padded decimal digits). Character escapes are ``\\u{...}`` holding the
code point in lowercase hex without padding, or in decimal; in bytes mode a
character is written as the byte escapes of its UTF-8 encoding instead.
"""

from typing import BinaryIO, Optional

from hexv.shared.config import EscapeConfig
from hexv.shared.logging import get_logger

HEX_BYTE_PREFIX = "\\x"
DECIMAL_BYTE_PREFIX = "\\d"
CODE_POINT_PREFIX = "\\u{"
CODE_POINT_SUFFIX = "}"

NEWLINE_TOKEN = "\\n"
CARRIAGE_RETURN_TOKEN = "\\r"
TAB_TOKEN = "\\t"
SPACE_CIRCLE = "\U0001F784"  # BLACK SLIGHTLY SMALL CIRCLE

OUTPUT_ENCODING = "utf-8"


class OutputWriteError(Exception):
    """Raised when the output sink rejects a write or flush."""


def format_byte_escape(byte: int, config: EscapeConfig) -> str:
    """Return the escaped form of a single byte value."""
    if config.decimal_mode:
        return f"{DECIMAL_BYTE_PREFIX}{byte:03d}"
    return f"{HEX_BYTE_PREFIX}{byte:02x}"


def format_bytes_escape(data: bytes, config: EscapeConfig) -> str:
    """Return the byte escapes of every byte in ``data``, in order."""
    return "".join(format_byte_escape(byte, config) for byte in data)


def format_char_escape(char: str, config: EscapeConfig) -> str:
    """Return the escaped form of a character.

    Examples:
        >>> format_char_escape("\\t", EscapeConfig())
        '\\\\u{9}'
        >>> format_char_escape("\\U0001f600", EscapeConfig())
        '\\\\u{1f600}'
        >>> format_char_escape("é", EscapeConfig(bytes_mode=True))
        '\\\\xc3\\\\xa9'
    """
    if config.bytes_mode:
        return format_bytes_escape(char.encode("utf-8", "surrogatepass"), config)
    if config.decimal_mode:
        return f"{CODE_POINT_PREFIX}{ord(char)}{CODE_POINT_SUFFIX}"
    return f"{CODE_POINT_PREFIX}{ord(char):x}{CODE_POINT_SUFFIX}"


class EscapeWriter:
    """Exclusive owner of the output sink for the duration of a run.

    Use as a context manager: the sink is flushed when the block exits
    normally. Every failure of the underlying sink surfaces as
    ``OutputWriteError``.
    """

    def __init__(self, sink: BinaryIO, correlation_id: Optional[str] = None) -> None:
        self._sink = sink
        self.bytes_written = 0
        self.logger = get_logger(__name__, correlation_id, "escape_writer")

    def __enter__(self) -> "EscapeWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()

    def write(self, text: str) -> None:
        if not text:
            return
        payload = text.encode(OUTPUT_ENCODING, "surrogatepass")
        try:
            self._sink.write(payload)
        except (OSError, ValueError) as e:
            self.logger.debug("Sink write failed", extra={"error": str(e)})
            raise OutputWriteError(f"Could not write to output: {e}") from e
        self.bytes_written += len(payload)

    def flush(self) -> None:
        try:
            self._sink.flush()
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Could not flush output: {e}") from e

    def is_terminal(self) -> bool:
        """Whether the sink is an interactive terminal."""
        isatty = getattr(self._sink, "isatty", None)
        if isatty is None:
            return False
        try:
            return bool(isatty())
        except (OSError, ValueError):
            return False
