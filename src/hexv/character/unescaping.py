"""Inverse of the escape rules, for recovering input bytes from output text.

Escaping is lossless except in two documented cases: with ``space_circle``
both a space and a literal circle glyph come back as a space, and a literal
backslash sequence in the input that happens to look like an escape token is
indistinguishable from a real escape. Any other backslash is ordinary text,
since escapes are the only backslash sequences the escaper writes.
"""

import re
from typing import Optional

from hexv.character.escaping import SPACE_CIRCLE
from hexv.shared.config import EscapeConfig

MAX_CODE_POINT = 0x10FFFF
MAX_BYTE = 0xFF

ESCAPE_PATTERN = re.compile(
    r"\\(?:"
    r"x(?P<hex_byte>[0-9a-fA-F]{2})"
    r"|d(?P<decimal_byte>[0-9]{3})"
    r"|u\{(?P<code_point>[0-9a-fA-F]{1,8})\}"
    r"|(?P<token>[nrt])"
    r")"
)

TOKEN_BYTES = {"n": b"\n", "r": b"\r", "t": b"\t"}


class UnescapeError(ValueError):
    """Raised when an escape sequence encodes an invalid or out-of-range value."""

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position


def unescape(text: str, config: Optional[EscapeConfig] = None) -> bytes:
    """Recover the input bytes from text escaped with ``config``.

    Args:
        text: Escaped output text
        config: The configuration the text was escaped with

    Returns:
        The reconstructed input bytes

    Raises:
        UnescapeError: On an escape sequence with an invalid or out-of-range value
    """
    config = config or EscapeConfig()
    output = bytearray()
    position = 0

    while position < len(text):
        backslash = text.find("\\", position)
        literal_end = len(text) if backslash == -1 else backslash
        output += _literal_bytes(text[position:literal_end], config)
        if backslash == -1:
            break

        match = ESCAPE_PATTERN.match(text, backslash)
        if match is None:
            output += b"\\"
            position = backslash + 1
            continue
        output += _escape_bytes(match, config)
        position = match.end()

    return bytes(output)


def _literal_bytes(segment: str, config: EscapeConfig) -> bytes:
    if config.space_circle:
        segment = segment.replace(SPACE_CIRCLE, " ")
    return segment.encode("utf-8", "surrogatepass")


def _escape_bytes(match: "re.Match[str]", config: EscapeConfig) -> bytes:
    position = match.start()
    if match.group("hex_byte") is not None:
        return bytes([int(match.group("hex_byte"), 16)])

    if match.group("decimal_byte") is not None:
        value = int(match.group("decimal_byte"))
        if value > MAX_BYTE:
            raise UnescapeError(
                f"Decimal byte escape out of range at position {position}", position=position
            )
        return bytes([value])

    if match.group("code_point") is not None:
        digits = match.group("code_point")
        try:
            value = int(digits, 10 if config.decimal_mode else 16)
        except ValueError as e:
            raise UnescapeError(
                f"Invalid code point escape at position {position}", position=position
            ) from e
        if value > MAX_CODE_POINT:
            raise UnescapeError(
                f"Code point escape out of range at position {position}", position=position
            )
        return chr(value).encode("utf-8", "surrogatepass")

    return TOKEN_BYTES[match.group("token")]
