"""UTF-8 byte stream decoding with exact byte spans.

The decoder turns a byte buffer into a lazy sequence of decoded units, each
remembering the exact byte span it came from. Ill-formed input never raises:
it becomes an invalid unit covering the maximal subpart of the broken
sequence (or the single offending byte), and decoding resumes right after it.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from hexv.shared.logging import get_logger

# UTF-8 byte constants
ASCII_MAX = 0x7F
UTF8_CONTINUATION_MIN = 0x80
UTF8_CONTINUATION_MAX = 0xBF
UTF8_2BYTE_LEAD_MIN = 0xC2  # 0xC0 and 0xC1 can only start overlong forms
UTF8_2BYTE_LEAD_MAX = 0xDF
UTF8_3BYTE_LEAD_MIN = 0xE0
UTF8_3BYTE_LEAD_MAX = 0xEF
UTF8_4BYTE_LEAD_MIN = 0xF0
UTF8_4BYTE_LEAD_MAX = 0xF4  # anything above encodes beyond U+10FFFF

# Lead bytes whose first continuation byte has a narrower valid range
# (overlong, surrogate and out-of-range exclusions).
FIRST_CONTINUATION_RANGES = {
    0xE0: (0xA0, 0xBF),
    0xED: (0x80, 0x9F),
    0xF0: (0x90, 0xBF),
    0xF4: (0x80, 0x8F),
}


@dataclass(frozen=True)
class DecodedUnit:
    """A decoded character, or an undecodable byte run, with its source span.

    Attributes:
        start: Offset of the first byte of the unit in the buffer
        end: Offset one past the last byte of the unit
        raw: The source bytes ``buffer[start:end]``
        char: The decoded character, or None for an invalid byte run
    """
    start: int
    end: int
    raw: bytes
    char: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.char is not None

    @property
    def round_trips(self) -> bool:
        """Whether re-encoding the character reproduces the source bytes."""
        if self.char is None:
            return False
        return self.char.encode("utf-8", "surrogatepass") == self.raw

    def __iter__(self) -> Iterator:
        # Allows ``start, end, char = unit`` unpacking
        return iter((self.start, self.end, self.char))


class UTF8SequenceScanner:
    """Well-formedness checks for a single UTF-8 sequence."""

    @staticmethod
    def expected_length(lead: int) -> int:
        """Return the total sequence length announced by ``lead``, or 0."""
        if lead <= ASCII_MAX:
            return 1
        if UTF8_2BYTE_LEAD_MIN <= lead <= UTF8_2BYTE_LEAD_MAX:
            return 2
        if UTF8_3BYTE_LEAD_MIN <= lead <= UTF8_3BYTE_LEAD_MAX:
            return 3
        if UTF8_4BYTE_LEAD_MIN <= lead <= UTF8_4BYTE_LEAD_MAX:
            return 4
        return 0

    def scan(self, data: bytes, pos: int) -> Tuple[int, bool]:
        """Scan the sequence starting at ``pos``.

        Returns:
            Tuple of (consumed byte count, well-formed flag). For an
            ill-formed sequence the count is the length of its maximal
            subpart, which is always at least 1.
        """
        lead = data[pos]
        length = self.expected_length(lead)
        if length == 0:
            return 1, False
        if length == 1:
            return 1, True

        consumed = 1
        low, high = FIRST_CONTINUATION_RANGES.get(
            lead, (UTF8_CONTINUATION_MIN, UTF8_CONTINUATION_MAX)
        )
        for offset in range(1, length):
            index = pos + offset
            if index >= len(data):
                return consumed, False
            if not low <= data[index] <= high:
                return consumed, False
            consumed += 1
            low, high = UTF8_CONTINUATION_MIN, UTF8_CONTINUATION_MAX
        return consumed, True


class ByteStreamDecoder:
    """Decode byte buffers into spans of characters and invalid byte runs.

    Units cover the buffer exactly once, left to right, with no gaps or
    overlaps. Buffers that are entirely well-formed take a fast path that
    splits the already decoded text instead of scanning byte by byte.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self._scanner = UTF8SequenceScanner()
        self.logger = get_logger(__name__, correlation_id, "decoder")

    def decode(self, data: bytes) -> Iterator[DecodedUnit]:
        """Yield the decoded units of ``data`` lazily."""
        if not data:
            return iter(())
        try:
            text = data.decode("utf-8", errors="strict")
        except UnicodeDecodeError:
            self.logger.debug(
                "Ill-formed UTF-8 in chunk, scanning byte by byte",
                extra={"chunk_size": len(data)}
            )
            return self._decode_scanning(data)
        return self._decode_well_formed(data, text)

    def _decode_well_formed(self, data: bytes, text: str) -> Iterator[DecodedUnit]:
        position = 0
        for char in text:
            code_point = ord(char)
            if code_point <= ASCII_MAX:
                width = 1
            elif code_point < 0x800:
                width = 2
            elif code_point < 0x10000:
                width = 3
            else:
                width = 4
            end = position + width
            yield DecodedUnit(position, end, data[position:end], char)
            position = end

    def _decode_scanning(self, data: bytes) -> Iterator[DecodedUnit]:
        position = 0
        total = len(data)
        while position < total:
            consumed, well_formed = self._scanner.scan(data, position)
            end = position + consumed
            raw = data[position:end]
            char = raw.decode("utf-8") if well_formed else None
            yield DecodedUnit(position, end, raw, char)
            position = end


def decode_units(data: bytes) -> Iterator[DecodedUnit]:
    """Yield the decoded units of ``data`` using a default decoder."""
    return ByteStreamDecoder().decode(data)
