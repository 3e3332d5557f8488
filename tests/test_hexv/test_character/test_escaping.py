"""Tests for escape formatting and the output writer."""

import io
from unittest.mock import Mock

import pytest

from hexv.character.escaping import (
    EscapeWriter,
    OutputWriteError,
    format_byte_escape,
    format_bytes_escape,
    format_char_escape,
)
from hexv.shared.config import EscapeConfig


class TestFormatting:
    """Test escape text for bytes and characters."""

    def test_byte_escape_hex(self):
        """Test lowercase two digit hex byte escapes."""
        assert format_byte_escape(0xFF, EscapeConfig()) == "\\xff"
        assert format_byte_escape(0x0A, EscapeConfig()) == "\\x0a"

    def test_byte_escape_decimal(self):
        """Test zero padded three digit decimal byte escapes."""
        config = EscapeConfig(decimal_mode=True)

        assert format_byte_escape(255, config) == "\\d255"
        assert format_byte_escape(9, config) == "\\d009"

    def test_bytes_escape(self):
        """Test that every byte is escaped in order."""
        assert format_bytes_escape(b"\xe2\x86\x92", EscapeConfig()) == "\\xe2\\x86\\x92"

    def test_char_escape_code_point(self):
        """Test minimal lowercase hex code point escapes."""
        assert format_char_escape("\t", EscapeConfig()) == "\\u{9}"
        assert format_char_escape("\u200b", EscapeConfig()) == "\\u{200b}"
        assert format_char_escape("😀", EscapeConfig()) == "\\u{1f600}"

    def test_char_escape_decimal(self):
        """Test decimal code point escapes."""
        assert format_char_escape("😀", EscapeConfig(decimal_mode=True)) == "\\u{128512}"

    def test_char_escape_bytes_mode(self):
        """Test that bytes mode escapes the UTF-8 encoding instead."""
        assert format_char_escape("é", EscapeConfig(bytes_mode=True)) == "\\xc3\\xa9"
        assert format_char_escape(
            "é", EscapeConfig(bytes_mode=True, decimal_mode=True)
        ) == "\\d195\\d169"


class TestEscapeWriter:
    """Test the sink owner."""

    def test_writes_utf8_and_counts_bytes(self):
        """Test encoded output and byte accounting."""
        sink = io.BytesIO()

        with EscapeWriter(sink) as writer:
            writer.write("a→")

        assert sink.getvalue() == "a→".encode("utf-8")
        assert writer.bytes_written == 4

    def test_flushes_on_exit(self):
        """Test that the sink is flushed when the block ends."""
        sink = Mock()

        with EscapeWriter(sink) as writer:
            writer.write("x")

        sink.flush.assert_called_once()

    def test_write_failure(self):
        """Test that sink errors become OutputWriteError."""
        sink = Mock()
        sink.write.side_effect = BrokenPipeError("pipe closed")

        with pytest.raises(OutputWriteError):
            EscapeWriter(sink).write("x")

    def test_write_to_closed_sink(self):
        """Test that a closed sink is reported as a write failure."""
        sink = io.BytesIO()
        sink.close()

        with pytest.raises(OutputWriteError):
            EscapeWriter(sink).write("x")

    def test_flush_failure(self):
        """Test that flush errors become OutputWriteError."""
        sink = Mock()
        sink.flush.side_effect = OSError("disk full")

        with pytest.raises(OutputWriteError):
            EscapeWriter(sink).flush()

    def test_is_terminal(self):
        """Test terminal detection on different sinks."""
        tty_sink = Mock()
        tty_sink.isatty.return_value = True

        assert EscapeWriter(tty_sink).is_terminal()
        assert not EscapeWriter(io.BytesIO()).is_terminal()
        assert not EscapeWriter(object()).is_terminal()
