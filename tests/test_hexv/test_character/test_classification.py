"""Tests for per-character escape decisions."""

import pytest

from hexv.character.classification import (
    CharacterClassifier,
    EscapeAction,
    is_ascii_control,
    is_non_space_whitespace,
)
from hexv.character.decoding import DecodedUnit
from hexv.character.escaping import SPACE_CIRCLE
from hexv.fonts.oracle import FontSet
from hexv.shared.config import EscapeConfig
from hexv.shared.result import ProcessingStatistics


def escape(data, config=None, fonts=None):
    return CharacterClassifier(config, fonts).escape_chunk(data)


class CountingOracle:
    """Glyph oracle test double recording every query."""

    def __init__(self, chars):
        self.chars = set(chars)
        self.queries = []

    def has_glyph(self, char):
        self.queries.append(char)
        return char in self.chars


class TestScenarios:
    """End to end decisions for representative inputs."""

    def test_plain_text_with_newline_unchanged(self, font_set):
        """Test that printable text and newlines pass through."""
        assert escape(b"A\n", fonts=font_set) == "A\n"

    def test_newline_escaped_token(self, font_set):
        """Test that newline becomes the two character token."""
        output = escape(b"A\n", EscapeConfig(newline_escaped=True), font_set)

        assert output == "A\\n"
        assert len(output) == 3

    @pytest.mark.parametrize("config", [
        EscapeConfig(),
        EscapeConfig(bytes_mode=True),
        EscapeConfig(all_hex_mode=True),
        EscapeConfig(newline_escaped=True, space_circle=True),
    ])
    def test_invalid_byte_is_hex_escaped(self, config):
        """Test that an invalid byte is escaped under any options."""
        assert escape(b"\xff", config) == "\\xff"

    def test_invalid_byte_decimal(self):
        """Test invalid bytes in decimal mode."""
        assert escape(b"\xff", EscapeConfig(decimal_mode=True)) == "\\d255"

    def test_character_missing_from_fonts(self):
        """Test that a character no font can draw is escaped."""
        assert escape("\U0001f600".encode("utf-8"), fonts=FontSet()) == "\\u{1f600}"

    def test_space_circle(self):
        """Test that space becomes a single circle glyph."""
        output = escape(b" ", EscapeConfig(space_circle=True))

        assert output == SPACE_CIRCLE
        assert len(output) == 1

    def test_tab_hex_bypasses_token(self):
        """Test that tab_hex escapes the tab code point."""
        assert escape(b"\t", EscapeConfig(tab_hex=True)) == "\\u{9}"


class TestRules:
    """Test each rule of the decision table."""

    def test_tab_token_by_default(self):
        """Test the literal tab token."""
        assert escape(b"\t") == "\\t"

    def test_carriage_return(self):
        """Test the carriage return token and its hex override."""
        assert escape(b"\r") == "\\r"
        assert escape(b"\r", EscapeConfig(carriage_return_hex=True)) == "\\u{d}"

    def test_newline_hex(self):
        """Test newline escaped like a control character."""
        assert escape(b"\n", EscapeConfig(newline_hex=True)) == "\\u{a}"

    def test_space_hex(self):
        """Test escaped space."""
        assert escape(b"a b", EscapeConfig(space_hex=True)) == "a\\u{20}b"
        assert escape(b"a b") == "a b"

    def test_control_characters(self):
        """Test C0 controls and DEL."""
        assert escape(b"\x00\x1b\x7f") == "\\u{0}\\u{1b}\\u{7f}"

    def test_non_space_whitespace_always_escaped(self):
        """Test that odd whitespace is escaped even if a font could draw it."""
        fonts = FontSet([CountingOracle("\u00a0\u2003")])

        assert escape("\u00a0\u2003".encode("utf-8"), fonts=fonts) == "\\u{a0}\\u{2003}"

    def test_font_coverage_decides_non_ascii(self, font_set):
        """Test that drawable characters pass and others are escaped."""
        assert escape("é→".encode("utf-8"), fonts=font_set) == "é→"
        assert escape("é→".encode("utf-8")) == "\\u{e9}\\u{2192}"

    def test_printable_ascii_never_consults_fonts(self):
        """Test that ASCII passes without any font."""
        oracle = CountingOracle("")

        assert escape(b"Hello", fonts=FontSet([oracle])) == "Hello"
        assert oracle.queries == []

    def test_all_hex_mode_escapes_everything(self, font_set):
        """Test that all-hex mode bypasses every special case."""
        config = EscapeConfig(all_hex_mode=True, newline_escaped=True, space_circle=True)

        assert escape(b"A \n", config, font_set) == "\\u{41}\\u{20}\\u{a}"

    def test_all_hex_decimal(self):
        """Test decimal code points in all-hex mode."""
        assert escape(b"Az", EscapeConfig(all_hex_mode=True, decimal_mode=True)) == (
            "\\u{65}\\u{122}"
        )

    def test_bytes_mode_escapes_encoding(self):
        """Test that escaped characters show their UTF-8 bytes."""
        assert escape("\U0001f600".encode("utf-8"), EscapeConfig(bytes_mode=True)) == (
            "\\xf0\\x9f\\x98\\x80"
        )

    @pytest.mark.parametrize("data", [b"a\nb\n", b" x \n", "\u00a0\n\U0001f600 ".encode("utf-8")])
    def test_newline_options_mutually_exclusive(self, data):
        """Test that newline_escaped fully masks newline_hex."""
        both = escape(data, EscapeConfig(newline_escaped=True, newline_hex=True))

        assert both == escape(data, EscapeConfig(newline_escaped=True))

    @pytest.mark.parametrize("data", [b"a b", b"  \n", "\u00a0 \U0001f600".encode("utf-8")])
    def test_space_options_mutually_exclusive(self, data):
        """Test that space_circle fully masks space_hex."""
        both = escape(data, EscapeConfig(space_circle=True, space_hex=True))

        assert both == escape(data, EscapeConfig(space_circle=True))


class TestCharacterClassifier:
    """Test classifier mechanics."""

    def test_decision_names(self, font_set):
        """Test the rule and action reported for a decision."""
        classifier = CharacterClassifier(EscapeConfig(space_circle=True), font_set)

        decision = classifier.classify_char(" ")

        assert decision.rule == "space_circle"
        assert decision.action is EscapeAction.SUBSTITUTE

    def test_invalid_unit_decision(self):
        """Test that invalid units escape their source bytes."""
        decision = CharacterClassifier().classify(DecodedUnit(0, 2, b"\xe2\x86"))

        assert decision.rule == CharacterClassifier.INVALID_ENCODING_RULE
        assert decision.action is EscapeAction.ESCAPE_BYTES
        assert decision.text == "\\xe2\\x86"

    def test_round_trip_mismatch_escapes_bytes(self):
        """Test that a character not matching its source bytes is byte escaped."""
        unit = DecodedUnit(0, 2, b"\xc0\x80", "\x00")

        assert CharacterClassifier().classify(unit).text == "\\xc0\\x80"

    def test_decisions_are_cached(self):
        """Test that fonts are asked once per distinct character."""
        oracle = CountingOracle("é")
        classifier = CharacterClassifier(fonts=FontSet([oracle]))

        classifier.escape_chunk("éééé".encode("utf-8"))

        assert oracle.queries == ["é"]

    def test_statistics(self):
        """Test per-rule counts and invalid sequence tally."""
        statistics = ProcessingStatistics()

        CharacterClassifier().escape_chunk(b"a\tb\xff\n", statistics)

        assert statistics.units_processed == 5
        assert statistics.invalid_sequences == 1
        assert statistics.decisions == {
            "passthrough": 2,
            "tab_literal": 1,
            "invalid_encoding": 1,
            "newline_literal": 1,
        }


class TestPredicates:
    """Test character predicates."""

    def test_is_ascii_control(self):
        assert is_ascii_control("\x00")
        assert is_ascii_control("\x7f")
        assert not is_ascii_control(" ")
        assert not is_ascii_control("\x85")

    def test_is_non_space_whitespace(self):
        assert is_non_space_whitespace("\u3000")
        assert is_non_space_whitespace("\x85")
        assert not is_non_space_whitespace(" ")
        assert not is_non_space_whitespace("\u200b")
