"""Shared fixtures: small font programs synthesised in memory."""

from io import BytesIO
from pathlib import Path
from typing import Iterable

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from hexv.fonts.oracle import FontProgram, FontSet

TEST_FAMILY = "Hexv Test Sans"
TEST_CHARS = "Aé→"


def _box_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((400, 700))
    pen.lineTo((400, 0))
    pen.closePath()
    return pen.glyph()


def build_font_bytes(
    chars: Iterable[str] = TEST_CHARS,
    family: str = TEST_FAMILY,
    style: str = "Regular",
    notdef_chars: Iterable[str] = ()
) -> bytes:
    """Build a TrueType font whose cmap covers exactly ``chars``.

    Characters in ``notdef_chars`` are also mapped, but to ``.notdef``.
    """
    chars = list(chars)
    glyph_names = [f"uni{ord(char):04X}" for char in chars]
    glyph_order = [".notdef"] + glyph_names

    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    cmap = {ord(char): name for char, name in zip(chars, glyph_names)}
    cmap.update((ord(char), ".notdef") for char in notdef_chars)
    builder.setupCharacterMap(cmap)
    builder.setupGlyf({name: _box_glyph() for name in glyph_order})
    builder.setupHorizontalMetrics({name: (500, 100) for name in glyph_order})
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": family, "styleName": style})
    builder.setupOS2()
    builder.setupPost()

    buffer = BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    return build_font_bytes()


@pytest.fixture
def font_program(font_bytes) -> FontProgram:
    return FontProgram.from_bytes(font_bytes, name=TEST_FAMILY)


@pytest.fixture
def notdef_font_program() -> FontProgram:
    """Font mapping "A" to a real glyph and "B" to .notdef."""
    return FontProgram.from_bytes(build_font_bytes("A", notdef_chars="B"), name="Notdef Test")


@pytest.fixture
def font_set(font_program) -> FontSet:
    return FontSet([font_program])


@pytest.fixture
def font_dir(tmp_path, font_bytes) -> Path:
    """Directory holding a regular and a bold face of the test family."""
    (tmp_path / "HexvTestSans-Bold.ttf").write_bytes(
        build_font_bytes("A", style="Bold")
    )
    (tmp_path / "HexvTestSans-Regular.ttf").write_bytes(font_bytes)
    return tmp_path
