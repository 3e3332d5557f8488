"""Glyph presence queries over one or more parsed font programs.

The classifier only needs to know whether *some* loaded font can draw a
character. That capability is expressed by the ``GlyphOracle`` protocol, so
font programs parsed from files, from memory, or test doubles are all
interchangeable.
"""

from io import BytesIO
from pathlib import Path
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from fontTools.ttLib import TTFont

from hexv.shared.logging import get_logger

NOTDEF_GLYPH_ID = 0
PRESENCE_CACHE_LIMIT = 4096


class FontLoadError(Exception):
    """Raised when font data cannot be parsed as a usable font program."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


@runtime_checkable
class GlyphOracle(Protocol):
    """Anything that can tell whether it has a glyph for a character."""

    def has_glyph(self, char: str) -> bool:
        ...


class FontProgram:
    """A parsed font program answering glyph presence queries.

    Construction parses the character map eagerly so that an unusable font is
    reported immediately instead of on the first query.

    Attributes:
        name: Human readable origin of the font (family name or path)
        face_index: Face number inside a font collection
    """

    def __init__(self, font: TTFont, name: str, face_index: int = 0) -> None:
        self.name = name
        self.face_index = face_index
        try:
            cmap = font.getBestCmap() or {}
            self._code_points: FrozenSet[int] = frozenset(
                code_point for code_point, glyph_name in cmap.items()
                if font.getGlyphID(glyph_name) != NOTDEF_GLYPH_ID
            )
        except Exception as e:
            raise FontLoadError(f"Could not load font '{name}': {e}", source=name) from e

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        name: str = "<memory>",
        face_index: int = 0
    ) -> "FontProgram":
        """Parse a font program held in memory.

        Raises:
            FontLoadError: If ``data`` is not a loadable font
        """
        try:
            font = TTFont(BytesIO(data), fontNumber=face_index, lazy=True)
        except Exception as e:
            raise FontLoadError(f"Could not load font '{name}': {e}", source=name) from e
        return cls(font, name, face_index)

    @classmethod
    def from_path(cls, path: Union[str, Path], face_index: int = 0) -> "FontProgram":
        """Parse a font program from a file.

        Raises:
            FontLoadError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FontLoadError(
                f"Could not read font file '{path}': {e}", source=str(path)
            ) from e
        return cls.from_bytes(data, name=str(path), face_index=face_index)

    @property
    def glyph_count(self) -> int:
        """Number of code points mapped to a real glyph."""
        return len(self._code_points)

    def has_glyph(self, char: str) -> bool:
        return ord(char) in self._code_points

    def __repr__(self) -> str:
        return f"FontProgram(name={self.name!r}, face_index={self.face_index})"


class FontSet:
    """Ordered collection of glyph oracles queried as a logical OR.

    The first oracle that reports a glyph ends the search. Answers are cached,
    which is sound because the set is read-only once built.
    """

    def __init__(
        self,
        oracles: Iterable[GlyphOracle] = (),
        correlation_id: Optional[str] = None
    ) -> None:
        self._oracles: Tuple[GlyphOracle, ...] = tuple(oracles)
        self._presence_cache: Dict[str, bool] = {}
        self.logger = get_logger(__name__, correlation_id, "font_set")
        self.logger.debug(
            "Font set ready",
            extra={"font_count": len(self._oracles)}
        )

    def __len__(self) -> int:
        return len(self._oracles)

    def __iter__(self) -> Iterator[GlyphOracle]:
        return iter(self._oracles)

    def __bool__(self) -> bool:
        return bool(self._oracles)

    def glyph_present(self, char: str) -> bool:
        """Return True if any font in the set has a glyph for ``char``."""
        cached = self._presence_cache.get(char)
        if cached is not None:
            return cached

        present = any(oracle.has_glyph(char) for oracle in self._oracles)

        if len(self._presence_cache) < PRESENCE_CACHE_LIMIT:
            self._presence_cache[char] = present
        return present

    def clear_cache(self) -> None:
        self._presence_cache.clear()


def glyph_present(fonts: FontSet, char: str) -> bool:
    """Return True iff at least one font in ``fonts`` defines a glyph for ``char``."""
    return fonts.glyph_present(char)
