"""Locate installed font programs by family name.

Resolution order for a requested family:

1. an existing file path is loaded as is;
2. FontConfig (``fc-list``) is asked for faces of that family;
3. the usual platform font directories are scanned and each face's name
   table is compared with the requested family.

Among several faces of one family, upright regular styles are preferred.
"""

import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from fontTools.ttLib import TTCollection, TTFont

from hexv.fonts.oracle import FontLoadError, FontProgram, FontSet
from hexv.shared.logging import get_logger

FONT_FILE_EXTENSIONS = {".ttf", ".otf", ".ttc", ".otc"}
COLLECTION_EXTENSIONS = {".ttc", ".otc"}

NAME_ID_FAMILY = 1
NAME_ID_SUBFAMILY = 2
NAME_ID_TYPOGRAPHIC_FAMILY = 16
NAME_ID_TYPOGRAPHIC_SUBFAMILY = 17

REGULAR_STYLE_NAMES = {"regular", "book", "normal", "roman", "plain"}

FC_LIST_FORMAT = "%{file}\t%{index}\t%{family}\t%{style}\n"
FONT_NAME_SEPARATOR = ","

IS_LINUX = sys.platform.startswith("linux")
IS_WINDOWS = sys.platform.startswith("win")
IS_MACOS = sys.platform == "darwin"

_UNESCAPED_COMMA = re.compile(r"(?<!\\),")
_ESCAPE = re.compile(r"\\(.)")


class FontNotFoundError(Exception):
    """Raised when no installed font matches a requested family."""

    def __init__(self, family: str) -> None:
        super().__init__(f"Font '{family}' not found")
        self.family = family


@dataclass(frozen=True)
class FontSource:
    """Loadable font program bytes for a resolved family.

    Attributes:
        family: The family name that was requested
        data: Raw font file contents
        path: File the data was read from, if any
        face_index: Face number inside a font collection
    """
    family: str
    data: bytes = field(repr=False)
    path: Optional[Path] = None
    face_index: int = 0

    def load(self) -> FontProgram:
        """Parse the font program.

        Raises:
            FontLoadError: If the data is not a loadable font
        """
        return FontProgram.from_bytes(self.data, name=self.family, face_index=self.face_index)


@dataclass(frozen=True)
class FontCandidate:
    """A font face discovered on the system."""
    path: Path
    face_index: int
    families: Tuple[str, ...]
    style: str = ""

    def matches(self, family: str) -> bool:
        wanted = normalize_family(family)
        return any(normalize_family(name) == wanted for name in self.families)

    @property
    def style_rank(self) -> int:
        """0 for regular upright styles, 1 for everything else."""
        words = set(self.style.casefold().replace("-", " ").split())
        return 0 if words & REGULAR_STYLE_NAMES else 1


def normalize_family(name: str) -> str:
    return " ".join(name.split()).casefold()


def split_font_names(font_names: Union[str, Sequence[str]]) -> List[str]:
    """Split a comma separated family list, dropping blank entries."""
    if isinstance(font_names, str):
        font_names = font_names.split(FONT_NAME_SEPARATOR)
    return [name.strip() for name in font_names if name.strip()]


def run_command(argv: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        argv,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )


def default_font_dirs() -> List[Path]:
    """Known font directories for the current platform (system + user)."""
    home = Path.home()
    dirs: List[Path] = []
    if IS_WINDOWS:
        windir = os.environ.get("WINDIR") or os.environ.get("SystemRoot")
        if windir:
            dirs.append(Path(windir) / "Fonts")
        local = os.environ.get("LOCALAPPDATA")
        if local:
            dirs.append(Path(local) / "Microsoft" / "Windows" / "Fonts")
    elif IS_MACOS:
        dirs.extend([
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
            home / "Library" / "Fonts",
        ])
    else:
        data_home = os.environ.get("XDG_DATA_HOME")
        dirs.extend([
            Path("/usr/share/fonts"),
            Path("/usr/local/share/fonts"),
            Path(data_home) / "fonts" if data_home else home / ".local" / "share" / "fonts",
            home / ".fonts",
        ])
    return [d for d in dirs if d.is_dir()]


def parse_fc_list_output(output: str) -> List[FontCandidate]:
    """Parse ``fc-list`` lines produced with ``FC_LIST_FORMAT``."""
    candidates = []
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) != 4 or not parts[0]:
            continue
        file_name, index, families, style = parts
        try:
            face_index = int(index) if index else 0
        except ValueError:
            face_index = 0
        family_names = tuple(
            _ESCAPE.sub(r"\1", name).strip()
            for name in _UNESCAPED_COMMA.split(families)
            if name.strip()
        )
        first_style = _ESCAPE.sub(r"\1", _UNESCAPED_COMMA.split(style)[0]).strip()
        candidates.append(
            FontCandidate(Path(file_name), face_index, family_names, first_style)
        )
    return candidates


def _best_name(font: TTFont, *name_ids: int) -> str:
    if "name" not in font:
        return ""
    for name_id in name_ids:
        value = font["name"].getDebugName(name_id)
        if value and value.strip():
            return value.strip()
    return ""


def read_font_candidates(path: Path) -> List[FontCandidate]:
    """Describe every face in a font file from its name table.

    The file is closed before returning.
    """
    if path.suffix.lower() in COLLECTION_EXTENSIONS:
        with TTCollection(str(path), lazy=True) as collection:
            return [
                _describe_face(path, face_index, font)
                for face_index, font in enumerate(collection.fonts)
            ]
    with TTFont(str(path), lazy=True) as font:
        return [_describe_face(path, 0, font)]


def _describe_face(path: Path, face_index: int, font: TTFont) -> FontCandidate:
    families = tuple(
        name for name in (
            _best_name(font, NAME_ID_TYPOGRAPHIC_FAMILY),
            _best_name(font, NAME_ID_FAMILY),
        ) if name
    )
    style = _best_name(font, NAME_ID_TYPOGRAPHIC_SUBFAMILY, NAME_ID_SUBFAMILY)
    return FontCandidate(path, face_index, families, style)


class FontResolver:
    """Resolve font family names to loadable font program bytes."""

    def __init__(
        self,
        font_dirs: Optional[Iterable[Union[str, Path]]] = None,
        use_fontconfig: bool = True,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the resolver.

        Args:
            font_dirs: Directories to scan when FontConfig has no answer
                (defaults to the platform font directories)
            use_fontconfig: Whether to query ``fc-list`` first
            correlation_id: Optional correlation ID for run tracking
        """
        self.font_dirs = (
            [Path(d) for d in font_dirs] if font_dirs is not None else None
        )
        self.use_fontconfig = use_fontconfig
        self.logger = get_logger(__name__, correlation_id, "font_resolver")
        self._directory_index: Optional[List[FontCandidate]] = None

    def resolve(self, family: str) -> FontSource:
        """Find and read the font program for ``family``.

        Raises:
            FontNotFoundError: If no installed font matches ``family``
            FontLoadError: If the matching font file cannot be read
        """
        as_path = Path(family).expanduser()
        if as_path.suffix.lower() in FONT_FILE_EXTENSIONS and as_path.is_file():
            self.logger.debug("Using font file path", extra={"font_path": str(as_path)})
            return self._read(family, FontCandidate(as_path, 0, (family,)))

        candidate = None
        if self.use_fontconfig:
            candidate = self._best_match(family, self._fontconfig_candidates(family))
        if candidate is None:
            candidate = self._best_match(family, self._scan_directories())
        if candidate is None:
            raise FontNotFoundError(family)

        self.logger.debug(
            "Resolved font family",
            extra={
                "family": family,
                "font_path": str(candidate.path),
                "face_index": candidate.face_index,
                "style": candidate.style,
            }
        )
        return self._read(family, candidate)

    def _best_match(
        self, family: str, candidates: Iterable[FontCandidate]
    ) -> Optional[FontCandidate]:
        matching = [c for c in candidates if c.matches(family)]
        if not matching:
            return None
        # sorted() is stable: discovery order breaks ties
        return sorted(matching, key=lambda c: c.style_rank)[0]

    def _fontconfig_candidates(self, family: str) -> List[FontCandidate]:
        if shutil.which("fc-list") is None:
            self.logger.debug("fc-list not available, skipping FontConfig lookup")
            return []
        proc = run_command(["fc-list", f"--format={FC_LIST_FORMAT}"])
        if proc.returncode != 0:
            self.logger.warning(
                "fc-list failed",
                extra={"returncode": proc.returncode, "stderr": proc.stderr.strip()}
            )
            return []
        return parse_fc_list_output(proc.stdout)

    def _scan_directories(self) -> List[FontCandidate]:
        if self._directory_index is not None:
            return self._directory_index

        font_dirs = self.font_dirs if self.font_dirs is not None else default_font_dirs()
        index: List[FontCandidate] = []
        for font_dir in font_dirs:
            for path in sorted(font_dir.rglob("*")):
                if not path.is_file() or path.suffix.lower() not in FONT_FILE_EXTENSIONS:
                    continue
                try:
                    index.extend(read_font_candidates(path))
                except Exception as e:
                    self.logger.warning(
                        "Skipping unreadable font file",
                        extra={"font_path": str(path), "error": str(e)}
                    )
        self._directory_index = index
        return index

    def _read(self, family: str, candidate: FontCandidate) -> FontSource:
        try:
            data = candidate.path.read_bytes()
        except OSError as e:
            raise FontLoadError(
                f"Could not read font file '{candidate.path}': {e}", source=family
            ) from e
        return FontSource(family, data, candidate.path, candidate.face_index)


def load_font_set(
    font_names: Union[str, Sequence[str]],
    resolver: Optional[FontResolver] = None,
    correlation_id: Optional[str] = None
) -> FontSet:
    """Resolve and parse each requested family, in order.

    Args:
        font_names: Comma separated family names, or a sequence of them
        resolver: Resolver to use (a default one is created if omitted)
        correlation_id: Optional correlation ID for run tracking

    Raises:
        ValueError: If no family name is given
        FontNotFoundError: If a family cannot be found
        FontLoadError: If a found font cannot be parsed
    """
    names = split_font_names(font_names)
    if not names:
        raise ValueError("At least one font family name is required")

    resolver = resolver or FontResolver(correlation_id=correlation_id)
    programs: Dict[str, FontProgram] = {}
    for name in names:
        if name not in programs:
            programs[name] = resolver.resolve(name).load()
    return FontSet(programs.values(), correlation_id=correlation_id)
