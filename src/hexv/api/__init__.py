"""Public escaping API for hexv."""

from .escaper import HexViewer, escape, escape_file

__all__ = ["HexViewer", "escape", "escape_file"]
