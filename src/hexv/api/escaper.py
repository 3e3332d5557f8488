"""Escaping API with progressive disclosure.

Level 1 functions escape a single buffer or file. ``HexViewer`` keeps a
configuration and font set for reuse across many inputs and streams.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

from hexv.character.stream import EscapeStreamProcessor
from hexv.fonts.oracle import FontSet
from hexv.shared.config import EscapeConfig
from hexv.shared.logging import get_logger
from hexv.shared.result import ProcessingStatistics

InputType = Union[str, bytes]

MS_PER_SECOND = 1000


def escape(
    data: InputType,
    config: Optional[EscapeConfig] = None,
    fonts: Optional[FontSet] = None
) -> str:
    """Escape a buffer and return the resulting text.

    Args:
        data: Input as bytes, or as text (encoded to UTF-8 first)
        config: Escape configuration (defaults to ``EscapeConfig()``)
        fonts: Fonts consulted for non-ASCII characters

    Examples:
        >>> escape(b"A\\tB")
        'A\\\\tB'
        >>> escape(b"\\xff")
        '\\\\xff'
        >>> escape("\\U0001f600")
        '\\\\u{1f600}'
    """
    return HexViewer(config, fonts).escape(data)


def escape_file(
    path: Union[str, Path],
    config: Optional[EscapeConfig] = None,
    fonts: Optional[FontSet] = None
) -> str:
    """Escape the contents of a file and return the resulting text."""
    return HexViewer(config, fonts).escape(Path(path).read_bytes())


class HexViewer:
    """Reusable escaper bound to one configuration and font set.

    Attributes:
        config: Active escape configuration
        fonts: Font set consulted for non-ASCII characters
        correlation_id: Correlation ID for run tracking

    Examples:
        >>> viewer = HexViewer(EscapeConfig(space_circle=True))
        >>> viewer.escape(b"a b") == "a\\U0001f784b"
        True
    """

    def __init__(
        self,
        config: Optional[EscapeConfig] = None,
        fonts: Optional[FontSet] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or EscapeConfig()
        self.fonts = fonts if fonts is not None else FontSet()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "hex_viewer")
        self._processor = EscapeStreamProcessor(self.config, self.fonts, correlation_id)
        self._totals = ProcessingStatistics()
        self._run_count = 0

    def escape(self, data: InputType) -> str:
        """Escape an in-memory buffer in one pass."""
        if isinstance(data, str):
            data = data.encode("utf-8", "surrogatepass")
        start_time = time.time()
        run_statistics = ProcessingStatistics(
            raw_byte_path_used=self.config.uses_raw_byte_path,
            bytes_read=len(data),
            chunks_processed=1 if data else 0,
        )
        text = self._processor.escape_chunk(data, run_statistics)
        run_statistics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self._record(run_statistics)
        return text

    def process(self, source: BinaryIO, sink: BinaryIO) -> ProcessingStatistics:
        """Escape a readable binary stream into a writable binary stream.

        Raises:
            OutputWriteError: If the sink cannot be written or flushed
        """
        run_statistics = self._processor.process(source, sink)
        self._record(run_statistics)
        return run_statistics

    def reconfigure(
        self,
        config: Optional[EscapeConfig] = None,
        fonts: Optional[FontSet] = None
    ) -> None:
        """Swap the configuration and/or font set for subsequent runs."""
        if config is not None:
            self.config = config
        if fonts is not None:
            self.fonts = fonts
        self._processor = EscapeStreamProcessor(self.config, self.fonts, self.correlation_id)
        self.logger.debug(
            "Viewer reconfigured",
            extra={"config_updated": config is not None, "fonts_updated": fonts is not None}
        )

    def _record(self, run_statistics: ProcessingStatistics) -> None:
        self._run_count += 1
        self._totals.merge(run_statistics)

    @property
    def statistics(self) -> Dict[str, Any]:
        """Usage statistics accumulated over every run."""
        totals = self._totals.to_dict()
        totals["total_runs"] = self._run_count
        totals["correlation_id"] = self.correlation_id
        return totals

    def reset_statistics(self) -> None:
        self._totals = ProcessingStatistics()
        self._run_count = 0
