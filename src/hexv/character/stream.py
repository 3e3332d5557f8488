"""Stream driver: read input, escape it, write and flush the output.

Two reading modes are supported. Whole-buffer mode reads the entire input
before escaping it in one pass and flushing once. Line-buffered mode reads up
to and including each newline byte, escapes that chunk and flushes, which
keeps latency and memory bounded for interactive or endless sources. A
newline byte never occurs inside a multi-byte UTF-8 sequence, so line chunks
never split a character.
"""

import time
from typing import BinaryIO, Iterator, Optional

from hexv.character.classification import CharacterClassifier
from hexv.character.escaping import EscapeWriter, format_bytes_escape
from hexv.fonts.oracle import FontSet
from hexv.shared.config import EscapeConfig
from hexv.shared.logging import get_logger
from hexv.shared.result import ProcessingStatistics

MS_PER_SECOND = 1000
RAW_BYTE_RULE = "raw_byte"
TRAILING_NEWLINE = "\n"


class EscapeStreamProcessor:
    """Drive decoding, classification and output for a whole run.

    Examples:
        >>> import io
        >>> sink = io.BytesIO()
        >>> processor = EscapeStreamProcessor(EscapeConfig(newline_escaped=True))
        >>> _ = processor.process(io.BytesIO(b"A\\n"), sink)
        >>> sink.getvalue()
        b'A\\\\n'
    """

    def __init__(
        self,
        config: Optional[EscapeConfig] = None,
        fonts: Optional[FontSet] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the stream processor.

        Args:
            config: Escape configuration (defaults to ``EscapeConfig()``)
            fonts: Fonts consulted for non-ASCII characters; not needed in
                raw mode (``all_hex_mode`` with ``bytes_mode``)
            correlation_id: Optional correlation ID for run tracking
        """
        self.config = config or EscapeConfig()
        self.fonts = fonts if fonts is not None else FontSet()
        self.correlation_id = correlation_id
        self.classifier = CharacterClassifier(self.config, self.fonts, correlation_id)
        self.logger = get_logger(__name__, correlation_id, "stream_driver")

    def process(self, source: BinaryIO, sink: BinaryIO) -> ProcessingStatistics:
        """Escape everything readable from ``source`` into ``sink``.

        Raises:
            OutputWriteError: If the sink cannot be written or flushed
        """
        start_time = time.time()
        statistics = ProcessingStatistics(raw_byte_path_used=self.config.uses_raw_byte_path)

        with EscapeWriter(sink, self.correlation_id) as writer:
            for chunk in self._read_chunks(source):
                statistics.bytes_read += len(chunk)
                statistics.chunks_processed += 1
                writer.write(self.escape_chunk(chunk, statistics))
                if self.config.line_buffered:
                    writer.flush()

            # Checked once, after all input is consumed
            if self.config.wants_trailing_newline and writer.is_terminal():
                writer.write(TRAILING_NEWLINE)
                statistics.trailing_newline_written = True

            statistics.bytes_written = writer.bytes_written

        statistics.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        self.logger.debug("Stream processed", extra=statistics.to_dict())
        return statistics

    def escape_chunk(
        self,
        chunk: bytes,
        statistics: Optional[ProcessingStatistics] = None
    ) -> str:
        """Return the escaped text of one complete chunk of input."""
        if self.config.uses_raw_byte_path:
            if statistics is not None:
                statistics.units_processed += len(chunk)
                statistics.record_decision(RAW_BYTE_RULE, len(chunk))
            return format_bytes_escape(chunk, self.config)
        return self.classifier.escape_chunk(chunk, statistics)

    def escape_bytes(self, data: bytes) -> str:
        """Escape an in-memory buffer in one pass, without a trailing newline."""
        return self.escape_chunk(data)

    def _read_chunks(self, source: BinaryIO) -> Iterator[bytes]:
        if not self.config.line_buffered:
            data = source.read()
            if data:
                yield data
            return

        while True:
            line = source.readline()
            if not line:
                return
            yield line
