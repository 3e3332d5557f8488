"""Result objects for hexv escaping runs."""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ProcessingStatistics:
    """Counters collected while escaping a stream.

    ``decisions`` maps the name of the classification rule that fired to the
    number of units it handled.
    """

    bytes_read: int = 0
    bytes_written: int = 0
    chunks_processed: int = 0
    units_processed: int = 0
    invalid_sequences: int = 0
    raw_byte_path_used: bool = False
    trailing_newline_written: bool = False
    processing_time_ms: float = 0.0
    decisions: Dict[str, int] = field(default_factory=dict)

    @property
    def escaped_units(self) -> int:
        """Number of units written in escaped form rather than verbatim."""
        return sum(
            count for rule, count in self.decisions.items()
            if rule not in ("newline_literal", "passthrough")
        )

    @property
    def escape_rate(self) -> float:
        """Fraction of processed units that were not passed through."""
        if self.units_processed == 0:
            return 0.0
        return self.escaped_units / self.units_processed

    @property
    def bytes_per_second(self) -> float:
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_read * 1000.0) / self.processing_time_ms

    def record_decision(self, rule: str, count: int = 1) -> None:
        """Add ``count`` occurrences of ``rule`` to the distribution."""
        self.decisions[rule] = self.decisions.get(rule, 0) + count

    def merge(self, other: "ProcessingStatistics") -> None:
        """Fold the counters of ``other`` into this instance."""
        self.bytes_read += other.bytes_read
        self.bytes_written += other.bytes_written
        self.chunks_processed += other.chunks_processed
        self.units_processed += other.units_processed
        self.invalid_sequences += other.invalid_sequences
        self.processing_time_ms += other.processing_time_ms
        for rule, count in other.decisions.items():
            self.record_decision(rule, count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bytes_read": self.bytes_read,
            "bytes_written": self.bytes_written,
            "chunks_processed": self.chunks_processed,
            "units_processed": self.units_processed,
            "invalid_sequences": self.invalid_sequences,
            "escaped_units": self.escaped_units,
            "raw_byte_path_used": self.raw_byte_path_used,
            "trailing_newline_written": self.trailing_newline_written,
            "processing_time_ms": self.processing_time_ms,
            "decisions": dict(self.decisions),
        }
