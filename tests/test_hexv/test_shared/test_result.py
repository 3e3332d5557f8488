"""Tests for processing statistics."""

from hexv.shared.result import ProcessingStatistics


class TestProcessingStatistics:
    """Test statistics counters and derived values."""

    def test_escape_rate_ignores_verbatim_rules(self):
        """Test that passthrough and literal newlines are not escapes."""
        statistics = ProcessingStatistics(units_processed=4)
        statistics.record_decision("passthrough", 2)
        statistics.record_decision("newline_literal")
        statistics.record_decision("general_escape")

        assert statistics.escaped_units == 1
        assert statistics.escape_rate == 0.25

    def test_escape_rate_empty(self):
        """Test that an empty run has no escape rate."""
        assert ProcessingStatistics().escape_rate == 0.0

    def test_bytes_per_second(self):
        """Test throughput calculation."""
        statistics = ProcessingStatistics(bytes_read=500, processing_time_ms=250.0)

        assert statistics.bytes_per_second == 2000.0
        assert ProcessingStatistics(bytes_read=10).bytes_per_second == 0.0

    def test_merge(self):
        """Test folding one run into another."""
        total = ProcessingStatistics(bytes_read=3, units_processed=3)
        total.record_decision("passthrough", 3)
        run = ProcessingStatistics(bytes_read=2, units_processed=1, invalid_sequences=1)
        run.record_decision("invalid_encoding")

        total.merge(run)

        assert total.bytes_read == 5
        assert total.units_processed == 4
        assert total.invalid_sequences == 1
        assert total.decisions == {"passthrough": 3, "invalid_encoding": 1}

    def test_to_dict(self):
        """Test dictionary export includes derived values."""
        statistics = ProcessingStatistics(units_processed=1)
        statistics.record_decision("space_circle")

        data = statistics.to_dict()

        assert data["escaped_units"] == 1
        assert data["decisions"] == {"space_circle": 1}
