#!/usr/bin/env python3
"""
Quick Start Guide for hexv.

Shows the three levels of the API: one-shot escaping, a reusable viewer with
statistics, and streaming through the lower level components.
"""

import io
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hexv import (
    EscapeConfig, EscapeStreamProcessor, FontNotFoundError, FontSet,
    HexViewer, escape, load_font_set, unescape
)

SAMPLE = "Tabs\tand  spaces,\r\nzero\u200bwidth, café → \U0001f600\n".encode("utf-8") + b"\xff"


def load_demo_fonts() -> FontSet:
    """Load a common font, falling back to an empty set."""
    for family in ("DejaVu Sans", "Noto Sans", "Arial"):
        try:
            return load_font_set(family)
        except FontNotFoundError:
            continue
    print("⚠️  No demo font found, every non-ASCII character will be escaped")
    return FontSet()


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - hexv")
    print("=" * 45)

    fonts = load_demo_fonts()

    # Step 1: One-shot escaping
    print("\n🔎 Step 1: Escaping a buffer")
    print("-" * 30)
    print(escape(SAMPLE, fonts=fonts))

    # Step 2: Options
    print("\n⚙️  Step 2: Visible whitespace and byte escapes")
    print("-" * 30)
    print(escape(SAMPLE, EscapeConfig.visible_whitespace(), fonts))
    print(escape(SAMPLE, EscapeConfig(bytes_mode=True, decimal_mode=True), fonts))
    print(escape(SAMPLE, EscapeConfig.raw()))

    # Step 3: Reusable viewer with statistics
    print("\n📊 Step 3: Reusable viewer")
    print("-" * 30)
    viewer = HexViewer(EscapeConfig(space_circle=True), fonts, correlation_id="demo")
    for line in SAMPLE.splitlines(keepends=True):
        viewer.escape(line)
    statistics = viewer.statistics
    print(f"✅ Runs: {statistics['total_runs']}, units: {statistics['units_processed']}, "
          f"escaped: {statistics['escaped_units']}")
    print(f"📏 Decisions: {statistics['decisions']}")

    # Step 4: Streaming
    print("\n🌊 Step 4: Line-buffered streaming")
    print("-" * 30)
    sink = io.BytesIO()
    processor = EscapeStreamProcessor(EscapeConfig(line_buffered=True), fonts)
    run_statistics = processor.process(io.BytesIO(SAMPLE), sink)
    print(sink.getvalue().decode("utf-8"))
    print(f"✅ {run_statistics.chunks_processed} chunks, "
          f"{run_statistics.invalid_sequences} invalid sequence(s)")

    # Step 5: Going back
    print("\n↩️  Step 5: Un-escaping")
    print("-" * 30)
    config = EscapeConfig(newline_escaped=True)
    escaped = escape(SAMPLE, config, fonts)
    print(f"✅ Round trip exact: {unescape(escaped, config) == SAMPLE}")


if __name__ == "__main__":
    quick_start_example()
