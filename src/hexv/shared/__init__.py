"""Shared utilities for hexv.

This module provides the configuration record, result objects and logging
helpers used across the character, font and CLI layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    EscapeConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import ProcessingStatistics

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "EscapeConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "ProcessingStatistics",
]
