"""Command-line interface for hexv."""

from .main import CLIConfig, create_argument_parser, main

__all__ = ["CLIConfig", "create_argument_parser", "main"]
