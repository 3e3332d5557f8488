"""Main CLI entry point for the hexv command-line tool.

Reads bytes from standard input (or a file), writes them to standard output
with invisible, ambiguous and unrenderable characters escaped.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from hexv import __version__
from hexv.api.escaper import HexViewer
from hexv.character.escaping import OutputWriteError
from hexv.fonts.oracle import FontLoadError, FontSet
from hexv.fonts.resolver import FontNotFoundError, load_font_set, split_font_names
from hexv.shared.config import ConfigError, ConfigValidationError, EscapeConfig
from hexv.shared.logging import configure_logging, get_logger

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_FONT_NOT_FOUND = 3
EXIT_FONT_UNLOADABLE = 4
EXIT_OUTPUT_ERROR = 5
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT

# Command-line flag destination -> EscapeConfig field
FLAG_FIELDS = {
    "bytes": "bytes_mode",
    "all": "all_hex_mode",
    "decimal": "decimal_mode",
    "newline_escaped": "newline_escaped",
    "newline_hex": "newline_hex",
    "carriage_return": "carriage_return_hex",
    "tab": "tab_hex",
    "space_circle": "space_circle",
    "space_hex": "space_hex",
    "line_buffered": "line_buffered",
}

CONFIG_FILE_KEYS = {"fontname", "escape"}


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.font_names: List[str] = []
        self.escape_config = EscapeConfig()
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds an optional ``fontname`` (comma separated string or
        list of family names) and an optional ``escape`` object with
        ``EscapeConfig`` fields.

        Raises:
            ConfigError: If the file cannot be read or is not valid JSON
            ConfigValidationError: If the file contents are not a valid
                configuration
        """
        try:
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Config file {config_path} must contain a JSON object"
            )
        unknown = sorted(set(data) - CONFIG_FILE_KEYS)
        if unknown:
            raise ConfigValidationError(
                f"Unknown config file key: {unknown[0]}",
                field_name=unknown[0],
                suggestions=sorted(CONFIG_FILE_KEYS),
            )

        config = cls()
        if "fontname" in data:
            fontname = data["fontname"]
            if not isinstance(fontname, (str, list)):
                raise ConfigValidationError(
                    "fontname must be a string or a list of strings", field_name="fontname"
                )
            config.font_names = split_font_names(fontname)
        if "escape" in data:
            config.escape_config = EscapeConfig.from_dict(data["escape"])
        return config

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Layer command-line options on top of the loaded values.

        Escape flags can only switch options on; ``--fontname`` replaces the
        font list entirely.
        """
        enabled = {
            field_name: True
            for dest, field_name in FLAG_FIELDS.items()
            if getattr(args, dest, False)
        }
        if enabled:
            self.escape_config = self.escape_config.override(**enabled)
        if args.fontname:
            self.font_names = split_font_names(args.fontname)
        self.verbose = self.verbose or args.verbose
        self.quiet = self.quiet or args.quiet

    @property
    def log_level(self) -> int:
        if self.verbose:
            return logging.DEBUG
        if self.quiet:
            return logging.ERROR
        return logging.WARNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fontname": ",".join(self.font_names),
            "escape": self.escape_config.to_dict(),
        }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="hexv",
        description=(
            "Print input with invisible, ambiguous and unrenderable characters "
            "replaced by escape sequences"
        )
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        help="Input file (default: standard input)"
    )
    parser.add_argument(
        "--fontname", "-f",
        help="Comma separated font families used to check whether a glyph is present"
    )
    parser.add_argument(
        "--bytes", "-b",
        action="store_true",
        help="Show bytes instead of unicode values"
    )
    parser.add_argument(
        "--all", "-a",
        action="store_true",
        help="Print everything as hex values"
    )
    parser.add_argument(
        "--decimal", "-d",
        action="store_true",
        help="Print hex values as decimal values"
    )
    parser.add_argument(
        "--newline-escaped", "-n",
        action="store_true",
        help="Print new line as \\n (takes precedence over --newline-hex)"
    )
    parser.add_argument(
        "--newline-hex", "-N",
        action="store_true",
        help="Print new line as hex value"
    )
    parser.add_argument(
        "--carriage-return", "-r",
        action="store_true",
        help="Print carriage return as hex value instead of \\r"
    )
    parser.add_argument(
        "--tab", "-t",
        action="store_true",
        help="Print tab as hex value instead of \\t"
    )
    parser.add_argument(
        "--space-circle", "-s",
        action="store_true",
        help="Print space as circle (\U0001F784) (takes precedence over --space-hex)"
    )
    parser.add_argument(
        "--space-hex", "-S",
        action="store_true",
        help="Print space as hex value"
    )
    parser.add_argument(
        "--line-buffered", "-l",
        action="store_true",
        help="Process and flush output line by line"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def load_cli_config(args: argparse.Namespace) -> CLIConfig:
    """Build the effective configuration from the config file and flags."""
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    config.apply_arguments(args)
    return config


def load_fonts(config: CLIConfig) -> FontSet:
    """Load the font set, skipped entirely when every byte is escaped."""
    if config.escape_config.uses_raw_byte_path:
        return FontSet()
    return load_font_set(config.font_names)


def run(config: CLIConfig, source: BinaryIO, sink: BinaryIO) -> int:
    """Escape ``source`` into ``sink`` and return an exit code."""
    logger = get_logger(__name__, None, "cli")
    viewer = HexViewer(config.escape_config, load_fonts(config))
    statistics = viewer.process(source, sink)
    logger.info("Run complete", extra=statistics.to_dict())
    return EXIT_SUCCESS


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None
) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_cli_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # Set up logging verbosity
    configure_logging(config.log_level)

    if not config.font_names and not config.escape_config.uses_raw_byte_path:
        print(
            "Error: a font name is required (use --fontname or a config file)",
            file=sys.stderr
        )
        return EXIT_USAGE

    sink = stdout if stdout is not None else sys.stdout.buffer
    try:
        if args.input is None:
            source = stdin if stdin is not None else sys.stdin.buffer
            return run(config, source, sink)
        with args.input.open("rb") as source:
            return run(config, source, sink)

    except FontNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FONT_NOT_FOUND
    except FontLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FONT_UNLOADABLE
    except OutputWriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_OUTPUT_ERROR
    except OSError as e:
        print(f"Error: Could not read input: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


def main_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
