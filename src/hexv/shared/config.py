"""Configuration classes for hexv.

The escape configuration is an immutable record resolved once at startup and
consulted read-only by the decoder, classifier, escape writer and stream
driver. Conflicting options are resolved by fixed precedence at construction
time rather than per character.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional, Set


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class EscapeConfig:
    """Options controlling which characters are escaped and how.

    Attributes:
        bytes_mode: Escape characters as their UTF-8 byte sequence instead of
            their code point
        all_hex_mode: Escape every character, bypassing all special cases
        decimal_mode: Write escaped numbers in decimal instead of hex
        newline_escaped: Write newline as the two-character token ``\\n``
            (takes precedence over ``newline_hex``)
        newline_hex: Escape newline like any other control character
        carriage_return_hex: Escape carriage return instead of writing ``\\r``
        tab_hex: Escape tab instead of writing ``\\t``
        space_circle: Replace space with a circle glyph (takes precedence
            over ``space_hex``)
        space_hex: Escape space
        line_buffered: Process input line by line, flushing after each line
    """

    bytes_mode: bool = False
    all_hex_mode: bool = False
    decimal_mode: bool = False
    newline_escaped: bool = False
    newline_hex: bool = False
    carriage_return_hex: bool = False
    tab_hex: bool = False
    space_circle: bool = False
    space_hex: bool = False
    line_buffered: bool = False

    def __post_init__(self) -> None:
        """Validate field types and resolve mutually exclusive options."""
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if not isinstance(value, bool):
                raise ConfigValidationError(
                    f"{config_field.name} must be a boolean, got {type(value).__name__}",
                    field_name=config_field.name,
                )

        # Frozen dataclass: precedence is applied through object.__setattr__
        if self.newline_escaped and self.newline_hex:
            object.__setattr__(self, "newline_hex", False)
        if self.space_circle and self.space_hex:
            object.__setattr__(self, "space_hex", False)

    @property
    def uses_raw_byte_path(self) -> bool:
        """Whether input can be escaped byte by byte without decoding."""
        return self.all_hex_mode and self.bytes_mode

    @property
    def wants_trailing_newline(self) -> bool:
        """Whether output may end without a raw newline.

        Only these modes stop raw newlines from reaching the output, so only
        they need a synthesized line terminator on an interactive terminal.
        """
        return self.all_hex_mode or self.newline_escaped or self.newline_hex

    def override(self, **kwargs: Any) -> "EscapeConfig":
        """Create a new configuration with specific overrides.

        Precedence is re-resolved on the new instance, so overriding
        ``newline_hex=True`` on a configuration with ``newline_escaped`` set
        still yields ``newline_hex == False``.
        """
        unknown = sorted(set(kwargs) - self.field_names())
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field: {unknown[0]}",
                field_name=unknown[0],
                suggestions=sorted(self.field_names()),
            )
        return replace(self, **kwargs)

    @classmethod
    def field_names(cls) -> Set[str]:
        return {config_field.name for config_field in fields(cls)}

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EscapeConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigValidationError: If ``data`` is not a mapping, contains an
                unknown key, or a non-boolean value
        """
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Escape configuration must be an object, got {type(data).__name__}"
            )
        unknown = sorted(set(data) - cls.field_names())
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field: {unknown[0]}",
                field_name=unknown[0],
                suggestions=sorted(cls.field_names()),
            )
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "EscapeConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "EscapeConfig":
        """Escape only control characters, odd whitespace and missing glyphs."""
        return cls()

    @classmethod
    def raw(cls) -> "EscapeConfig":
        """Escape every input byte individually, without decoding."""
        return cls(all_hex_mode=True, bytes_mode=True)

    @classmethod
    def visible_whitespace(cls) -> "EscapeConfig":
        """Make newlines and spaces visible while keeping lines intact."""
        return cls(newline_escaped=True, space_circle=True)
