"""Per-character escape decisions.

Each decoded unit is matched against an ordered rule table; the first rule
whose predicate holds decides how the unit is written. The order is part of
the behavior (for example ``newline_escaped`` must win over ``newline_hex``),
so rules are evaluated strictly top to bottom:

1. invalid encoding: escape every source byte
2. all-hex mode: escape the character
3. newline with ``newline_escaped``: write the ``\\n`` token
4. newline without any newline option: write it unchanged
5. carriage return without ``carriage_return_hex``: write the ``\\r`` token
6. tab without ``tab_hex``: write the ``\\t`` token
7. space with ``space_circle``: write the circle glyph
8. control characters, white space other than space, space with
   ``space_hex``, and non-ASCII characters no loaded font can draw: escape
9. everything else: write it unchanged
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from hexv.character.decoding import ASCII_MAX, ByteStreamDecoder, DecodedUnit
from hexv.character.escaping import (
    CARRIAGE_RETURN_TOKEN,
    NEWLINE_TOKEN,
    SPACE_CIRCLE,
    TAB_TOKEN,
    format_bytes_escape,
    format_char_escape,
)
from hexv.fonts.oracle import FontSet
from hexv.shared.config import EscapeConfig
from hexv.shared.logging import get_logger
from hexv.shared.result import ProcessingStatistics

ASCII_DELETE = 0x7F
ASCII_CONTROL_END = 0x1F

# Unicode White_Space property
WHITE_SPACE = frozenset(
    chr(code_point) for code_point in (
        0x0009, 0x000A, 0x000B, 0x000C, 0x000D, 0x0020, 0x0085, 0x00A0,
        0x1680, *range(0x2000, 0x200B), 0x2028, 0x2029, 0x202F, 0x205F,
        0x3000,
    )
)

DECISION_CACHE_LIMIT = 4096


class EscapeAction(Enum):
    """How a decoded unit is written to the output."""
    ESCAPE_BYTES = "escape_bytes"
    ESCAPE_CHAR = "escape_char"
    LITERAL_TOKEN = "literal_token"
    SUBSTITUTE = "substitute"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class ClassificationRule:
    """A named predicate and the action taken when it holds.

    Attributes:
        name: Stable rule name, used in statistics and logs
        action: Action applied when the predicate holds
        applies: Predicate over a single character
        token: Fixed replacement text for token and substitution actions
    """
    name: str
    action: EscapeAction
    applies: Callable[[str], bool]
    token: str = ""


@dataclass(frozen=True)
class Decision:
    """Outcome of classifying one decoded unit."""
    rule: str
    action: EscapeAction
    text: str


def is_ascii_control(char: str) -> bool:
    code_point = ord(char)
    return code_point <= ASCII_CONTROL_END or code_point == ASCII_DELETE


def is_non_space_whitespace(char: str) -> bool:
    return char != " " and char in WHITE_SPACE


class CharacterClassifier:
    """Decide, unit by unit, whether to pass through, substitute or escape.

    The configuration and font set are read-only, so a character's decision
    never changes during a run and is cached.
    """

    INVALID_ENCODING_RULE = "invalid_encoding"

    def __init__(
        self,
        config: Optional[EscapeConfig] = None,
        fonts: Optional[FontSet] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the classifier.

        Args:
            config: Escape configuration (defaults to ``EscapeConfig()``)
            fonts: Fonts consulted for non-ASCII characters; an empty set
                reports every non-ASCII character as missing
            correlation_id: Optional correlation ID for run tracking
        """
        self.config = config or EscapeConfig()
        self.fonts = fonts if fonts is not None else FontSet()
        self.rules: List[ClassificationRule] = self._build_rules()
        self._decoder = ByteStreamDecoder(correlation_id)
        self._decision_cache: Dict[str, Decision] = {}
        self.logger = get_logger(__name__, correlation_id, "classifier")

    def _build_rules(self) -> List[ClassificationRule]:
        config = self.config
        return [
            ClassificationRule(
                "all_hex", EscapeAction.ESCAPE_CHAR,
                lambda c: config.all_hex_mode,
            ),
            ClassificationRule(
                "newline_escaped", EscapeAction.LITERAL_TOKEN,
                lambda c: c == "\n" and config.newline_escaped,
                NEWLINE_TOKEN,
            ),
            ClassificationRule(
                "newline_literal", EscapeAction.PASSTHROUGH,
                lambda c: (
                    c == "\n" and not config.newline_escaped and not config.newline_hex
                ),
            ),
            ClassificationRule(
                "carriage_return_literal", EscapeAction.LITERAL_TOKEN,
                lambda c: c == "\r" and not config.carriage_return_hex,
                CARRIAGE_RETURN_TOKEN,
            ),
            ClassificationRule(
                "tab_literal", EscapeAction.LITERAL_TOKEN,
                lambda c: c == "\t" and not config.tab_hex,
                TAB_TOKEN,
            ),
            ClassificationRule(
                "space_circle", EscapeAction.SUBSTITUTE,
                lambda c: c == " " and config.space_circle,
                SPACE_CIRCLE,
            ),
            ClassificationRule(
                "general_escape", EscapeAction.ESCAPE_CHAR,
                self._needs_escape,
            ),
            ClassificationRule(
                "passthrough", EscapeAction.PASSTHROUGH,
                lambda c: True,
            ),
        ]

    def _needs_escape(self, char: str) -> bool:
        if is_ascii_control(char) or is_non_space_whitespace(char):
            return True
        if char == " ":
            return self.config.space_hex
        return ord(char) > ASCII_MAX and not self.fonts.glyph_present(char)

    def classify(self, unit: DecodedUnit) -> Decision:
        """Return the decision of the first matching rule for ``unit``."""
        if not unit.round_trips:
            return Decision(
                self.INVALID_ENCODING_RULE,
                EscapeAction.ESCAPE_BYTES,
                format_bytes_escape(unit.raw, self.config),
            )
        return self.classify_char(unit.char)

    def classify_char(self, char: str) -> Decision:
        """Return the decision for a well-formed character."""
        cached = self._decision_cache.get(char)
        if cached is not None:
            return cached

        decision = None
        for rule in self.rules:
            if rule.applies(char):
                decision = Decision(rule.name, rule.action, self._render(rule, char))
                break

        if len(self._decision_cache) < DECISION_CACHE_LIMIT:
            self._decision_cache[char] = decision
            if len(self._decision_cache) == DECISION_CACHE_LIMIT:
                self.logger.debug(
                    "Decision cache full", extra={"cache_limit": DECISION_CACHE_LIMIT}
                )
        return decision

    def _render(self, rule: ClassificationRule, char: str) -> str:
        if rule.action is EscapeAction.ESCAPE_CHAR:
            return format_char_escape(char, self.config)
        if rule.action in (EscapeAction.LITERAL_TOKEN, EscapeAction.SUBSTITUTE):
            return rule.token
        return char

    def escape_chunk(
        self,
        data: bytes,
        statistics: Optional[ProcessingStatistics] = None
    ) -> str:
        """Decode ``data`` and return its escaped text.

        Args:
            data: A complete chunk of input bytes
            statistics: Optional statistics updated with per-rule counts
        """
        pieces = []
        for unit in self._decoder.decode(data):
            decision = self.classify(unit)
            pieces.append(decision.text)
            if statistics is not None:
                statistics.units_processed += 1
                statistics.record_decision(decision.rule)
                if decision.rule == self.INVALID_ENCODING_RULE:
                    statistics.invalid_sequences += 1
        return "".join(pieces)
