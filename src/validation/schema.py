"""Value objects shared by the DSL validation pipeline.

Tokens, findings and results are frozen dataclasses: they are created per call and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum


class TokenKind(StrEnum):
    """Token variants produced by the tokenizer."""

    operator = "OPERATOR"
    boolean = "BOOLEAN"
    parenthesis = "PARENTHESIS"
    quoted_string = "QUOTED_STRING"
    term = "TERM"
    whitespace = "WHITESPACE"
    eof = "EOF"


class BooleanOperator(StrEnum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class Severity(StrEnum):
    error = "error"
    warning = "warning"


class ValidationCode(StrEnum):
    """Codes attached to validation errors and warnings."""

    # Structural.
    unmatched_opening_paren = "UNMATCHED_OPENING_PAREN"
    unmatched_closing_paren = "UNMATCHED_CLOSING_PAREN"
    unclosed_quote = "UNCLOSED_QUOTE"
    boolean_at_start = "BOOLEAN_AT_START"
    boolean_at_end = "BOOLEAN_AT_END"
    consecutive_boolean = "CONSECUTIVE_BOOLEAN"
    orphaned_boolean = "ORPHANED_BOOLEAN"
    boolean_after_open_paren = "BOOLEAN_AFTER_OPEN_PAREN"
    empty_parentheses = "EMPTY_PARENTHESES"
    empty_query = "EMPTY_QUERY"
    trailing_open_paren = "TRAILING_OPEN_PAREN"

    # Semantic.
    unknown_operator = "UNKNOWN_OPERATOR"
    comparison_not_supported = "COMPARISON_NOT_SUPPORTED"
    comparison_not_allowed = "COMPARISON_NOT_ALLOWED"
    missing_operator_value = "MISSING_OPERATOR_VALUE"
    invalid_color = "INVALID_COLOR"
    invalid_number = "INVALID_NUMBER"
    invalid_set_code = "INVALID_SET_CODE"
    invalid_rarity = "INVALID_RARITY"
    invalid_format = "INVALID_FORMAT"
    invalid_enum_value = "INVALID_ENUM_VALUE"
    invalid_power_toughness = "INVALID_POWER_TOUGHNESS"
    invalid_loyalty = "INVALID_LOYALTY"
    invalid_mana_cost = "INVALID_MANA_COST"
    invalid_year = "INVALID_YEAR"
    internal_error = "INTERNAL_ERROR"

    # Advisory.
    conflicting_colors = "CONFLICTING_COLORS"
    duplicate_operator = "DUPLICATE_OPERATOR"
    duplicate_color = "DUPLICATE_COLOR"
    multiple_formats = "MULTIPLE_FORMATS"
    power_without_toughness = "POWER_WITHOUT_TOUGHNESS"
    toughness_without_power = "TOUGHNESS_WITHOUT_POWER"
    overly_specific = "OVERLY_SPECIFIC"
    long_value = "LONG_VALUE"
    unusual_range = "UNUSUAL_RANGE"
    symbolic_boolean = "SYMBOLIC_BOOLEAN"
    performance_warning = "PERFORMANCE_WARNING"


@dataclass(frozen=True, kw_only=True)
class Token:
    """A slice of the source text. `text` is always `source[position:position + length]`."""

    kind: TokenKind
    text: str
    position: int
    length: int

    @property
    def end(self) -> int:
        return self.position + self.length

    @property
    def is_meaningful(self) -> bool:
        return self.kind not in {TokenKind.whitespace, TokenKind.eof}


@dataclass(frozen=True, kw_only=True)
class OperatorToken(Token):
    """`name:value` or `name<cmp>value`, optionally negated with a leading `-`.

    `comparison` is `None` for the plain `:` separator.
    """

    kind: TokenKind = field(default=TokenKind.operator, init=False)
    name: str
    comparison: str | None = None
    value: str = ""
    negated: bool = False
    quoted: bool = False

    @property
    def separator(self) -> str:
        return self.comparison or ":"


@dataclass(frozen=True, kw_only=True)
class BooleanToken(Token):
    kind: TokenKind = field(default=TokenKind.boolean, init=False)
    operator: BooleanOperator


@dataclass(frozen=True, kw_only=True)
class ParenToken(Token):
    kind: TokenKind = field(default=TokenKind.parenthesis, init=False)
    is_open: bool


@dataclass(frozen=True, kw_only=True)
class QuotedToken(Token):
    """A quoted phrase; `closed` is False when the quote runs to end of input."""

    kind: TokenKind = field(default=TokenKind.quoted_string, init=False)
    value: str
    quote: str = '"'
    closed: bool = True


@dataclass(frozen=True, kw_only=True)
class TermToken(Token):
    kind: TokenKind = field(default=TokenKind.term, init=False)


@dataclass(frozen=True, kw_only=True)
class WhitespaceToken(Token):
    kind: TokenKind = field(default=TokenKind.whitespace, init=False)


@dataclass(frozen=True, kw_only=True)
class EOFToken(Token):
    kind: TokenKind = field(default=TokenKind.eof, init=False)
    text: str = ""
    length: int = 0


@dataclass(frozen=True)
class QueryValidationError:
    """A hard validation error anchored to a span of the query."""

    message: str
    position: int
    length: int
    code: ValidationCode
    severity: Severity = Severity.error
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationWarning:
    """An advisory finding. `str(warning)` is its message."""

    message: str
    code: ValidationCode
    position: int | None = None
    length: int = 0
    suggestions: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.message


Finding = QueryValidationError | ValidationWarning


class SuggestionType(StrEnum):
    addition = "addition"
    removal = "removal"
    replacement = "replacement"
    query_refinement = "query_refinement"


class SuggestionConfidence(StrEnum):
    high = "high"
    medium = "medium"
    low = "low"


class SuggestionImpact(StrEnum):
    fixes_error = "fixes_error"
    improves_style = "improves_style"
    broadens_results = "broadens_results"
    narrows_results = "narrows_results"


@dataclass(frozen=True)
class Suggestion:
    """A corrected or refined version of the whole query."""

    type: SuggestionType
    description: str
    suggested_query: str
    confidence: SuggestionConfidence
    impact: SuggestionImpact


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one query.

    Stage validators (syntax, operators) fill only `errors` and `warnings`; the orchestrator fills
    the rest.
    """

    is_valid: bool
    errors: tuple[QueryValidationError, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()
    suggestions: tuple[Suggestion, ...] = ()
    tokens: tuple[Token, ...] = ()
    confidence: float = 1.0
    query_complexity: float = 0.0
    validation_time: timedelta = timedelta(0)

    @classmethod
    def from_findings(
            cls,
            errors: list[QueryValidationError],
            warnings: list[ValidationWarning],
            tokens: list[Token] | tuple[Token, ...] = (),
    ) -> ValidationResult:
        return cls(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
            tokens=tuple(tokens),
            confidence=0.0 if errors else 1.0,
        )

    @property
    def error_codes(self) -> list[ValidationCode]:
        return [e.code for e in self.errors]

    @property
    def warning_codes(self) -> list[ValidationCode]:
        return [w.code for w in self.warnings]
