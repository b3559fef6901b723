"""Query validation entry point.

`QueryValidator` runs the whole DSL pipeline (tokenize, syntax, quotes, operators, values, style
and performance checks, suggestions) and always returns a `ValidationResult`. Findings are data:
nothing raised inside the pipeline escapes `validate`.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from time import monotonic

from src.config.settings import Settings, load_settings
from src.validation.operators import OperatorValidator
from src.validation.registry import OperatorRegistry, default_registry
from src.validation.schema import (
    BooleanToken,
    OperatorToken,
    ParenToken,
    QueryValidationError,
    TermToken,
    Token,
    ValidationCode,
    ValidationResult,
    ValidationWarning,
)
from src.validation.suggestions import SYMBOLIC_BOOLEANS, SuggestionEngine
from src.validation.syntax import SyntaxValidator, check_quote_balance
from src.validation.tokenizer import meaningful_tokens, tokenize
from src.validation.values import ValueValidator

logger = logging.getLogger(__name__)


def nesting_depth(tokens: list[Token]) -> int:
    """Deepest parenthesis level reached; stray closers never push the level below zero."""

    depth = deepest = 0
    for token in tokens:
        if not isinstance(token, ParenToken):
            continue
        if token.is_open:
            depth += 1
            deepest = max(deepest, depth)
        elif depth:
            depth -= 1
    return deepest


def query_complexity(tokens: list[Token]) -> float:
    """Meaningful tokens, plus 1.5 per boolean, plus 2 per nesting level."""

    booleans = sum(1 for t in tokens if isinstance(t, BooleanToken))
    return len(tokens) + 1.5 * booleans + 2 * nesting_depth(tokens)


class QueryValidator:
    """Validates DSL queries against an operator registry and the configured thresholds."""

    def __init__(self, registry: OperatorRegistry | None = None, settings: Settings | None = None) -> None:
        self.registry = registry or default_registry()
        self.settings = settings or Settings()

        self._syntax = SyntaxValidator()
        self._operators = OperatorValidator(self.registry, max_distance=self.settings.suggestion_max_distance)
        self._values = ValueValidator(self.registry)
        self._suggestions = SuggestionEngine(
            self.registry,
            refinement_threshold=self.settings.refinement_result_threshold,
        )

    def validate(self, query: str, previous_result_count: int | None = None) -> ValidationResult:
        """Validate `query`; `previous_result_count` enables refinement suggestions."""

        started = monotonic()
        try:
            result = self._run(query, previous_result_count, started)
        except Exception:
            logger.exception("validation failed")
            result = ValidationResult(
                is_valid=False,
                errors=(
                    QueryValidationError(
                        message="Internal validation error",
                        position=0,
                        length=len(query),
                        code=ValidationCode.internal_error,
                    ),
                ),
                confidence=0.0,
                validation_time=timedelta(seconds=monotonic() - started),
            )

        logger.info(
            "validated is_valid=%s errors=%d warnings=%d suggestions=%d latency_ms=%d",
            result.is_valid,
            len(result.errors),
            len(result.warnings),
            len(result.suggestions),
            int(result.validation_time.total_seconds() * 1000),
        )
        return result

    async def validate_async(self, query: str, previous_result_count: int | None = None) -> ValidationResult:
        """Async entry point with the same semantics as `validate`; it never suspends."""

        return self.validate(query, previous_result_count)

    def _run(self, query: str, previous_result_count: int | None, started: float) -> ValidationResult:
        tokens = tokenize(query)
        meaningful = meaningful_tokens(tokens)

        errors: list[QueryValidationError] = []
        warnings: list[ValidationWarning] = []

        syntax = self._syntax.validate(tokens)
        errors.extend(syntax.errors)
        warnings.extend(syntax.warnings)
        errors.extend(check_quote_balance(query))

        operators = self._operators.validate(tokens)
        errors.extend(operators.errors)
        warnings.extend(self._did_you_mean(operators.errors))
        warnings.extend(operators.warnings)

        values = self._values.validate(tokens)
        errors.extend(values.errors)
        warnings.extend(values.warnings)

        warnings.extend(self._style_warnings(meaningful))
        warnings.extend(self._performance_warnings(query, meaningful))

        suggestions = self._suggestions.generate_suggestions([*errors, *warnings], query)
        if previous_result_count is not None:
            suggestions.extend(self._suggestions.generate_refinement_suggestions(query, previous_result_count))

        is_valid = not errors
        confidence = (1 - self.settings.warning_confidence_penalty) ** len(warnings) if is_valid else 0.0

        return ValidationResult(
            is_valid=is_valid,
            errors=tuple(errors),
            warnings=tuple(warnings),
            suggestions=tuple(suggestions),
            tokens=tuple(tokens),
            confidence=confidence,
            query_complexity=query_complexity(meaningful),
            validation_time=timedelta(seconds=monotonic() - started),
        )

    @staticmethod
    def _did_you_mean(errors: tuple[QueryValidationError, ...]) -> list[ValidationWarning]:
        warnings: list[ValidationWarning] = []
        for error in errors:
            if error.code != ValidationCode.unknown_operator or not error.suggestions:
                continue
            warnings.append(
                ValidationWarning(
                    message=f"Did you mean '{error.suggestions[0]}'?",
                    code=ValidationCode.unknown_operator,
                    position=error.position,
                    length=error.length,
                    suggestions=error.suggestions,
                )
            )
        return warnings

    @staticmethod
    def _style_warnings(tokens: list[Token]) -> list[ValidationWarning]:
        warnings: list[ValidationWarning] = []
        for token in tokens:
            if not isinstance(token, TermToken) or token.text not in SYMBOLIC_BOOLEANS:
                continue
            word = SYMBOLIC_BOOLEANS[token.text]
            warnings.append(
                ValidationWarning(
                    message=f"Use '{word}' instead of '{token.text}'",
                    code=ValidationCode.symbolic_boolean,
                    position=token.position,
                    length=token.length,
                )
            )
        return warnings

    def _performance_warnings(self, query: str, tokens: list[Token]) -> list[ValidationWarning]:
        settings = self.settings
        warnings: list[ValidationWarning] = []

        operator_count = sum(1 for t in tokens if isinstance(t, OperatorToken))
        if operator_count > settings.max_operators:
            warnings.append(
                ValidationWarning(
                    message=(
                        f"Query uses {operator_count} operators (more than {settings.max_operators}) "
                        "and may be slow"
                    ),
                    code=ValidationCode.performance_warning,
                )
            )
        if len(query) > settings.max_query_length:
            warnings.append(
                ValidationWarning(
                    message=(
                        f"Query is {len(query)} characters long (more than {settings.max_query_length}) "
                        "and may be slow"
                    ),
                    code=ValidationCode.performance_warning,
                )
            )
        depth = nesting_depth(tokens)
        if depth > settings.max_nesting_depth:
            warnings.append(
                ValidationWarning(
                    message=f"Parentheses nest {depth} levels deep (more than {settings.max_nesting_depth})",
                    code=ValidationCode.performance_warning,
                )
            )
        return warnings


@lru_cache(maxsize=1)
def _default_validator() -> QueryValidator:
    return QueryValidator(default_registry(), load_settings())


def validate_query(text: str, previous_result_count: int | None = None) -> ValidationResult:
    """Validate with the default registry and environment settings."""

    return _default_validator().validate(text, previous_result_count)
