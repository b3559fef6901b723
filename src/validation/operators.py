"""Operator-level validation.

Checks every operator token against the registry (known name, comparison support, non-empty value)
and then looks across operator tokens for combinations that are legal but probably not what the
user meant.
"""

from __future__ import annotations

from src.validation.fuzzy import DEFAULT_MAX_DISTANCE
from src.validation.registry import OperatorDefinition, OperatorRegistry
from src.validation.schema import (
    OperatorToken,
    QueryValidationError,
    Token,
    ValidationCode,
    ValidationResult,
    ValidationWarning,
)

ORDERING_COMPARISONS = frozenset({"<", "<=", ">", ">="})

COLOR_OPERATORS = frozenset({"color", "coloridentity"})
COLORLESS_VALUES = frozenset({"c", "colorless"})
FORMAT_OPERATORS = frozenset({"format"})
SET_OPERATORS = frozenset({"set"})
COLLECTOR_OPERATORS = frozenset({"number"})
POWER_REFERENCES = frozenset({"pow", "power"})
TOUGHNESS_REFERENCES = frozenset({"tou", "toughness"})


def _warning(token: Token, code: ValidationCode, message: str) -> ValidationWarning:
    return ValidationWarning(message=message, code=code, position=token.position, length=token.length)


def _is_colored(value: str) -> bool:
    return value.lower() not in COLORLESS_VALUES


class OperatorValidator:
    """Registry-aware validation of operator tokens."""

    def __init__(self, registry: OperatorRegistry, *, max_distance: int = DEFAULT_MAX_DISTANCE) -> None:
        self._registry = registry
        self._max_distance = max_distance

    def validate(self, tokens: list[Token] | tuple[Token, ...]) -> ValidationResult:
        errors: list[QueryValidationError] = []
        known: list[tuple[OperatorToken, OperatorDefinition]] = []

        for token in tokens:
            if not isinstance(token, OperatorToken):
                continue
            definition = self._check_token(token, errors)
            if definition is not None and token.value:
                known.append((token, definition))

        warnings = self._cross_token_warnings(known)
        return ValidationResult.from_findings(errors, warnings, tokens)

    def _check_token(
            self,
            token: OperatorToken,
            errors: list[QueryValidationError],
    ) -> OperatorDefinition | None:
        definition = self._registry.get(token.name)
        if definition is None:
            corrections = tuple(self._registry.closest(token.name, max_distance=self._max_distance))
            message = f"Unknown operator '{token.name}'"
            if corrections:
                message += f". Did you mean: {', '.join(corrections)}?"
            errors.append(
                QueryValidationError(
                    message=message,
                    position=token.position,
                    length=token.length,
                    code=ValidationCode.unknown_operator,
                    suggestions=corrections,
                )
            )
            return None

        comparison_reported = False
        if token.comparison in ORDERING_COMPARISONS and not definition.allows_comparison:
            comparison_reported = True
            errors.append(
                QueryValidationError(
                    message=f"Operator '{token.name}' does not support comparison '{token.comparison}'; use ':'",
                    position=token.position,
                    length=token.length,
                    code=ValidationCode.comparison_not_supported,
                )
            )

        if not token.value:
            errors.append(
                QueryValidationError(
                    message=f"Operator '{token.name}{token.separator}' is missing a value",
                    position=token.position,
                    length=token.length,
                    code=ValidationCode.missing_operator_value,
                )
            )
            return definition

        if not comparison_reported:
            check = definition.validate_value(token.value, token.comparison)
            for issue in check.errors:
                if issue.code != ValidationCode.comparison_not_allowed:
                    continue
                errors.append(
                    QueryValidationError(
                        message=issue.message,
                        position=token.position,
                        length=token.length,
                        code=issue.code,
                        suggestions=issue.suggestions,
                    )
                )
        return definition

    def _cross_token_warnings(
            self,
            known: list[tuple[OperatorToken, OperatorDefinition]],
    ) -> list[ValidationWarning]:
        """Pairwise scan over known operator tokens.

        This is O(n^2) in the number of operator tokens. Queries carry a handful of operators and
        the orchestrator warns above `QUERY_MAX_OPERATORS`, so the quadratic pass stays small.
        """

        warnings: list[ValidationWarning] = []
        once: set[ValidationCode] = set()

        for i, (first, first_def) in enumerate(known):
            for second, second_def in known[i + 1:]:
                same_operator = first_def.name == second_def.name

                if (
                        same_operator
                        and first.value.lower() == second.value.lower()
                        and first.comparison == second.comparison
                        and first.negated == second.negated
                ):
                    warnings.append(
                        _warning(
                            second,
                            ValidationCode.duplicate_operator,
                            f"Duplicate condition '{second.text}' has no effect",
                        )
                    )

                if (
                        first_def.name in COLOR_OPERATORS
                        and second_def.name in COLOR_OPERATORS
                        and not first.negated
                        and not second.negated
                        and _is_colored(first.value) != _is_colored(second.value)
                ):
                    warnings.append(
                        _warning(
                            second,
                            ValidationCode.conflicting_colors,
                            f"'{first.text}' and '{second.text}' conflict: colorless cards have no colors",
                        )
                    )

                if (
                        ValidationCode.multiple_formats not in once
                        and first_def.name in FORMAT_OPERATORS
                        and second_def.name in FORMAT_OPERATORS
                        and not first.negated
                        and not second.negated
                        and first.value.lower() != second.value.lower()
                ):
                    once.add(ValidationCode.multiple_formats)
                    warnings.append(
                        _warning(
                            second,
                            ValidationCode.multiple_formats,
                            "Multiple formats are required at once; only cards legal in all of them match",
                        )
                    )

                pair = {first_def.name, second_def.name}
                if (
                        ValidationCode.overly_specific not in once
                        and pair & SET_OPERATORS
                        and pair & COLLECTOR_OPERATORS
                ):
                    once.add(ValidationCode.overly_specific)
                    warnings.append(
                        _warning(
                            second,
                            ValidationCode.overly_specific,
                            "Set plus collector number pins a single printing; the rest of the query is redundant",
                        )
                    )

        warnings.extend(self._stat_warnings(known))
        return warnings

    def _stat_warnings(
            self,
            known: list[tuple[OperatorToken, OperatorDefinition]],
    ) -> list[ValidationWarning]:
        power = [t for t, d in known if d.name == "power" and not t.negated]
        toughness = [t for t, d in known if d.name == "toughness" and not t.negated]

        # `pow>tou` already relates the two stats.
        if any(t.value.lower() in TOUGHNESS_REFERENCES for t in power):
            return []
        if any(t.value.lower() in POWER_REFERENCES for t in toughness):
            return []

        if power and not toughness:
            return [
                _warning(
                    power[0],
                    ValidationCode.power_without_toughness,
                    "Power is constrained without toughness; consider adding a toughness condition",
                )
            ]
        if toughness and not power:
            return [
                _warning(
                    toughness[0],
                    ValidationCode.toughness_without_power,
                    "Toughness is constrained without power; consider adding a power condition",
                )
            ]
        return []
