"""Operator value validation.

Runs each known operator's value grammar and anchors the findings to the token that carried the
value. Comparison misuse is reported by the operator validator, not here.
"""

from __future__ import annotations

from src.validation.registry import OperatorRegistry
from src.validation.schema import (
    OperatorToken,
    QueryValidationError,
    Token,
    ValidationCode,
    ValidationResult,
    ValidationWarning,
)


class ValueValidator:
    def __init__(self, registry: OperatorRegistry) -> None:
        self._registry = registry

    def validate(self, tokens: list[Token] | tuple[Token, ...]) -> ValidationResult:
        errors: list[QueryValidationError] = []
        warnings: list[ValidationWarning] = []

        for token in tokens:
            if not isinstance(token, OperatorToken) or not token.value:
                continue
            definition = self._registry.get(token.name)
            if definition is None:
                continue

            check = definition.validate_value(token.value, token.comparison)
            for issue in check.errors:
                if issue.code == ValidationCode.comparison_not_allowed:
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
            for issue in check.warnings:
                warnings.append(
                    ValidationWarning(
                        message=issue.message,
                        code=issue.code,
                        position=token.position,
                        length=token.length,
                        suggestions=issue.suggestions,
                    )
                )

        return ValidationResult.from_findings(errors, warnings, tokens)
