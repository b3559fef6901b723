"""Structural checks for a DSL token stream.

These checks never consult the operator registry: they only look at parentheses, boolean
placement and emptiness. Every finding is collected; nothing short-circuits.
"""

from __future__ import annotations

from src.validation.schema import (
    BooleanOperator,
    BooleanToken,
    ParenToken,
    QueryValidationError,
    Token,
    ValidationCode,
    ValidationResult,
    ValidationWarning,
)
from src.validation.tokenizer import QUOTE_CHARS, meaningful_tokens

_NEGATION_IDIOMS = {BooleanOperator.AND, BooleanOperator.OR}


def _error(token: Token, code: ValidationCode, message: str, *, length: int | None = None) -> QueryValidationError:
    return QueryValidationError(
        message=message,
        position=token.position,
        length=token.length if length is None else length,
        code=code,
    )


def _is_open(token: Token) -> bool:
    return isinstance(token, ParenToken) and token.is_open


def _is_close(token: Token) -> bool:
    return isinstance(token, ParenToken) and not token.is_open


def _check_parentheses(tokens: list[Token]) -> list[QueryValidationError]:
    errors: list[QueryValidationError] = []
    stack: list[Token] = []

    for idx, token in enumerate(tokens):
        if _is_open(token):
            stack.append(token)
            if idx + 1 < len(tokens) and _is_close(tokens[idx + 1]):
                errors.append(
                    _error(
                        token,
                        ValidationCode.empty_parentheses,
                        "Empty parentheses '()' are not allowed",
                        length=tokens[idx + 1].end - token.position,
                    )
                )
        elif _is_close(token):
            if stack:
                stack.pop()
            else:
                errors.append(
                    _error(
                        token,
                        ValidationCode.unmatched_closing_paren,
                        "Unmatched closing parenthesis ')'",
                    )
                )

    for token in stack:
        errors.append(
            _error(
                token,
                ValidationCode.unmatched_opening_paren,
                "Unmatched opening parenthesis '(' (missing ')')",
            )
        )
    return errors


def _check_booleans(tokens: list[Token]) -> list[QueryValidationError]:
    errors: list[QueryValidationError] = []
    if not tokens:
        return errors

    first, last = tokens[0], tokens[-1]
    if isinstance(first, BooleanToken) and first.operator != BooleanOperator.NOT:
        errors.append(
            _error(
                first,
                ValidationCode.boolean_at_start,
                f"Query cannot start with boolean operator '{first.operator}'",
            )
        )
    if isinstance(last, BooleanToken):
        errors.append(
            _error(
                last,
                ValidationCode.boolean_at_end,
                f"Query cannot end with boolean operator '{last.operator}'",
            )
        )

    for idx, token in enumerate(tokens):
        if not isinstance(token, BooleanToken):
            continue

        nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
        prev = tokens[idx - 1] if idx > 0 else None

        if isinstance(nxt, BooleanToken) and not (
                token.operator in _NEGATION_IDIOMS and nxt.operator == BooleanOperator.NOT
        ):
            errors.append(
                _error(
                    token,
                    ValidationCode.consecutive_boolean,
                    f"Consecutive boolean operators '{token.operator} {nxt.operator}'",
                    length=nxt.end - token.position,
                )
            )

        if nxt is None or _is_close(nxt):
            errors.append(
                _error(
                    token,
                    ValidationCode.orphaned_boolean,
                    f"Boolean operator '{token.operator}' has nothing to apply to",
                )
            )

        if prev is not None and _is_open(prev) and token.operator != BooleanOperator.NOT:
            errors.append(
                _error(
                    token,
                    ValidationCode.boolean_after_open_paren,
                    f"Boolean operator '{token.operator}' cannot follow '('",
                )
            )

    return errors


def check_quote_balance(text: str) -> list[QueryValidationError]:
    """Report a quote opened in raw text and never closed.

    Backslash escapes are honored inside quotes. At most one error is reported, at the opening
    quote of the unterminated phrase.
    """

    open_quote: str | None = None
    open_pos = 0
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if open_quote is not None and ch == "\\":
            idx += 2
            continue
        if open_quote is None and ch in QUOTE_CHARS:
            open_quote, open_pos = ch, idx
        elif open_quote is not None and ch == open_quote:
            open_quote = None
        idx += 1

    if open_quote is None:
        return []
    return [
        QueryValidationError(
            message=f"Unclosed quote {open_quote} (missing closing {open_quote})",
            position=open_pos,
            length=len(text) - open_pos,
            code=ValidationCode.unclosed_quote,
        )
    ]


class SyntaxValidator:
    """Structural validation of a token stream."""

    def validate(self, tokens: list[Token] | tuple[Token, ...]) -> ValidationResult:
        """Check parentheses, boolean placement and emptiness.

        Whitespace is ignored, so "( )" counts as empty parentheses.
        """

        meaningful = meaningful_tokens(tokens)
        errors: list[QueryValidationError] = []
        warnings: list[ValidationWarning] = []

        if not meaningful:
            eof_position = tokens[-1].position if tokens else 0
            errors.append(
                QueryValidationError(
                    message="Query is empty",
                    position=0,
                    length=eof_position,
                    code=ValidationCode.empty_query,
                )
            )
            return ValidationResult.from_findings(errors, warnings, tokens)

        errors.extend(_check_parentheses(meaningful))
        errors.extend(_check_booleans(meaningful))

        last = meaningful[-1]
        if _is_open(last):
            errors.append(
                _error(
                    last,
                    ValidationCode.trailing_open_paren,
                    "Query cannot end with an opening parenthesis",
                )
            )

        return ValidationResult.from_findings(errors, warnings, tokens)
