"""Tests for structural DSL checks."""

from __future__ import annotations

from src.validation.schema import ValidationCode, ValidationResult
from src.validation.syntax import SyntaxValidator, check_quote_balance
from src.validation.tokenizer import tokenize


def _check(text: str) -> ValidationResult:
    return SyntaxValidator().validate(tokenize(text))


def test_valid_query() -> None:
    result = _check("(c:red OR c:blue) AND t:creature")
    assert result.is_valid
    assert result.errors == ()
    assert result.confidence == 1.0


def test_empty_query() -> None:
    result = _check("   ")
    assert not result.is_valid
    assert result.error_codes == [ValidationCode.empty_query]
    assert result.confidence == 0.0


def test_one_error_per_unmatched_opening_paren() -> None:
    result = _check("((c:red AND t:creature")
    assert result.error_codes == [
        ValidationCode.unmatched_opening_paren,
        ValidationCode.unmatched_opening_paren,
    ]
    assert [e.position for e in result.errors] == [0, 1]


def test_unmatched_closing_paren_position() -> None:
    result = _check("c:red)")
    (error,) = result.errors
    assert error.code == ValidationCode.unmatched_closing_paren
    assert error.position == 5
    assert error.length == 1


def test_empty_parentheses_ignore_whitespace() -> None:
    result = _check("c:red ( )")
    assert ValidationCode.empty_parentheses in result.error_codes
    error = next(e for e in result.errors if e.code == ValidationCode.empty_parentheses)
    assert (error.position, error.length) == (6, 3)


def test_boolean_at_start() -> None:
    assert ValidationCode.boolean_at_start in _check("AND c:red").error_codes


def test_not_may_start_a_query() -> None:
    assert _check("NOT t:land").is_valid


def test_boolean_at_end() -> None:
    codes = _check("c:red OR").error_codes
    assert ValidationCode.boolean_at_end in codes
    assert ValidationCode.orphaned_boolean in codes


def test_consecutive_booleans() -> None:
    result = _check("c:red AND OR t:creature")
    error = next(e for e in result.errors if e.code == ValidationCode.consecutive_boolean)
    assert error.position == 6
    assert error.length == len("AND OR")


def test_and_not_is_allowed() -> None:
    assert _check("c:red AND NOT t:creature").is_valid
    assert _check("c:red OR NOT t:creature").is_valid


def test_boolean_before_close_paren_is_orphaned() -> None:
    codes = _check("(c:red OR) t:creature").error_codes
    assert codes == [ValidationCode.orphaned_boolean]


def test_boolean_after_open_paren() -> None:
    codes = _check("(OR c:red)").error_codes
    assert codes == [ValidationCode.boolean_after_open_paren]


def test_trailing_open_paren() -> None:
    codes = _check("c:red (").error_codes
    assert ValidationCode.trailing_open_paren in codes
    assert ValidationCode.unmatched_opening_paren in codes


def test_quote_balance() -> None:
    assert check_quote_balance('o:"draw a card"') == []
    assert check_quote_balance(r'o:"say \"hi\""') == []
    assert check_quote_balance("name:urza's t:land") == []
    assert check_quote_balance('o:"can\'t be countered"') == []

    (error,) = check_quote_balance('c:red o:"draw')
    assert error.code == ValidationCode.unclosed_quote
    assert error.position == 8
    assert error.length == len('"draw')
