"""Tests for operator value grammars."""

from __future__ import annotations

import pytest

from src.validation.registry import default_registry
from src.validation.schema import ValidationCode, ValidationResult
from src.validation.tokenizer import tokenize
from src.validation.values import ValueValidator


def _check(text: str) -> ValidationResult:
    return ValueValidator(default_registry()).validate(tokenize(text))


@pytest.mark.parametrize(
    "text",
    [
        "c:red",
        "c:wubrg",
        "c>=azorius",
        "id:c",
        "m:2WW",
        "m:{2}{W}{W}",
        "mv<=3",
        "pow>tou",
        "pow:*",
        "loy:4",
        "s:neo",
        "cn:123a",
        "r:mythic",
        "r:u",
        "f:commander",
        "is:foil",
        "game:arena",
        "year>=2020",
        "usd<0.5",
        'o:"draw a card"',
    ],
)
def test_valid_values(text: str) -> None:
    result = _check(text)
    assert result.is_valid, result.errors
    assert result.warnings == ()


@pytest.mark.parametrize(
    ("text", "code"),
    [
        ("c:purple", ValidationCode.invalid_color),
        ("m:2QQ", ValidationCode.invalid_mana_cost),
        ("mv:abc", ValidationCode.invalid_number),
        ("pow:big", ValidationCode.invalid_power_toughness),
        ("loy:-1", ValidationCode.invalid_loyalty),
        ("s:toolong", ValidationCode.invalid_set_code),
        ("s:a", ValidationCode.invalid_set_code),
        ("r:legendary", ValidationCode.invalid_rarity),
        ("f:casual", ValidationCode.invalid_format),
        ("is:shiny", ValidationCode.invalid_enum_value),
        ("year:20x1", ValidationCode.invalid_year),
    ],
)
def test_invalid_values(text: str, code: ValidationCode) -> None:
    (error,) = _check(text).errors
    assert error.code == code
    assert error.position == 0
    assert error.length == len(text)


def test_format_typo_suggests_the_format() -> None:
    (error,) = _check("f:modrn").errors
    assert error.code == ValidationCode.invalid_format
    assert error.suggestions[0] == "modern"


def test_rarity_typo_suggests_the_rarity() -> None:
    (error,) = _check("r:mythc").errors
    assert error.suggestions[0] == "mythic"


def test_duplicate_color_letter_is_a_warning() -> None:
    result = _check("c:rr")
    assert result.is_valid
    assert result.warning_codes == [ValidationCode.duplicate_color]


def test_unusual_numbers_are_warnings() -> None:
    assert _check("mv>=30").warning_codes == [ValidationCode.unusual_range]
    assert _check("year:1800").warning_codes == [ValidationCode.unusual_range]


def test_long_text_value_is_a_warning() -> None:
    result = _check("o:" + "x" * 501)
    assert result.warning_codes == [ValidationCode.long_value]


def test_comparison_misuse_is_left_to_operator_checks() -> None:
    assert _check("f!=modern").errors == ()


def test_unknown_operators_and_missing_values_are_skipped() -> None:
    assert _check("colour:red t:").errors == ()
