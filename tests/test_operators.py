"""Tests for registry-aware operator checks."""

from __future__ import annotations

from src.validation.operators import OperatorValidator
from src.validation.registry import default_registry
from src.validation.schema import ValidationCode, ValidationResult
from src.validation.tokenizer import tokenize


def _check(text: str) -> ValidationResult:
    return OperatorValidator(default_registry()).validate(tokenize(text))


def test_known_operators_pass() -> None:
    result = _check("c:red t:creature mv<=3 f:modern")
    assert result.is_valid
    assert result.warnings == ()


def test_unknown_operator_with_correction() -> None:
    (error,) = _check("colour:red").errors
    assert error.code == ValidationCode.unknown_operator
    assert error.suggestions == ("color",)
    assert "Did you mean: color?" in error.message
    assert (error.position, error.length) == (0, len("colour:red"))


def test_unknown_operator_without_correction() -> None:
    (error,) = _check("zzzzzzzz:red").errors
    assert error.code == ValidationCode.unknown_operator
    assert error.suggestions == ()


def test_max_distance_limits_corrections() -> None:
    validator = OperatorValidator(default_registry(), max_distance=0)
    (error,) = validator.validate(tokenize("colour:red")).errors
    assert error.suggestions == ()


def test_comparison_not_supported() -> None:
    result = _check("o>draw")
    assert result.error_codes == [ValidationCode.comparison_not_supported]


def test_ordering_comparison_on_format_is_reported_once() -> None:
    assert _check("f>=modern").error_codes == [ValidationCode.comparison_not_supported]


def test_inequality_on_format_is_not_allowed() -> None:
    assert _check("f!=modern").error_codes == [ValidationCode.comparison_not_allowed]


def test_missing_value() -> None:
    (error,) = _check("t:").errors
    assert error.code == ValidationCode.missing_operator_value
    assert "'t:'" in error.message


def test_duplicate_operator() -> None:
    result = _check("t:elf t:ELF")
    assert result.is_valid
    (warning,) = result.warnings
    assert warning.code == ValidationCode.duplicate_operator
    assert warning.position == len("t:elf ")


def test_same_operator_with_different_values_is_not_duplicate() -> None:
    assert _check("t:elf t:warrior").warnings == ()


def test_conflicting_colors() -> None:
    assert _check("c:c c:r").warning_codes == [ValidationCode.conflicting_colors]
    assert _check("c:colorless id:g").warning_codes == [ValidationCode.conflicting_colors]
    assert _check("c:c -c:r").warnings == ()


def test_multiple_formats_warned_once() -> None:
    codes = _check("f:modern f:legacy f:pauper").warning_codes
    assert codes == [ValidationCode.multiple_formats]


def test_negated_formats_are_fine() -> None:
    assert _check("f:modern -f:legacy").warnings == ()


def test_set_with_collector_number() -> None:
    assert _check("s:neo cn:12").warning_codes == [ValidationCode.overly_specific]


def test_power_without_toughness() -> None:
    assert _check("pow>=3").warning_codes == [ValidationCode.power_without_toughness]
    assert _check("tou>=3").warning_codes == [ValidationCode.toughness_without_power]
    assert _check("pow>=3 tou>=3").warnings == ()


def test_stat_reference_relates_power_and_toughness() -> None:
    assert _check("pow>tou").warnings == ()
