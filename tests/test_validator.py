"""End-to-end tests for the validation orchestrator."""

from __future__ import annotations

from datetime import timedelta

import pytest

from src.config.settings import Settings
from src.validation.schema import ValidationCode
from src.validation.tokenizer import meaningful_tokens, tokenize
from src.validation.validator import QueryValidator, nesting_depth, query_complexity, validate_query


def _settings(**env: object) -> Settings:
    return Settings(_env_file=None, **env)


def test_valid_query() -> None:
    result = QueryValidator().validate("c:red t:creature")
    assert result.is_valid
    assert result.errors == ()
    assert result.warnings == ()
    assert result.suggestions == ()
    assert result.confidence == 1.0
    assert result.query_complexity == 2
    assert result.validation_time >= timedelta(0)
    assert result.tokens[-1].position == len("c:red t:creature")


def test_unclosed_paren_reports_one_error_and_a_fix() -> None:
    result = QueryValidator().validate("(c:red AND t:creature")
    assert not result.is_valid
    assert result.error_codes == [ValidationCode.unmatched_opening_paren]
    assert result.errors[0].position == 0
    assert result.suggestions[0].suggested_query == "(c:red AND t:creature)"
    assert result.confidence == 0.0


def test_unknown_operator_reports_error_and_hint() -> None:
    result = QueryValidator().validate("colour:red")
    assert result.error_codes == [ValidationCode.unknown_operator]
    assert result.warning_codes == [ValidationCode.unknown_operator]
    assert str(result.warnings[0]) == "Did you mean 'color'?"
    assert result.suggestions[0].suggested_query == "color:red"


def test_symbolic_boolean_is_a_warning() -> None:
    result = QueryValidator().validate("c:red && t:creature")
    assert result.is_valid
    assert result.warning_codes == [ValidationCode.symbolic_boolean]
    assert result.confidence == pytest.approx(0.9)


def test_symbolic_boolean_without_spaces_is_a_warning() -> None:
    result = QueryValidator().validate("c:red&&t:creature")
    assert result.is_valid
    assert result.warning_codes == [ValidationCode.symbolic_boolean]
    assert [s.suggested_query for s in result.suggestions] == ["c:red AND t:creature"]


@pytest.mark.parametrize("query", ["name:urza's t:land", 'o:"can\'t be countered"'])
def test_apostrophes_are_not_quotes(query: str) -> None:
    result = QueryValidator().validate(query)
    assert result.is_valid, result.errors
    assert result.warnings == ()


def test_confidence_drops_per_warning() -> None:
    result = QueryValidator().validate("pow>=3 f:modern f:legacy")
    assert result.is_valid
    assert len(result.warnings) == 2
    assert result.confidence == pytest.approx(0.81)


def test_confidence_penalty_is_configurable() -> None:
    validator = QueryValidator(settings=_settings(WARNING_CONFIDENCE_PENALTY=0.5))
    assert validator.validate("pow>=3").confidence == pytest.approx(0.5)


def test_empty_query() -> None:
    result = QueryValidator().validate("")
    assert result.error_codes == [ValidationCode.empty_query]
    assert result.query_complexity == 0


def test_every_stage_reports() -> None:
    result = QueryValidator().validate("(colour:red AND f:casual")
    assert set(result.error_codes) == {
        ValidationCode.unmatched_opening_paren,
        ValidationCode.unknown_operator,
        ValidationCode.invalid_format,
    }


def test_complexity_counts_booleans_and_depth() -> None:
    tokens = meaningful_tokens(tokenize("(c:r OR (c:u AND t:elf))"))
    assert nesting_depth(tokens) == 2
    # 9 tokens, 2 booleans, depth 2.
    assert query_complexity(tokens) == pytest.approx(9 + 3 + 4)


def test_nesting_depth_ignores_stray_closers() -> None:
    assert nesting_depth(meaningful_tokens(tokenize(") (c:r)"))) == 1


def test_performance_warnings() -> None:
    settings = _settings(QUERY_MAX_OPERATORS=2, QUERY_MAX_LENGTH=20, QUERY_MAX_NESTING_DEPTH=1)
    result = QueryValidator(settings=settings).validate("((c:r t:elf mv<=3))")
    assert result.is_valid
    assert result.warning_codes.count(ValidationCode.performance_warning) == 2

    result = QueryValidator(settings=settings).validate("c:r t:elf o:flying o:haste")
    assert result.warning_codes.count(ValidationCode.performance_warning) == 2


def test_previous_result_count_adds_refinements() -> None:
    result = QueryValidator().validate("c:r", previous_result_count=1000)
    assert [s.suggested_query for s in result.suggestions] == ["c:r f:standard"]


def test_internal_failure_becomes_a_result(monkeypatch: pytest.MonkeyPatch) -> None:
    validator = QueryValidator()

    def boom(*_args: object) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr(validator, "_run", boom)
    result = validator.validate("c:red")
    assert not result.is_valid
    assert result.error_codes == [ValidationCode.internal_error]
    assert result.confidence == 0.0


@pytest.mark.asyncio
async def test_async_matches_sync() -> None:
    validator = QueryValidator()
    sync = validator.validate("colour:red")
    result = await validator.validate_async("colour:red")
    assert result.error_codes == sync.error_codes
    assert result.suggestions == sync.suggestions


def test_validate_query_uses_defaults() -> None:
    assert validate_query("c:red").is_valid
