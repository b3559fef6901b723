"""Tests for the offline query builder."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.nl.builder import (
    MAX_ALTERNATIVES,
    AlternativeType,
    BuildOptions,
    BuildResult,
    OptimizationType,
    OptimizeFor,
    QueryBuilder,
    QueryBuilderError,
    explain,
)
from src.nl.parser import NaturalLanguageParser
from src.nl.schema import ParsedQuery, Stat, StatConcept

PRECISION_FORMATS = "(f:standard OR f:modern OR f:commander)"


def _build(text: str, **options: object) -> BuildResult:
    parsed = NaturalLanguageParser().parse(text)
    return QueryBuilder().build(parsed, BuildOptions(**options))


def test_precision_adds_format_and_price() -> None:
    result = _build("red creatures")
    assert result.query == f"c:r t:creature {PRECISION_FORMATS} usd<=50"
    assert [o.type for o in result.optimizations] == [
        OptimizationType.format_constraint,
        OptimizationType.price_constraint,
    ]
    assert result.validation.is_valid


def test_recall_widens_related_types() -> None:
    result = _build("red creatures", optimize_for=OptimizeFor.recall)
    assert result.query == "c:r (t:creature OR t:planeswalker)"
    (optimization,) = result.optimizations
    assert optimization.type == OptimizationType.broadening


def test_recall_relaxes_power() -> None:
    parsed = ParsedQuery(stats=[StatConcept(stat=Stat.power, value=3, comparison=">=", confidence=0.8)])
    result = QueryBuilder().build(parsed, BuildOptions(optimize_for=OptimizeFor.recall))
    assert result.query == "pow>=2"


def test_discovery_favors_unusual_printings() -> None:
    result = _build("red creatures", optimize_for=OptimizeFor.discovery)
    assert result.query == "c:r t:creature (is:unique OR is:reserved OR is:promo)"


def test_budget_caps_price() -> None:
    result = _build("red creatures", optimize_for=OptimizeFor.budget)
    assert result.query == "c:r t:creature usd<=5"


def test_budget_keeps_an_existing_price() -> None:
    result = _build("red creatures under $10", optimize_for=OptimizeFor.budget)
    assert result.query == "c:r t:creature usd<=10"
    assert result.optimizations == ()


def test_format_override() -> None:
    result = _build("red creatures", format="Modern")
    assert result.query == "c:r t:creature f:modern usd<=50"
    assert all(a.type == AlternativeType.optimization for a in result.alternatives)


def test_format_override_replaces_parsed_format() -> None:
    result = _build("red creatures for legacy", format="pauper", optimize_for=OptimizeFor.budget)
    assert "f:pauper" in result.query
    assert "f:legacy" not in result.query


def test_unknown_format_raises() -> None:
    with pytest.raises(QueryBuilderError):
        _build("red creatures", format="casual")


def test_price_budget_override() -> None:
    result = _build("red creatures under $10", price_budget=20)
    assert "usd<=20" in result.query
    assert "usd<=10" not in result.query
    assert "usd<=50" not in result.query


def test_negative_budget_is_rejected() -> None:
    with pytest.raises(ValidationError):
        BuildOptions(price_budget=-1)


def test_alternatives_prefer_format_restrictions() -> None:
    result = _build("red creatures")
    assert len(result.alternatives) == MAX_ALTERNATIVES
    assert [a.query for a in result.alternatives] == [
        "c:r t:creature f:standard",
        "c:r t:creature f:modern",
        "c:r t:creature f:commander",
    ]
    assert all(a.type == AlternativeType.format_restriction for a in result.alternatives)
    assert result.query not in {a.query for a in result.alternatives}


def test_confidence() -> None:
    parsed = NaturalLanguageParser().parse("red creatures")
    builder = QueryBuilder()

    precise = builder.build(parsed)
    assert precise.confidence == pytest.approx(max(0.0, parsed.confidence - 0.1))

    discovery = builder.build(parsed, BuildOptions(optimize_for=OptimizeFor.discovery))
    assert discovery.confidence == pytest.approx(max(0.0, parsed.confidence - 0.05))


def test_empty_parse_still_builds_a_valid_query() -> None:
    result = QueryBuilder().build(ParsedQuery())
    assert result.query == f"{PRECISION_FORMATS} usd<=50"
    assert result.validation.is_valid
    assert result.confidence == 0.0
    assert result.explanation == "Searching for all cards (optimized for precision)"


def test_explanation() -> None:
    result = _build("red creatures")
    assert result.explanation == "Searching for cards that are red, of type creature (optimized for precision)"


def test_explain_without_strategy() -> None:
    parsed = NaturalLanguageParser().parse("azorius flyers under $3")
    mappings = QueryBuilder().mapper.extract_mappings(parsed)
    assert explain(mappings).startswith("Searching for cards that are exactly white and blue")


def test_nothing_searchable_raises() -> None:
    parsed = NaturalLanguageParser().parse("kitchen table cards")
    with pytest.raises(QueryBuilderError):
        QueryBuilder().build(parsed, BuildOptions(optimize_for=OptimizeFor.recall))


def test_strategy_terms_keep_an_unmapped_parse_searchable() -> None:
    parsed = NaturalLanguageParser().parse("kitchen table cards")
    result = QueryBuilder().build(parsed, BuildOptions(optimize_for=OptimizeFor.discovery))
    assert result.query == "(is:unique OR is:reserved OR is:promo)"
    assert result.validation.is_valid


def test_price_range_is_explained_and_valid() -> None:
    result = _build("artifacts between $5 and $20", optimize_for=OptimizeFor.budget)
    assert result.query == "t:artifact usd>=5 usd<=20"
    assert result.validation.is_valid
    assert "priced between $5 and $20" in result.explanation
