"""Tests for price constraint extraction."""

from __future__ import annotations

import pytest

from src.nl.prices import DEFAULT_BUDGET_MAX, PriceExtractor, merge_price_constraints
from src.nl.schema import Currency, PriceCondition, PriceConstraint


def test_under_amount() -> None:
    (price,) = PriceExtractor().extract("cards under $10")
    assert price.max == 10
    assert price.min is None
    assert price.currency == Currency.usd


def test_between_range() -> None:
    (price,) = PriceExtractor().extract("between $5 and $20")
    assert (price.min, price.max) == (5, 20)


def test_budget_with_amount_merges_to_one_constraint() -> None:
    prices = PriceExtractor().extract("budget cards under $5")
    assert len(prices) == 1
    assert prices[0].max == 5
    assert prices[0].condition == PriceCondition.budget


def test_budget_without_amount_uses_default_cap() -> None:
    (price,) = PriceExtractor().extract("budget removal")
    assert price.max == DEFAULT_BUDGET_MAX
    assert price.condition == PriceCondition.budget


def test_premium_sets_a_floor() -> None:
    (price,) = PriceExtractor().extract("premium lands")
    assert price.min == 50
    assert price.max is None
    assert price.condition == PriceCondition.premium


def test_tix_currency() -> None:
    (price,) = PriceExtractor().extract("under 10 tix")
    assert price.currency == Currency.tix
    assert price.max == 10


def test_euro_currency() -> None:
    (price,) = PriceExtractor().extract("less than 3 euro")
    assert price.currency == Currency.eur


def test_exact_price() -> None:
    (price,) = PriceExtractor().extract("exactly $2.50")
    assert price.min == price.max == 2.5


def test_no_price() -> None:
    assert PriceExtractor().extract("red creatures") == []


def test_merge_tightens_bounds() -> None:
    merged = merge_price_constraints(
        [
            PriceConstraint(max=20, confidence=0.8),
            PriceConstraint(max=10, min=2, confidence=0.9),
            PriceConstraint(min=5, confidence=0.7),
        ]
    )
    assert len(merged) == 1
    assert (merged[0].min, merged[0].max) == (5, 10)
    assert merged[0].confidence == pytest.approx(0.9)


def test_constraint_requires_a_bound() -> None:
    with pytest.raises(ValueError):
        PriceConstraint(confidence=0.5)
