"""Price constraint extraction.

An ordered list of regex rules recognizes bounds ("under $10", "between 5 and 20"), exact prices and
qualitative wording ("budget", "premium"). Currency and price condition come from a small character
window around each match. Constraints in the same currency are merged into one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from src.nl.schema import Currency, PriceCondition, PriceConstraint


class PriceRuleKind(StrEnum):
    """How a matched price rule turns into bounds."""

    max = "max"
    min = "min"
    range = "range"
    exact = "exact"
    budget_general = "budget_general"
    expensive_general = "expensive_general"


@dataclass(frozen=True)
class PriceRule:
    """One price regex with the bound it produces and its base confidence."""

    pattern: re.Pattern[str]
    kind: PriceRuleKind
    confidence: float


_AMOUNT = r"\$?(\d+(?:\.\d{2})?)"


def _rule(pattern: str, kind: PriceRuleKind, confidence: float) -> PriceRule:
    return PriceRule(re.compile(pattern, flags=re.IGNORECASE), kind, confidence)


PRICE_RULES: tuple[PriceRule, ...] = (
    # Upper bounds.
    _rule(rf"under\s*{_AMOUNT}", PriceRuleKind.max, 0.95),
    _rule(rf"less\s+than\s*{_AMOUNT}", PriceRuleKind.max, 0.93),
    _rule(rf"below\s*{_AMOUNT}", PriceRuleKind.max, 0.90),
    _rule(rf"{_AMOUNT}\s*or\s*less", PriceRuleKind.max, 0.92),
    _rule(rf"{_AMOUNT}\s*and\s*under", PriceRuleKind.max, 0.90),
    _rule(rf"{_AMOUNT}\s*max", PriceRuleKind.max, 0.88),
    _rule(rf"maximum\s*{_AMOUNT}", PriceRuleKind.max, 0.87),
    # Budget wording with an amount.
    _rule(rf"budget.*?{_AMOUNT}", PriceRuleKind.max, 0.85),
    _rule(rf"cheap.*?{_AMOUNT}", PriceRuleKind.max, 0.80),
    _rule(rf"affordable.*?{_AMOUNT}", PriceRuleKind.max, 0.82),
    _rule(rf"inexpensive.*?{_AMOUNT}", PriceRuleKind.max, 0.78),
    # Lower bounds.
    _rule(rf"over\s*{_AMOUNT}", PriceRuleKind.min, 0.95),
    _rule(rf"more\s+than\s*{_AMOUNT}", PriceRuleKind.min, 0.93),
    _rule(rf"above\s*{_AMOUNT}", PriceRuleKind.min, 0.90),
    _rule(rf"{_AMOUNT}\s*or\s*more", PriceRuleKind.min, 0.92),
    _rule(rf"{_AMOUNT}\s*and\s*up", PriceRuleKind.min, 0.88),
    _rule(rf"minimum\s*{_AMOUNT}", PriceRuleKind.min, 0.87),
    # Ranges.
    _rule(rf"between\s*{_AMOUNT}\s*(?:and|to|-)\s*{_AMOUNT}", PriceRuleKind.range, 0.88),
    _rule(rf"{_AMOUNT}\s*(?:-|to)\s*{_AMOUNT}", PriceRuleKind.range, 0.85),
    _rule(rf"from\s*{_AMOUNT}\s*to\s*{_AMOUNT}", PriceRuleKind.range, 0.87),
    # Exact prices.
    _rule(rf"exactly\s*{_AMOUNT}", PriceRuleKind.exact, 0.90),
    _rule(rf"costs\s*{_AMOUNT}", PriceRuleKind.exact, 0.85),
    _rule(rf"priced\s*at\s*{_AMOUNT}", PriceRuleKind.exact, 0.83),
    # Qualitative wording without an amount.
    _rule(r"budget", PriceRuleKind.budget_general, 0.70),
    _rule(r"cheap", PriceRuleKind.budget_general, 0.65),
    _rule(r"affordable", PriceRuleKind.budget_general, 0.68),
    _rule(r"expensive", PriceRuleKind.expensive_general, 0.65),
    _rule(r"premium", PriceRuleKind.expensive_general, 0.70),
    _rule(r"high.?end", PriceRuleKind.expensive_general, 0.72),
)

DEFAULT_BUDGET_MAX = 10.0
DEFAULT_PREMIUM_MIN = 50.0

CURRENCY_TERMS: tuple[tuple[Currency, tuple[str, ...]], ...] = (
    (Currency.eur, ("euro", "eur", "€")),
    (Currency.tix, ("tix", "ticket", "mtgo")),
)

CONDITION_TERMS: tuple[tuple[PriceCondition, tuple[str, ...]], ...] = (
    (PriceCondition.budget, ("budget", "cheap", "affordable")),
    (PriceCondition.value, ("value", "efficient", "reasonable")),
    (PriceCondition.premium, ("premium", "expensive", "high end")),
)

_WINDOW_CHARS = 20


def _window(text: str, position: int) -> str:
    return text[max(0, position - _WINDOW_CHARS): position + _WINDOW_CHARS].lower()


def detect_currency(text: str, position: int) -> Currency:
    """Detect the currency mentioned near `position` (USD when nothing else is mentioned)."""

    window = _window(text, position)
    for currency, terms in CURRENCY_TERMS:
        if any(term in window for term in terms):
            return currency
    return Currency.usd


def detect_condition(text: str, position: int) -> PriceCondition | None:
    """Detect qualitative price wording near `position`."""

    window = _window(text, position)
    for condition, terms in CONDITION_TERMS:
        if any(term in window for term in terms):
            return condition
    return None


def _bounds(rule: PriceRule, match: re.Match[str]) -> tuple[float | None, float | None, PriceCondition | None]:
    if rule.kind == PriceRuleKind.max:
        return None, float(match.group(1)), None
    if rule.kind == PriceRuleKind.min:
        return float(match.group(1)), None, None
    if rule.kind == PriceRuleKind.range:
        return float(match.group(1)), float(match.group(2)), None
    if rule.kind == PriceRuleKind.exact:
        value = float(match.group(1))
        return value, value, None
    if rule.kind == PriceRuleKind.budget_general:
        return None, DEFAULT_BUDGET_MAX, PriceCondition.budget
    return DEFAULT_PREMIUM_MIN, None, PriceCondition.premium


def _merge_min(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _merge_max(a: float | None, b: float | None) -> float | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def merge_price_constraints(constraints: list[PriceConstraint]) -> list[PriceConstraint]:
    """Merge constraints that share a currency into one, keeping first-seen order.

    Lower bounds take the larger value, upper bounds the smaller one. The merged constraint keeps
    the first condition present and the highest confidence.
    """

    merged: list[PriceConstraint] = []
    for constraint in constraints:
        for idx, existing in enumerate(merged):
            if existing.currency != constraint.currency:
                continue
            merged[idx] = PriceConstraint(
                min=_merge_min(existing.min, constraint.min),
                max=_merge_max(existing.max, constraint.max),
                currency=existing.currency,
                condition=existing.condition or constraint.condition,
                confidence=max(existing.confidence, constraint.confidence),
            )
            break
        else:
            merged.append(constraint)
    return merged


class PriceExtractor:
    """Extract price constraints from free text."""

    def __init__(self, rules: tuple[PriceRule, ...] | None = None) -> None:
        self._rules = tuple(rules if rules is not None else PRICE_RULES)

    def extract(self, text: str) -> list[PriceConstraint]:
        """Return at most one merged constraint per currency."""

        value = text or ""
        constraints: list[PriceConstraint] = []
        for rule in self._rules:
            match = rule.pattern.search(value)
            if not match:
                continue

            low, high, condition = _bounds(rule, match)
            constraints.append(
                PriceConstraint(
                    min=low,
                    max=high,
                    currency=detect_currency(value, match.start()),
                    condition=condition or detect_condition(value, match.start()),
                    confidence=rule.confidence,
                )
            )
        return merge_price_constraints(constraints)
