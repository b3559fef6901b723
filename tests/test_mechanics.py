"""Tests for keyword and numeric stat extraction."""

from __future__ import annotations

from src.nl.mechanics import MechanicsExtractor
from src.nl.schema import Stat


def test_keywords() -> None:
    keywords = MechanicsExtractor().extract_keywords("creatures with flying and first strike")
    assert [k.keyword for k in keywords] == ["flying", "first strike"]


def test_keyword_needs_word_boundaries() -> None:
    assert MechanicsExtractor().extract_keywords("flashback spells") == []


def test_mana_value_with_suffix() -> None:
    (stat,) = MechanicsExtractor().extract_stats("cmc 3 or less")
    assert stat.stat == Stat.mana_value
    assert stat.value == 3
    assert stat.comparison == "<="


def test_n_mana_phrase() -> None:
    (stat,) = MechanicsExtractor().extract_stats("2 mana removal")
    assert (stat.stat, stat.value, stat.comparison) == (Stat.mana_value, 2, "=")


def test_power_or_more() -> None:
    (stat,) = MechanicsExtractor().extract_stats("power 4 or more")
    assert (stat.stat, stat.value, stat.comparison) == (Stat.power, 4, ">=")


def test_power_toughness_pair() -> None:
    stats = MechanicsExtractor().extract_stats("a 2/2 for two")
    assert {(s.stat, s.value) for s in stats} == {(Stat.power, 2), (Stat.toughness, 2)}
