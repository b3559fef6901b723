"""Tests for play format extraction."""

from __future__ import annotations

import pytest

from src.nl.formats import FormatExtractor, best_format, has_explicit_format
from src.nl.schema import FormatConcept


def test_modern_legal() -> None:
    formats = FormatExtractor().extract("modern legal cards")
    assert [f.name for f in formats] == ["modern"]
    assert formats[0].confidence == pytest.approx(0.95)


def test_edh_maps_to_commander() -> None:
    formats = FormatExtractor().extract("edh deck")
    assert [f.name for f in formats] == ["commander"]


def test_for_standard() -> None:
    formats = FormatExtractor().extract("cards for standard")
    assert [f.name for f in formats] == ["standard"]


def test_single_word_patterns_need_word_boundaries() -> None:
    assert FormatExtractor().extract("pennywise") == []


def test_indirect_cue() -> None:
    formats = FormatExtractor().extract("singleton highlander staples")
    assert [f.name for f in formats] == ["commander"]
    assert formats[0].confidence == pytest.approx(0.80)


def test_multiple_formats() -> None:
    names = {f.name for f in FormatExtractor().extract("modern or legacy")}
    assert names == {"modern", "legacy"}


def test_best_and_explicit_format() -> None:
    concepts = [FormatConcept(name="pauper", confidence=0.6), FormatConcept(name="modern", confidence=0.95)]
    best = best_format(concepts)
    assert best is not None and best.name == "modern"
    assert has_explicit_format(concepts)
    assert not has_explicit_format(concepts[:1])
    assert best_format([]) is None
