"""Tests for color concept extraction and merging."""

from __future__ import annotations

from src.nl.colors import ColorExtractor, merge_color_concepts
from src.nl.schema import ColorCode, ColorConcept


def test_single_color() -> None:
    concepts = ColorExtractor().extract("red creatures")
    assert len(concepts) == 1
    assert concepts[0].colors == (ColorCode.r,)
    assert not concepts[0].exact
    assert not concepts[0].inclusive
    assert not concepts[0].exclusive


def test_two_colors_merge_into_one_concept() -> None:
    concepts = ColorExtractor().extract("red and blue cards")
    assert len(concepts) == 1
    assert concepts[0].colors == (ColorCode.u, ColorCode.r)


def test_guild_name_is_exact() -> None:
    concepts = ColorExtractor().extract("azorius control")
    assert len(concepts) == 1
    assert concepts[0].colors == (ColorCode.w, ColorCode.u)
    assert concepts[0].exact


def test_only_marks_exclusive() -> None:
    concepts = ColorExtractor().extract("only red cards")
    assert len(concepts) == 1
    assert concepts[0].exclusive


def test_inclusive_indicator_is_a_whole_word() -> None:
    concepts = ColorExtractor().extract("red cards for modern")
    assert not concepts[0].inclusive

    concepts = ColorExtractor().extract("red or green cards")
    assert concepts[0].inclusive


def test_colorless() -> None:
    concepts = ColorExtractor().extract("colorless artifacts")
    assert len(concepts) == 1
    assert concepts[0].colorless
    assert concepts[0].colors == ()


def test_colors_are_kept_in_wubrg_order() -> None:
    concept = ColorConcept(colors=(ColorCode.g, ColorCode.w, ColorCode.u), confidence=0.9)
    assert concept.colors == (ColorCode.w, ColorCode.u, ColorCode.g)


def test_merge_keeps_highest_confidence() -> None:
    merged = merge_color_concepts(
        [
            ColorConcept(colors=(ColorCode.r,), confidence=0.7),
            ColorConcept(colors=(ColorCode.b,), confidence=0.9),
        ]
    )
    assert len(merged) == 1
    assert merged[0].colors == (ColorCode.b, ColorCode.r)
    assert merged[0].confidence == 0.9


def test_no_colors() -> None:
    assert ColorExtractor().extract("") == []
    assert ColorExtractor().extract("creatures with flying") == []
