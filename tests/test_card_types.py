"""Tests for card type, supertype, function and subtype extraction."""

from __future__ import annotations

import pytest

from src.nl.card_types import TYPE_PATTERNS, TypeExtractor, deduplicate_types
from src.nl.schema import SubtypeCategory, TypeConcept


def test_supertype_and_type() -> None:
    concepts = TypeExtractor().extract("legendary artifacts")
    assert len(concepts) == 2
    assert {c.supertype for c in concepts} == {"legendary", None}
    assert {c.type for c in concepts} == {"artifact", None}


def test_plural_and_singular_deduplicate() -> None:
    concepts = TypeExtractor().extract("creature or creatures")
    assert [c.type for c in concepts] == ["creature"]


def test_spells_map_to_instant_or_sorcery() -> None:
    concepts = TypeExtractor().extract("cheap spells")
    assert [c.type for c in concepts] == ["instant OR sorcery"]


def test_function_grouping() -> None:
    concepts = TypeExtractor().extract("board wipe")
    assert [c.function for c in concepts] == ["wipe"]


def test_negated_type_keeps_its_own_key() -> None:
    extractor = TypeExtractor(patterns={"nonland": TYPE_PATTERNS["nonland"], "land": TYPE_PATTERNS["land"]})
    concepts = extractor.extract("nonland")
    assert [(c.type, c.negated) for c in concepts] == [("land", True), ("land", False)]


def test_context_window_is_recorded() -> None:
    (concept,) = TypeExtractor().extract("find me some big green creatures with flying please")
    assert concept.context == "some big green creatures with flying please"


def test_deduplicate_types_keeps_first() -> None:
    first = TypeConcept(type="creature", confidence=0.9)
    second = TypeConcept(type="creature", confidence=0.5)
    assert deduplicate_types([first, second]) == [first]


def test_type_concept_requires_a_target() -> None:
    with pytest.raises(ValueError):
        TypeConcept(confidence=0.9)


def test_subtype_extraction() -> None:
    subtypes = TypeExtractor().extract_subtypes("dragon creatures")
    assert len(subtypes) == 1
    assert subtypes[0].subtype == "dragon"
    assert subtypes[0].category == SubtypeCategory.creature


def test_land_subtype() -> None:
    subtypes = TypeExtractor().extract_subtypes("snow forest")
    assert [(s.subtype, s.category) for s in subtypes] == [("forest", SubtypeCategory.land)]
