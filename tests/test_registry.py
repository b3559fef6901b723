"""Tests for the operator registry and fuzzy name matching."""

from __future__ import annotations

import pytest

from src.validation.fuzzy import closest_matches
from src.validation.grammars import ValueType, validate_string
from src.validation.registry import (
    OperatorDefinition,
    OperatorRegistry,
    RegistryError,
    default_registry,
    standard_definitions,
)


def test_aliases_resolve_to_the_same_definition() -> None:
    registry = default_registry()
    assert registry.get("c") is registry.get("color")
    assert registry.get("mv") is registry.get("cmc")
    assert registry.get("function") is registry.get("oracletag")
    assert registry.get("f").name == "format"


def test_lookup_is_case_insensitive() -> None:
    registry = default_registry()
    assert "COLOR" in registry
    assert registry.get("Mv") is registry.get("manavalue")
    assert "colour" not in registry
    assert registry.get("colour") is None


def test_iteration_and_names() -> None:
    registry = default_registry()
    assert len(registry) == len(standard_definitions())
    assert [d.name for d in registry][:2] == ["oracle", "name"]
    assert registry.names()[:2] == ["oracle", "o"]


def test_duplicate_alias_is_rejected() -> None:
    first = OperatorDefinition("oracle", ("o",), ValueType.string, False, validate_string)
    second = OperatorDefinition("other", ("O",), ValueType.string, False, validate_string)
    with pytest.raises(RegistryError):
        OperatorRegistry([first, second])


def test_closest_names() -> None:
    registry = default_registry()
    assert registry.closest("colour") == ["color"]
    assert registry.closest("typ")[0] == "type"
    assert registry.closest("zzzzzzzz") == []


def test_accepts() -> None:
    registry = default_registry()
    assert registry.accepts("c", "wu", "=")
    assert registry.accepts("usd", "10", "<=")
    assert registry.accepts("f", "modern")
    assert not registry.accepts("f", "casual")
    assert not registry.accepts("f", "modern", ">=")
    assert not registry.accepts("colour", "red")
    assert not registry.accepts("t", "")


def test_closest_matches_order_and_limit() -> None:
    candidates = ["modern", "modal", "mode", "legacy"]
    assert closest_matches("moder", candidates) == ["modern", "mode", "modal"]
    assert closest_matches("moder", candidates, limit=1) == ["modern"]
    assert "modern" not in closest_matches("MODERN", candidates)
    assert closest_matches("moder", candidates, max_distance=0) == []
