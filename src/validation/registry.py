"""Operator registry.

The registry maps every operator name and alias (case-insensitive) to its `OperatorDefinition`.
It is built once at startup, is read-only afterwards and is shared by every validation call.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

from src.validation import grammars
from src.validation.fuzzy import DEFAULT_LIMIT, DEFAULT_MAX_DISTANCE, closest_matches
from src.validation.grammars import ValueCheck, ValueType, ValueValidator


class RegistryError(ValueError):
    """Raised when operator definitions cannot form a consistent registry."""


@dataclass(frozen=True)
class OperatorDefinition:
    """A DSL operator: canonical name, aliases, value grammar and comparison support.

    `allows_comparison` covers the ordering comparisons (`<`, `<=`, `>`, `>=`). Equality and
    inequality are left to the value grammar.
    """

    name: str
    aliases: tuple[str, ...]
    value_type: ValueType
    allows_comparison: bool
    value_validator: ValueValidator
    description: str = ""
    valid_values: tuple[str, ...] = ()

    @property
    def all_names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def validate_value(self, value: str, comparison: str | None) -> ValueCheck:
        return self.value_validator(value, comparison)


class OperatorRegistry:
    """Immutable, case-insensitive lookup of operator definitions by name or alias."""

    def __init__(self, definitions: Iterable[OperatorDefinition]) -> None:
        by_name: dict[str, OperatorDefinition] = {}
        ordered: list[OperatorDefinition] = []
        for definition in definitions:
            for key in definition.all_names:
                lowered = key.lower()
                if lowered in by_name:
                    raise RegistryError(f"duplicate operator name or alias: {key}")
                by_name[lowered] = definition
            ordered.append(definition)

        self._by_name = MappingProxyType(by_name)
        self._definitions = tuple(ordered)

    def get(self, name: str) -> OperatorDefinition | None:
        """Return the definition for a name or alias, or `None` if unknown."""

        return self._by_name.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._by_name

    def __iter__(self) -> Iterator[OperatorDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> list[str]:
        """All canonical names and aliases, in registration order."""

        return [name for definition in self._definitions for name in definition.all_names]

    def closest(
            self,
            name: str,
            *,
            max_distance: int = DEFAULT_MAX_DISTANCE,
            limit: int = DEFAULT_LIMIT,
    ) -> list[str]:
        """Registry names within `max_distance` edits of `name`, nearest first."""

        return closest_matches(name, self.names(), max_distance=max_distance, limit=limit)

    def accepts(self, name: str, value: str, comparison: str | None = None) -> bool:
        """Whether `name` is known and `value` passes its grammar without errors."""

        definition = self.get(name)
        if definition is None or not value:
            return False
        if comparison in {"<", "<=", ">", ">="} and not definition.allows_comparison:
            return False
        return definition.validate_value(value, comparison).ok


def _op(
        name: str,
        aliases: tuple[str, ...],
        value_type: ValueType,
        validator: ValueValidator,
        *,
        comparison: bool = False,
        description: str = "",
        valid_values: tuple[str, ...] = (),
) -> OperatorDefinition:
    return OperatorDefinition(
        name=name,
        aliases=aliases,
        value_type=value_type,
        allows_comparison=comparison,
        value_validator=validator,
        description=description,
        valid_values=valid_values,
    )


def standard_definitions() -> list[OperatorDefinition]:
    """The operators of the card search grammar."""

    enum = grammars.enum_validator
    number = grammars.number_validator
    return [
        # Text.
        _op("oracle", ("o",), ValueType.string, grammars.validate_string, description="Rules text"),
        _op("name", ("n",), ValueType.string, grammars.validate_string, description="Card name"),
        _op("type", ("t",), ValueType.string, grammars.validate_string, description="Type line"),
        _op("flavor", ("ft",), ValueType.string, grammars.validate_string, description="Flavor text"),
        _op("artist", ("a",), ValueType.string, grammars.validate_string, description="Artist name"),
        _op("keyword", ("kw",), ValueType.string, grammars.validate_string, description="Keyword ability"),
        _op(
            "oracletag",
            ("otag", "function"),
            ValueType.string,
            grammars.validate_string,
            description="Functional card tag",
        ),
        # Colors and mana.
        _op("color", ("c",), ValueType.color, grammars.validate_color, comparison=True),
        _op(
            "coloridentity",
            ("id", "identity", "ci"),
            ValueType.color,
            grammars.validate_color,
            comparison=True,
        ),
        _op("produces", (), ValueType.color, grammars.validate_color, comparison=True),
        _op("mana", ("m",), ValueType.mana_cost, grammars.validate_mana_cost, comparison=True),
        _op("devotion", (), ValueType.mana_cost, grammars.validate_mana_cost, comparison=True),
        # Numeric characteristics.
        _op("manavalue", ("mv", "cmc"), ValueType.number, number("manavalue"), comparison=True),
        _op("power", ("pow",), ValueType.power_toughness, grammars.validate_power_toughness, comparison=True),
        _op(
            "toughness",
            ("tou",),
            ValueType.power_toughness,
            grammars.validate_power_toughness,
            comparison=True,
        ),
        _op("loyalty", ("loy",), ValueType.loyalty, grammars.validate_loyalty, comparison=True),
        # Printings.
        _op("set", ("s", "e", "edition"), ValueType.set_code, grammars.validate_set_code),
        _op(
            "number",
            ("cn", "collector"),
            ValueType.collector_number,
            grammars.validate_collector_number,
            comparison=True,
        ),
        _op(
            "rarity",
            ("r",),
            ValueType.rarity,
            grammars.validate_rarity,
            comparison=True,
            valid_values=grammars.RARITIES,
        ),
        _op("year", (), ValueType.year, grammars.validate_year, comparison=True),
        _op("game", (), ValueType.enum, enum("game", grammars.GAMES), valid_values=grammars.GAMES),
        # Legality.
        _op(
            "format",
            ("f", "legal"),
            ValueType.format,
            grammars.validate_format,
            valid_values=grammars.FORMATS,
        ),
        _op(
            "banned",
            (),
            ValueType.format,
            grammars.validate_format,
            valid_values=grammars.FORMATS,
        ),
        _op(
            "restricted",
            (),
            ValueType.format,
            grammars.validate_format,
            valid_values=grammars.FORMATS,
        ),
        # Card properties.
        _op(
            "is",
            (),
            ValueType.enum,
            enum("is", grammars.CARD_PROPERTIES),
            valid_values=grammars.CARD_PROPERTIES,
        ),
        _op(
            "not",
            (),
            ValueType.enum,
            enum("not", grammars.CARD_PROPERTIES),
            valid_values=grammars.CARD_PROPERTIES,
        ),
        # Prices.
        _op("usd", (), ValueType.number, number("usd"), comparison=True),
        _op("eur", (), ValueType.number, number("eur"), comparison=True),
        _op("tix", (), ValueType.number, number("tix"), comparison=True),
    ]


@lru_cache(maxsize=1)
def default_registry() -> OperatorRegistry:
    """Build the standard registry once per process."""

    return OperatorRegistry(standard_definitions())
