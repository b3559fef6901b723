"""Value grammars for DSL operators.

Each grammar is a function `(value, comparison) -> ValueCheck`. Grammars know nothing about token
positions; the caller anchors their findings to the token that carried the value.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from src.validation.fuzzy import closest_matches
from src.validation.schema import ValidationCode


class ValueType(StrEnum):
    """Shapes of operator values."""

    string = "string"
    color = "color"
    mana_cost = "mana_cost"
    number = "number"
    power_toughness = "power_toughness"
    loyalty = "loyalty"
    set_code = "set_code"
    collector_number = "collector_number"
    rarity = "rarity"
    format = "format"
    enum = "enum"
    year = "year"


@dataclass(frozen=True)
class ValueIssue:
    """A problem with an operator value, before it is anchored to a token."""

    code: ValidationCode
    message: str
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValueCheck:
    errors: tuple[ValueIssue, ...] = ()
    warnings: tuple[ValueIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


ValueValidator = Callable[[str, str | None], ValueCheck]

OK = ValueCheck()

MAX_STRING_LENGTH = 500

COLOR_LETTERS = frozenset("wubrg")
COLOR_NAMES: tuple[str, ...] = (
    "white",
    "blue",
    "black",
    "red",
    "green",
    "colorless",
    "multicolor",
    "azorius",
    "dimir",
    "rakdos",
    "gruul",
    "selesnya",
    "orzhov",
    "izzet",
    "golgari",
    "boros",
    "simic",
    "bant",
    "esper",
    "grixis",
    "jund",
    "naya",
    "abzan",
    "jeskai",
    "sultai",
    "mardu",
    "temur",
)

RARITIES: tuple[str, ...] = ("common", "uncommon", "rare", "mythic", "special", "bonus")
RARITY_ABBREVIATIONS: frozenset[str] = frozenset({"c", "u", "r", "m", "s"})

FORMATS: tuple[str, ...] = (
    "standard",
    "future",
    "historic",
    "timeless",
    "gladiator",
    "pioneer",
    "explorer",
    "modern",
    "legacy",
    "pauper",
    "vintage",
    "penny",
    "commander",
    "oathbreaker",
    "standardbrawl",
    "brawl",
    "alchemy",
    "paupercommander",
    "duel",
    "oldschool",
    "premodern",
    "predh",
)

CARD_PROPERTIES: tuple[str, ...] = (
    "foil",
    "nonfoil",
    "promo",
    "reprint",
    "unique",
    "digital",
    "reserved",
    "funny",
    "booster",
    "timeshifted",
    "colorshifted",
    "futureshifted",
    "commander",
    "spell",
    "permanent",
    "historic",
    "vanilla",
    "french_vanilla",
    "dfc",
    "mdfc",
    "split",
    "transform",
    "fullart",
    "full",
    "textless",
)

GAMES: tuple[str, ...] = ("paper", "arena", "mtgo")

# Plausible bounds per numeric operator; values outside only produce a warning.
NUMBER_RANGES: dict[str, tuple[float, float]] = {
    "manavalue": (0, 20),
    "power": (-1, 20),
    "toughness": (-1, 20),
    "loyalty": (0, 20),
    "usd": (0, 100_000),
    "eur": (0, 100_000),
    "tix": (0, 10_000),
}

STAT_REFERENCES = frozenset({"pow", "power", "tou", "toughness", "loy", "loyalty", "mv", "cmc", "manavalue"})

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d+)?|\.\d+)$")
_POWER_TOUGHNESS_RE = re.compile(r"^(?:[*xX]|[+-]?\d+(?:\.5)?)$")
_LOYALTY_RE = re.compile(r"^(?:[xX]|\d+)$")
_SET_CODE_RE = re.compile(r"^[a-z0-9]{2,5}$")
_YEAR_RE = re.compile(r"^\d{4}$")
_MANA_COST_RE = re.compile(r"^(?:\{[0-9wubrgcxyzsp/]+\}|[0-9wubrgcxyzs])+$")


def _not_equality(comparison: str | None) -> bool:
    return comparison is not None and comparison != "="


def _comparison_not_allowed(kind: str, comparison: str) -> ValueIssue:
    return ValueIssue(
        ValidationCode.comparison_not_allowed,
        f"Comparison '{comparison}' is not allowed for {kind} values; use ':' or a leading '-'",
    )


def _check_length(value: str) -> tuple[ValueIssue, ...]:
    if len(value) > MAX_STRING_LENGTH:
        return (
            ValueIssue(
                ValidationCode.long_value,
                f"Value is very long ({len(value)} characters) and may be slow to search",
            ),
        )
    return ()


def validate_string(value: str, comparison: str | None) -> ValueCheck:
    """Free text (oracle, name, type, artist...): any value, equality only."""

    errors = (_comparison_not_allowed("text", comparison),) if comparison == "!=" else ()
    return ValueCheck(errors=errors, warnings=_check_length(value))


def validate_color(value: str, comparison: str | None) -> ValueCheck:
    """Color letters (`wu`), `c`/`m`, or a color/guild/shard/wedge name."""

    lowered = value.lower()
    if lowered in COLOR_NAMES or lowered in {"c", "m"}:
        return OK

    invalid = [ch for ch in lowered if ch not in COLOR_LETTERS]
    if not lowered or invalid:
        suggestions = tuple(closest_matches(lowered, COLOR_NAMES))
        message = (
            f"Invalid color value '{value}'. Use color letters (w, u, b, r, g), c, m, "
            "or a color name"
        )
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        return ValueCheck(errors=(ValueIssue(ValidationCode.invalid_color, message, suggestions),))

    if len(set(lowered)) != len(lowered):
        return ValueCheck(
            warnings=(
                ValueIssue(ValidationCode.duplicate_color, f"Color value '{value}' repeats a color"),
            )
        )
    return OK


def validate_mana_cost(value: str, comparison: str | None) -> ValueCheck:
    """Mana symbols such as `2WW` or `{2}{W}{W}`."""

    if not _MANA_COST_RE.match(value.lower()):
        return ValueCheck(
            errors=(
                ValueIssue(
                    ValidationCode.invalid_mana_cost,
                    f"Invalid mana cost '{value}'. Use symbols like 2WW or {{2}}{{W}}{{W}}",
                ),
            )
        )
    return OK


def number_validator(operator: str) -> ValueValidator:
    """Numeric grammar with the plausible range registered for `operator`."""

    low, high = NUMBER_RANGES.get(operator, (float("-inf"), float("inf")))

    def validate_number(value: str, comparison: str | None) -> ValueCheck:
        if value.lower() in STAT_REFERENCES:
            return OK
        if not _NUMBER_RE.match(value):
            return ValueCheck(
                errors=(
                    ValueIssue(ValidationCode.invalid_number, f"Invalid number '{value}' for {operator}"),
                )
            )
        number = float(value)
        if low <= number <= high:
            return OK
        return ValueCheck(
            warnings=(
                ValueIssue(
                    ValidationCode.unusual_range,
                    f"Value {value} for {operator} is outside the usual range {low:g}..{high:g}",
                ),
            )
        )

    return validate_number


def validate_power_toughness(value: str, comparison: str | None) -> ValueCheck:
    """`*`, `X`, a signed integer, or another stat name (`pow>tou`)."""

    if value.lower() in STAT_REFERENCES:
        return OK
    if not _POWER_TOUGHNESS_RE.match(value):
        return ValueCheck(
            errors=(
                ValueIssue(
                    ValidationCode.invalid_power_toughness,
                    f"Invalid power/toughness '{value}'. Use a number, * or X",
                ),
            )
        )
    return OK


def validate_loyalty(value: str, comparison: str | None) -> ValueCheck:
    if not _LOYALTY_RE.match(value):
        return ValueCheck(
            errors=(
                ValueIssue(
                    ValidationCode.invalid_loyalty,
                    f"Invalid loyalty '{value}'. Use a non-negative number or X",
                ),
            )
        )
    return OK


def validate_set_code(value: str, comparison: str | None) -> ValueCheck:
    errors: tuple[ValueIssue, ...] = ()
    if comparison == "!=":
        errors = (_comparison_not_allowed("set", comparison),)
    if not _SET_CODE_RE.match(value.lower()):
        errors += (
            ValueIssue(
                ValidationCode.invalid_set_code,
                f"Invalid set code '{value}'. Set codes are 2-5 letters or digits",
            ),
        )
    return ValueCheck(errors=errors)


def validate_collector_number(value: str, comparison: str | None) -> ValueCheck:
    if not re.match(r"^[A-Za-z0-9★*-]+$", value):
        return ValueCheck(
            errors=(
                ValueIssue(ValidationCode.invalid_number, f"Invalid collector number '{value}'"),
            )
        )
    return OK


def validate_rarity(value: str, comparison: str | None) -> ValueCheck:
    lowered = value.lower()
    if lowered in RARITIES or lowered in RARITY_ABBREVIATIONS:
        return OK
    suggestions = tuple(closest_matches(lowered, RARITIES))
    message = f"Invalid rarity '{value}'. Valid rarities: {', '.join(RARITIES)}"
    return ValueCheck(errors=(ValueIssue(ValidationCode.invalid_rarity, message, suggestions),))


def validate_format(value: str, comparison: str | None) -> ValueCheck:
    errors: tuple[ValueIssue, ...] = ()
    if _not_equality(comparison):
        errors = (_comparison_not_allowed("format", comparison or ""),)
    lowered = value.lower()
    if lowered not in FORMATS:
        suggestions = tuple(closest_matches(lowered, FORMATS))
        message = f"Invalid format '{value}'"
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        errors += (ValueIssue(ValidationCode.invalid_format, message, suggestions),)
    return ValueCheck(errors=errors)


def enum_validator(name: str, valid_values: tuple[str, ...]) -> ValueValidator:
    """Build a grammar accepting only `valid_values` (case-insensitive)."""

    def validate_enum(value: str, comparison: str | None) -> ValueCheck:
        errors: tuple[ValueIssue, ...] = ()
        if _not_equality(comparison):
            errors = (_comparison_not_allowed(name, comparison or ""),)
        lowered = value.lower()
        if lowered not in valid_values:
            suggestions = tuple(closest_matches(lowered, valid_values))
            message = f"Invalid value '{value}' for operator '{name}'"
            if suggestions:
                message += f". Did you mean: {', '.join(suggestions)}?"
            errors += (ValueIssue(ValidationCode.invalid_enum_value, message, suggestions),)
        return ValueCheck(errors=errors)

    return validate_enum


def validate_year(value: str, comparison: str | None) -> ValueCheck:
    if not _YEAR_RE.match(value):
        return ValueCheck(
            errors=(ValueIssue(ValidationCode.invalid_year, f"Invalid year '{value}'. Use YYYY"),)
        )
    if not 1993 <= int(value) <= 2100:
        return ValueCheck(
            warnings=(
                ValueIssue(ValidationCode.unusual_range, f"Year {value} is outside Magic's history"),
            )
        )
    return OK

