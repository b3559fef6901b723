"""Concept schema (Pydantic models).

This schema is the contract between the natural-language extractors and the concept mapper. Each
concept kind is its own model with a literal `kind` discriminator, so downstream code can switch on
the kind instead of probing shapes at runtime.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Comparison = Literal["<", "<=", ">", ">=", "="]


class ColorCode(StrEnum):
    """Single-letter color codes in canonical WUBRG order."""

    w = "w"
    u = "u"
    b = "b"
    r = "r"
    g = "g"


WUBRG: tuple[ColorCode, ...] = tuple(ColorCode)


class ConceptKind(StrEnum):
    """Concept kinds, in extractor priority order."""

    color = "color"
    type = "type"
    subtype = "subtype"
    price = "price"
    format = "format"
    keyword = "keyword"
    stat = "stat"
    archetype = "archetype"


class SubtypeCategory(StrEnum):
    """Card type a subtype belongs to."""

    creature = "creature"
    artifact = "artifact"
    land = "land"
    enchantment = "enchantment"


class Currency(StrEnum):
    """Price currencies supported by the search API."""

    usd = "usd"
    eur = "eur"
    tix = "tix"


class PriceCondition(StrEnum):
    """Qualitative price wording detected near a price phrase."""

    budget = "budget"
    value = "value"
    premium = "premium"


class Stat(StrEnum):
    """Numeric card characteristics recognized in text."""

    mana_value = "mana_value"
    power = "power"
    toughness = "toughness"


class _Concept(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    confidence: float = Field(ge=0.0, le=1.0)


def sort_colors(colors: set[ColorCode] | list[ColorCode] | tuple[ColorCode, ...]) -> tuple[ColorCode, ...]:
    """Return colors deduplicated and in WUBRG order."""

    present = set(colors)
    return tuple(c for c in WUBRG if c in present)


class ColorConcept(_Concept):
    """A color restriction such as "red", "azorius" or "colorless"."""

    kind: Literal[ConceptKind.color] = ConceptKind.color
    colors: tuple[ColorCode, ...] = ()
    exact: bool = False
    exclusive: bool = False
    inclusive: bool = False
    multicolor: bool = False
    colorless: bool = False

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, value: tuple[ColorCode, ...]) -> tuple[ColorCode, ...]:
        """Keep colors in canonical order so equal sets compare equal."""

        return sort_colors(value)


class ArchetypeConstraints(BaseModel):
    """Card-level hints implied by a deck archetype."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cmc_range: tuple[int, int] | None = None
    power_min: int | None = None
    keywords: tuple[str, ...] = ()
    functions: tuple[str, ...] = ()
    card_types: tuple[str, ...] = ()
    subtypes: tuple[str, ...] = ()

    @model_validator(mode="after")
    def validate_range(self) -> ArchetypeConstraints:
        """Validate that the mana value range is well-formed (`low <= high`)."""

        if self.cmc_range is not None and self.cmc_range[0] > self.cmc_range[1]:
            raise ValueError("cmc_range must be (low, high) with low <= high")
        return self


class ArchetypeConcept(BaseModel):
    """A deck archetype such as "aggro" or "tribal".

    Confidence is only bounded below: the tribal enhancement adds a fixed boost without clamping.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    kind: Literal[ConceptKind.archetype] = ConceptKind.archetype
    name: str
    constraints: ArchetypeConstraints = Field(default_factory=ArchetypeConstraints)
    confidence: float = Field(ge=0.0)


class TypeConcept(_Concept):
    """A card type, supertype or functional grouping mentioned in text."""

    kind: Literal[ConceptKind.type] = ConceptKind.type
    type: str | None = None
    supertype: str | None = None
    function: str | None = None
    negated: bool = False
    context: str = ""

    @model_validator(mode="after")
    def validate_target(self) -> TypeConcept:
        """Require at least one of type, supertype or function."""

        if not (self.type or self.supertype or self.function):
            raise ValueError("type concept requires type, supertype or function")
        return self

    @property
    def dedup_key(self) -> str:
        if self.type:
            return f"-{self.type}" if self.negated else self.type
        return self.supertype or self.function or ""


class SubtypeConcept(_Concept):
    """A subtype such as "goblin" together with the card type it belongs to."""

    kind: Literal[ConceptKind.subtype] = ConceptKind.subtype
    subtype: str
    category: SubtypeCategory


class PriceConstraint(_Concept):
    """A price bound in a single currency."""

    kind: Literal[ConceptKind.price] = ConceptKind.price
    min: float | None = None
    max: float | None = None
    currency: Currency = Currency.usd
    condition: PriceCondition | None = None

    @model_validator(mode="after")
    def validate_bounds(self) -> PriceConstraint:
        """Require at least one bound; both bounds must be non-negative."""

        if self.min is None and self.max is None:
            raise ValueError("price constraint requires min or max")
        for bound in (self.min, self.max):
            if bound is not None and bound < 0:
                raise ValueError("price bounds must be non-negative")
        return self


class FormatConcept(_Concept):
    """A play format such as "modern" or "commander"."""

    kind: Literal[ConceptKind.format] = ConceptKind.format
    name: str


class KeywordConcept(_Concept):
    """An evergreen keyword ability such as "flying"."""

    kind: Literal[ConceptKind.keyword] = ConceptKind.keyword
    keyword: str


class StatConcept(_Concept):
    """A numeric bound on mana value, power or toughness."""

    kind: Literal[ConceptKind.stat] = ConceptKind.stat
    stat: Stat
    value: int
    comparison: Comparison = "="


Concept = Annotated[
    ColorConcept
    | ArchetypeConcept
    | TypeConcept
    | SubtypeConcept
    | PriceConstraint
    | FormatConcept
    | KeywordConcept
    | StatConcept,
    Field(discriminator="kind"),
]


class ParsedQuery(BaseModel):
    """All concepts extracted from one input string.

    Insertion order follows extractor invocation order and carries no other meaning.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    original_text: str = ""
    colors: list[ColorConcept] = Field(default_factory=list)
    types: list[TypeConcept] = Field(default_factory=list)
    subtypes: list[SubtypeConcept] = Field(default_factory=list)
    archetypes: list[ArchetypeConcept] = Field(default_factory=list)
    prices: list[PriceConstraint] = Field(default_factory=list)
    formats: list[FormatConcept] = Field(default_factory=list)
    keywords: list[KeywordConcept] = Field(default_factory=list)
    stats: list[StatConcept] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    ambiguities: list[str] = Field(default_factory=list)

    def all_concepts(self) -> list[Concept]:
        """Return every concept in extractor order."""

        return [
            *self.colors,
            *self.types,
            *self.subtypes,
            *self.archetypes,
            *self.prices,
            *self.formats,
            *self.keywords,
            *self.stats,
        ]

    @property
    def is_empty(self) -> bool:
        return not self.all_concepts()


class OperatorMapping(BaseModel):
    """One DSL operator/value/comparison derived from one or more concepts.

    A combined value keeps its pieces in `parts`; `joiner` says how they render (`AND` as separate
    terms, `OR` as a parenthesized alternation). `value` always holds the display form.

    `comparisons`, when set, gives each part its own comparison: a price range renders as
    `usd>=5 usd<=20`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    operator: str
    value: str
    comparison: Comparison | None = None
    confidence: float = Field(ge=0.0)
    source: ConceptKind
    source_concept: Concept | None = None
    negated: bool = False
    parts: tuple[str, ...] = ()
    joiner: Literal["AND", "OR"] | None = None
    comparisons: tuple[Comparison, ...] = ()

    @model_validator(mode="after")
    def validate_parts(self) -> OperatorMapping:
        """Combined values need a joiner and at least one part; per-part comparisons must align."""

        if bool(self.parts) != bool(self.joiner):
            raise ValueError("parts and joiner must be set together")
        if self.comparisons and len(self.comparisons) != len(self.parts):
            raise ValueError("comparisons must align with parts")
        return self

    @property
    def values(self) -> tuple[str, ...]:
        return self.parts or (self.value,)

    @property
    def terms(self) -> tuple[tuple[Comparison | None, str], ...]:
        """`(comparison, value)` per rendered term."""

        if self.comparisons:
            return tuple(zip(self.comparisons, self.parts))
        return tuple((self.comparison, value) for value in self.values)
