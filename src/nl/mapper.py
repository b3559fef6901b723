"""Concept to DSL operator mapping.

The mapper turns a `ParsedQuery` into at most one `OperatorMapping` per operator and renders the
mappings as a query string. Every rendered value is checked against the operator registry, so the
output of `to_query` always passes validation.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from src.nl.archetypes import enhance_tribal
from src.nl.card_types import PRIMARY_CARD_TYPES
from src.nl.schema import (
    ArchetypeConcept,
    ColorConcept,
    Comparison,
    ConceptKind,
    FormatConcept,
    KeywordConcept,
    OperatorMapping,
    ParsedQuery,
    PriceConstraint,
    Stat,
    StatConcept,
    SubtypeCategory,
    SubtypeConcept,
    TypeConcept,
)
from src.validation.registry import OperatorRegistry, default_registry

logger = logging.getLogger(__name__)


class ConceptMapperError(ValueError):
    """Raised when a mapping cannot be rendered as DSL."""


# Lower index wins ties.
SOURCE_PRIORITY: dict[ConceptKind, int] = {
    ConceptKind.color: 0,
    ConceptKind.type: 1,
    ConceptKind.subtype: 1,
    ConceptKind.price: 2,
    ConceptKind.format: 3,
    ConceptKind.keyword: 4,
    ConceptKind.stat: 4,
    ConceptKind.archetype: 5,
}

STAT_OPERATORS: dict[Stat, str] = {
    Stat.mana_value: "mv",
    Stat.power: "pow",
    Stat.toughness: "tou",
}

# Share of the archetype confidence each derived hint receives.
HINT_FACTORS: dict[str, float] = {
    "mv": 0.8,
    "pow": 0.7,
    "o": 0.6,
    "function": 0.8,
    "t": 0.9,
}

AND_MERGE_OPERATORS = frozenset({"t", "o", "function"})

_QUOTE_RE = re.compile(r"[\s()\"':<>=!]")
_COLOR_LETTERS = frozenset("wubrg")


def format_number(value: float) -> str:
    """Render a number without a trailing `.0`."""

    return str(int(value)) if float(value).is_integer() else str(value)


def quote(value: str) -> str:
    if not value or _QUOTE_RE.search(value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _single(
        operator: str,
        value: str,
        confidence: float,
        source: ConceptKind,
        concept: object | None = None,
        *,
        comparison: Comparison | None = None,
        negated: bool = False,
) -> OperatorMapping:
    return OperatorMapping(
        operator=operator,
        value=value,
        comparison=comparison,
        confidence=confidence,
        source=source,
        source_concept=concept,
        negated=negated,
    )


def _alternation(
        operator: str,
        values: Iterable[str],
        confidence: float,
        source: ConceptKind,
        concept: object | None = None,
        *,
        joiner: str = "OR",
) -> OperatorMapping:
    parts = tuple(dict.fromkeys(values))
    if len(parts) == 1:
        return _single(operator, parts[0], confidence, source, concept)
    return OperatorMapping(
        operator=operator,
        value=f" {joiner} ".join(parts),
        confidence=confidence,
        source=source,
        source_concept=concept,
        parts=parts,
        joiner=joiner,
    )


def render_mapping(mapping: OperatorMapping) -> str:
    """Render one mapping: a single term, an AND run of terms or a parenthesized OR group."""

    if not mapping.value:
        raise ConceptMapperError(f"mapping for '{mapping.operator}' has no value")

    prefix = "-" if mapping.negated else ""
    terms = [f"{prefix}{mapping.operator}{cmp or ':'}{quote(v)}" for cmp, v in mapping.terms]

    if mapping.joiner == "OR":
        return f"({' OR '.join(terms)})"
    return " ".join(terms)


class ConceptMapper:
    """Map parsed concepts to DSL operators, resolving conflicts per operator."""

    def __init__(self, registry: OperatorRegistry | None = None) -> None:
        self.registry = registry or default_registry()

    def extract_mappings(self, parsed: ParsedQuery) -> list[OperatorMapping]:
        """Return resolved mappings, at most one per operator, in rendering order."""

        creature_subtypes = [s.subtype for s in parsed.subtypes if s.category == SubtypeCategory.creature]

        candidates: list[OperatorMapping] = []
        candidates.extend(m for c in parsed.colors if (m := self._map_color(c)) is not None)
        candidates.extend(self._map_type(t) for t in parsed.types)
        candidates.extend(self._map_subtype(s) for s in parsed.subtypes)
        for price in parsed.prices:
            candidates.extend(self._map_price(price))
        candidates.extend(self._map_format(f) for f in parsed.formats)
        candidates.extend(self._map_keyword(k) for k in parsed.keywords)
        candidates.extend(self._map_stat(s) for s in parsed.stats)
        for archetype in parsed.archetypes:
            candidates.extend(self._map_archetype(enhance_tribal(archetype, creature_subtypes)))

        mappings = [self._resolve(group) for group in self._group(candidates)]
        accepted = [m for m in mappings if self._accepted(m)]
        logger.debug(
            "mapped candidates=%d mappings=%d dropped=%d",
            len(candidates),
            len(accepted),
            len(mappings) - len(accepted),
        )
        return accepted

    def to_query(self, mappings: Iterable[OperatorMapping]) -> str:
        """Render mappings as one DSL query.

        Raises:
            ConceptMapperError: If there is nothing to render. An empty query is not valid DSL, so
                text whose concepts all map to nothing (e.g. "kitchen table cards") is rejected
                here rather than producing an unusable query.
        """

        rendered = [render_mapping(m) for m in mappings]
        if not rendered:
            raise ConceptMapperError("no searchable concepts to render")
        return " ".join(rendered)

    # Concept translation.

    @staticmethod
    def _map_color(concept: ColorConcept) -> OperatorMapping | None:
        if concept.colorless:
            value = "c"
        elif concept.multicolor:
            value = "m"
        elif concept.colors:
            value = "".join(concept.colors)
        else:
            return None

        comparison: Comparison | None = None
        if concept.exact or concept.exclusive:
            comparison = "="
        elif concept.inclusive:
            comparison = ">="
        return _single("c", value, concept.confidence, ConceptKind.color, concept, comparison=comparison)

    @staticmethod
    def _map_type(concept: TypeConcept) -> OperatorMapping:
        if concept.function:
            return _single("function", concept.function, concept.confidence, ConceptKind.type, concept)
        if concept.supertype and not concept.type:
            return _single("t", concept.supertype, concept.confidence, ConceptKind.type, concept)

        type_ = concept.type or ""
        if " OR " in type_:
            return _alternation("t", type_.split(" OR "), concept.confidence, ConceptKind.type, concept)
        return _single(
            "t",
            type_,
            concept.confidence,
            ConceptKind.type,
            concept,
            negated=concept.negated,
        )

    @staticmethod
    def _map_subtype(concept: SubtypeConcept) -> OperatorMapping:
        return _single("t", concept.subtype, concept.confidence, ConceptKind.subtype, concept)

    @staticmethod
    def _map_price(concept: PriceConstraint) -> list[OperatorMapping]:
        operator = concept.currency.value
        if concept.min is not None and concept.min == concept.max:
            return [
                _single(
                    operator,
                    format_number(concept.min),
                    concept.confidence,
                    ConceptKind.price,
                    concept,
                    comparison="=",
                )
            ]

        if concept.min is not None and concept.max is not None:
            parts = (format_number(concept.min), format_number(concept.max))
            return [
                OperatorMapping(
                    operator=operator,
                    value=" AND ".join(parts),
                    confidence=concept.confidence,
                    source=ConceptKind.price,
                    source_concept=concept,
                    parts=parts,
                    joiner="AND",
                    comparisons=(">=", "<="),
                )
            ]

        if concept.max is not None:
            bound, comparison = concept.max, "<="
        else:
            bound, comparison = concept.min, ">="
        return [
            _single(
                operator,
                format_number(bound),
                concept.confidence,
                ConceptKind.price,
                concept,
                comparison=comparison,
            )
        ]

    @staticmethod
    def _map_format(concept: FormatConcept) -> OperatorMapping:
        return _single("f", concept.name, concept.confidence, ConceptKind.format, concept)

    @staticmethod
    def _map_keyword(concept: KeywordConcept) -> OperatorMapping:
        return _single("o", concept.keyword, concept.confidence, ConceptKind.keyword, concept)

    @staticmethod
    def _map_stat(concept: StatConcept) -> OperatorMapping:
        return _single(
            STAT_OPERATORS[concept.stat],
            str(concept.value),
            concept.confidence,
            ConceptKind.stat,
            concept,
            comparison=concept.comparison,
        )

    @staticmethod
    def _map_archetype(concept: ArchetypeConcept) -> list[OperatorMapping]:
        constraints = concept.constraints
        source = ConceptKind.archetype

        def confidence(operator: str) -> float:
            return concept.confidence * HINT_FACTORS[operator]

        hints: list[OperatorMapping] = []
        if constraints.cmc_range is not None:
            hints.append(
                _single(
                    "mv",
                    str(constraints.cmc_range[1]),
                    confidence("mv"),
                    source,
                    concept,
                    comparison="<=",
                )
            )
        if constraints.power_min is not None:
            hints.append(
                _single("pow", str(constraints.power_min), confidence("pow"), source, concept, comparison=">=")
            )
        if constraints.keywords:
            hints.append(_alternation("o", constraints.keywords, confidence("o"), source, concept))
        if constraints.functions:
            hints.append(_alternation("function", constraints.functions, confidence("function"), source, concept))
        if constraints.subtypes:
            hints.append(_alternation("t", constraints.subtypes, confidence("t"), source, concept, joiner="AND"))
        elif constraints.card_types:
            hints.append(_alternation("t", constraints.card_types, confidence("t"), source, concept))
        return hints

    # Conflict resolution.

    @staticmethod
    def _group(candidates: list[OperatorMapping]) -> list[list[OperatorMapping]]:
        groups: dict[str, list[OperatorMapping]] = {}
        for mapping in candidates:
            groups.setdefault(mapping.operator, []).append(mapping)
        return list(groups.values())

    def _resolve(self, group: list[OperatorMapping]) -> OperatorMapping:
        if len(group) == 1:
            return group[0]

        operator = group[0].operator
        if operator == "c" and all(self._is_letter_set(m) for m in group):
            return self._merge_colors(group)
        if operator in AND_MERGE_OPERATORS and self._and_combinable(group):
            return self._merge_parts(group)
        return self._best(group)

    @staticmethod
    def _best(group: list[OperatorMapping]) -> OperatorMapping:
        # min() keeps the first of equal keys, so emission order breaks the final tie.
        return min(group, key=lambda m: (-m.confidence, SOURCE_PRIORITY[m.source]))

    @staticmethod
    def _is_letter_set(mapping: OperatorMapping) -> bool:
        return (
                not mapping.negated
                and not mapping.parts
                and mapping.value not in {"c", "m"}
                and set(mapping.value) <= _COLOR_LETTERS
        )

    def _merge_colors(self, group: list[OperatorMapping]) -> OperatorMapping:
        best = self._best(group)
        letters = {ch for m in group for ch in m.value}
        value = "".join(ch for ch in "wubrg" if ch in letters)
        return best.model_copy(update={"value": value})

    @staticmethod
    def _and_combinable(group: list[OperatorMapping]) -> bool:
        if any(m.negated or m.joiner == "OR" for m in group):
            return False
        values = {v for m in group for v in m.values}
        return len(values & PRIMARY_CARD_TYPES) <= 1

    def _merge_parts(self, group: list[OperatorMapping]) -> OperatorMapping:
        best = self._best(group)
        parts = tuple(dict.fromkeys(v for m in group for v in m.values))
        if len(parts) == 1:
            return best.model_copy(update={"value": parts[0], "parts": (), "joiner": None})
        return best.model_copy(update={"value": " AND ".join(parts), "parts": parts, "joiner": "AND"})

    def _accepted(self, mapping: OperatorMapping) -> bool:
        for comparison, value in mapping.terms:
            if not self.registry.accepts(mapping.operator, value, comparison):
                logger.debug("dropped mapping operator=%s value=%s", mapping.operator, value)
                return False
        return True
