"""Offline query builder.

The builder turns a `ParsedQuery` into a finished DSL query: map concepts, apply the caller's
format and budget overrides, apply an optimization strategy, explain the result in English, offer
alternatives and validate the output. Nothing here performs I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.nl.mapper import SOURCE_PRIORITY, ConceptMapper, format_number, render_mapping
from src.nl.schema import ConceptKind, OperatorMapping, ParsedQuery
from src.validation.schema import ValidationResult
from src.validation.validator import QueryValidator

logger = logging.getLogger(__name__)


class QueryBuilderError(ValueError):
    """Raised when build options cannot be applied."""


class OptimizeFor(StrEnum):
    precision = "precision"
    recall = "recall"
    discovery = "discovery"
    budget = "budget"


class OptimizationType(StrEnum):
    broadening = "broadening"
    narrowing = "narrowing"
    format_constraint = "format_constraint"
    price_constraint = "price_constraint"


class AlternativeType(StrEnum):
    format_restriction = "format_restriction"
    optimization = "optimization"


class BuildOptions(BaseModel):
    """Caller preferences for one build."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    optimize_for: OptimizeFor = OptimizeFor.precision
    format: str | None = None
    price_budget: float | None = Field(default=None, ge=0)
    max_results: int = Field(default=20, ge=1)


@dataclass(frozen=True)
class QueryOptimization:
    type: OptimizationType
    reason: str
    change: str


@dataclass(frozen=True)
class AlternativeQuery:
    query: str
    description: str
    type: AlternativeType
    confidence: float


@dataclass(frozen=True)
class BuildResult:
    """A finished query with its explanation, alternatives and validation report."""

    query: str
    explanation: str
    confidence: float
    alternatives: tuple[AlternativeQuery, ...]
    optimizations: tuple[QueryOptimization, ...]
    mappings: tuple[OperatorMapping, ...]
    validation: ValidationResult


PRECISION_FORMATS: tuple[str, ...] = ("standard", "modern", "commander")
PRECISION_PRICE_CAP = 50
BUDGET_PRICE_CAP = 5
DISCOVERY_PROPERTIES: tuple[str, ...] = ("unique", "reserved", "promo")
ALTERNATIVE_FORMATS: tuple[str, ...] = ("standard", "modern", "commander", "legacy")
MAX_ALTERNATIVES = 3

FORMAT_ALTERNATIVE_CONFIDENCE = 0.8
STRATEGY_ALTERNATIVE_CONFIDENCE = 0.7
UNOPTIMIZED_BONUS = 0.1
OPTIMIZATION_PENALTY = 0.05

RELATED_TYPES: dict[str, tuple[str, ...]] = {
    "creature": ("planeswalker",),
    "instant": ("sorcery",),
    "sorcery": ("instant",),
    "artifact": ("enchantment",),
    "enchantment": ("artifact",),
}

PRICE_OPERATORS = frozenset({"usd", "eur", "tix"})

COLOR_NAMES: dict[str, str] = {
    "w": "white",
    "u": "blue",
    "b": "black",
    "r": "red",
    "g": "green",
    "c": "colorless",
    "m": "multicolor",
}

STAT_LABELS: dict[str, str] = {"mv": "mana value", "pow": "power", "tou": "toughness"}


def _join_words(words: list[str], conjunction: str = "and") -> str:
    if len(words) <= 1:
        return "".join(words)
    return f"{', '.join(words[:-1])} {conjunction} {words[-1]}"


def _color_words(value: str) -> list[str]:
    if value in {"c", "m"}:
        return [COLOR_NAMES[value]]
    return [COLOR_NAMES.get(ch, ch) for ch in value]


def _explain_mapping(mapping: OperatorMapping) -> str | None:
    op = mapping.operator
    cmp = mapping.comparison
    conjunction = "or" if mapping.joiner == "OR" else "and"
    values = list(mapping.values)

    if op == "c":
        colors = _join_words(_color_words(mapping.value))
        if cmp == "=":
            return f"that are exactly {colors}"
        if cmp == ">=":
            return f"that include {colors}"
        return f"that are {colors}"
    if op == "t":
        types = _join_words(values, conjunction)
        return f"not of type {types}" if mapping.negated else f"of type {types}"
    if op == "function":
        return f"with {_join_words(values, conjunction)} effects"
    if op == "o":
        return f"mentioning {_join_words(values, conjunction)}"
    if op in PRICE_OPERATORS:
        symbol = "$" if op == "usd" else ("€" if op == "eur" else "")
        suffix = " tix" if op == "tix" else ""
        if mapping.comparisons:
            low, high = values[0], values[-1]
            return f"priced between {symbol}{low}{suffix} and {symbol}{high}{suffix}"
        return f"priced {cmp or '='} {symbol}{mapping.value}{suffix}"
    if op == "f":
        return f"legal in {_join_words(values, conjunction)}"
    if op in STAT_LABELS:
        return f"with {STAT_LABELS[op]} {cmp or '='} {mapping.value}"
    return None


def explain(mappings: list[OperatorMapping], optimize_for: OptimizeFor | None = None) -> str:
    """Describe the mapped constraints in one English sentence."""

    clauses = [c for m in mappings if (c := _explain_mapping(m)) is not None]
    sentence = "Searching for cards " + ", ".join(clauses) if clauses else "Searching for all cards"
    if optimize_for is not None:
        sentence += f" (optimized for {optimize_for})"
    return sentence


def _insert_ordered(mappings: list[OperatorMapping], mapping: OperatorMapping) -> list[OperatorMapping]:
    """Insert `mapping` after every mapping of equal or higher source priority."""

    rank = SOURCE_PRIORITY[mapping.source]
    for idx, existing in enumerate(mappings):
        if SOURCE_PRIORITY[existing.source] > rank:
            return [*mappings[:idx], mapping, *mappings[idx:]]
    return [*mappings, mapping]


def _override(mappings: list[OperatorMapping], mapping: OperatorMapping) -> list[OperatorMapping]:
    for idx, existing in enumerate(mappings):
        if existing.operator == mapping.operator:
            return [*mappings[:idx], mapping, *mappings[idx + 1:]]
    return _insert_ordered(mappings, mapping)


class QueryBuilder:
    """Assemble, optimize, explain and validate a query built from a `ParsedQuery`."""

    def __init__(self, mapper: ConceptMapper | None = None, validator: QueryValidator | None = None) -> None:
        self.mapper = mapper or ConceptMapper()
        self.validator = validator or QueryValidator(self.mapper.registry)

    def build(self, parsed: ParsedQuery, options: BuildOptions | None = None) -> BuildResult:
        """Build, explain and validate a query.

        Raises:
            QueryBuilderError: If the options are invalid, or if nothing searchable remains (no
                mappings and no strategy terms), since an empty query is not valid DSL.
        """

        options = options or BuildOptions()

        mappings = self.apply_overrides(self.mapper.extract_mappings(parsed), options)
        optimized, extras, optimizations = self.optimize(mappings, options.optimize_for)
        query = self.render(optimized, extras)
        if not query:
            raise QueryBuilderError(f"No searchable concepts in: {parsed.original_text!r}")

        validation = self.validator.validate(query)
        confidence = self._confidence(parsed, optimizations, validation)
        alternatives = self._alternatives(mappings, options, query)

        logger.info(
            "built strategy=%s mappings=%d optimizations=%d alternatives=%d is_valid=%s",
            options.optimize_for,
            len(optimized),
            len(optimizations),
            len(alternatives),
            validation.is_valid,
        )
        return BuildResult(
            query=query,
            explanation=explain(optimized, options.optimize_for),
            confidence=confidence,
            alternatives=tuple(alternatives),
            optimizations=tuple(optimizations),
            mappings=tuple(optimized),
            validation=validation,
        )

    def apply_overrides(self, mappings: list[OperatorMapping], options: BuildOptions) -> list[OperatorMapping]:
        """Force the caller's format and USD budget onto the mapped query.

        Raises:
            QueryBuilderError: If the format is not a known format.
        """

        if options.format:
            name = options.format.lower()
            if not self.mapper.registry.accepts("f", name):
                raise QueryBuilderError(f"Unknown format: {options.format}")
            mappings = _override(
                mappings,
                OperatorMapping(operator="f", value=name, confidence=1.0, source=ConceptKind.format),
            )

        if options.price_budget is not None:
            mappings = _override(
                mappings,
                OperatorMapping(
                    operator="usd",
                    value=format_number(options.price_budget),
                    comparison="<=",
                    confidence=1.0,
                    source=ConceptKind.price,
                ),
            )
        return mappings

    def optimize(
            self,
            mappings: list[OperatorMapping],
            strategy: OptimizeFor,
    ) -> tuple[list[OperatorMapping], list[str], list[QueryOptimization]]:
        """Apply one strategy; returns the mappings, extra rendered terms and what changed."""

        operators = {m.operator for m in mappings}
        has_price = bool(operators & PRICE_OPERATORS)
        extras: list[str] = []
        optimizations: list[QueryOptimization] = []

        if strategy == OptimizeFor.precision:
            if "f" not in operators:
                group = "(" + " OR ".join(f"f:{name}" for name in PRECISION_FORMATS) + ")"
                extras.append(group)
                optimizations.append(
                    QueryOptimization(OptimizationType.format_constraint, "No format specified", f"added {group}")
                )
            if not has_price:
                term = f"usd<={PRECISION_PRICE_CAP}"
                extras.append(term)
                optimizations.append(
                    QueryOptimization(OptimizationType.price_constraint, "No price specified", f"added {term}")
                )

        elif strategy == OptimizeFor.recall:
            mappings, optimizations = self._relax(mappings)

        elif strategy == OptimizeFor.discovery:
            if "is" not in operators:
                group = "(" + " OR ".join(f"is:{name}" for name in DISCOVERY_PROPERTIES) + ")"
                extras.append(group)
                optimizations.append(
                    QueryOptimization(OptimizationType.narrowing, "Favor unusual printings", f"added {group}")
                )

        elif strategy == OptimizeFor.budget:
            if not has_price:
                term = f"usd<={BUDGET_PRICE_CAP}"
                extras.append(term)
                optimizations.append(
                    QueryOptimization(OptimizationType.price_constraint, "Budget search", f"added {term}")
                )

        return mappings, extras, optimizations

    @staticmethod
    def _relax(mappings: list[OperatorMapping]) -> tuple[list[OperatorMapping], list[QueryOptimization]]:
        relaxed: list[OperatorMapping] = []
        optimizations: list[QueryOptimization] = []
        widened = False

        for mapping in mappings:
            if mapping.operator == "pow" and mapping.comparison == ">=" and mapping.value.isdigit():
                lowered = str(max(1, int(mapping.value) - 1))
                if lowered != mapping.value:
                    before = render_mapping(mapping)
                    mapping = mapping.model_copy(update={"value": lowered})
                    optimizations.append(
                        QueryOptimization(
                            OptimizationType.broadening,
                            "Relax power requirement",
                            f"{before} → {render_mapping(mapping)}",
                        )
                    )
            elif (
                    not widened
                    and mapping.operator == "t"
                    and not mapping.parts
                    and not mapping.negated
                    and mapping.value in RELATED_TYPES
            ):
                widened = True
                parts = (mapping.value, *RELATED_TYPES[mapping.value])
                before = render_mapping(mapping)
                mapping = mapping.model_copy(update={"value": " OR ".join(parts), "parts": parts, "joiner": "OR"})
                optimizations.append(
                    QueryOptimization(
                        OptimizationType.broadening,
                        "Include related card types",
                        f"{before} → {render_mapping(mapping)}",
                    )
                )
            relaxed.append(mapping)
        return relaxed, optimizations

    @staticmethod
    def render(mappings: list[OperatorMapping], extras: list[str] | None = None) -> str:
        return " ".join([*(render_mapping(m) for m in mappings), *(extras or [])])

    @staticmethod
    def _confidence(
            parsed: ParsedQuery,
            optimizations: list[QueryOptimization],
            validation: ValidationResult,
    ) -> float:
        if not validation.is_valid:
            return 0.0
        confidence = parsed.confidence
        if not optimizations:
            confidence += UNOPTIMIZED_BONUS
        confidence -= OPTIMIZATION_PENALTY * len(optimizations)
        return max(0.0, min(1.0, confidence))

    def _alternatives(
            self,
            mappings: list[OperatorMapping],
            options: BuildOptions,
            query: str,
    ) -> list[AlternativeQuery]:
        alternatives: list[AlternativeQuery] = []
        seen = {query}

        def add(candidate: AlternativeQuery) -> None:
            if candidate.query and candidate.query not in seen:
                seen.add(candidate.query)
                alternatives.append(candidate)

        base = self.render(mappings)
        if not any(m.operator == "f" for m in mappings):
            for name in ALTERNATIVE_FORMATS:
                add(
                    AlternativeQuery(
                        query=self.render(mappings, [f"f:{name}"]),
                        description=f"Same search restricted to {name}",
                        type=AlternativeType.format_restriction,
                        confidence=FORMAT_ALTERNATIVE_CONFIDENCE,
                    )
                )

        for strategy in OptimizeFor:
            if strategy == options.optimize_for:
                continue
            optimized, extras, _ = self.optimize(mappings, strategy)
            rendered = self.render(optimized, extras)
            if rendered == base:
                continue
            add(
                AlternativeQuery(
                    query=rendered,
                    description=f"Optimized for {strategy}",
                    type=AlternativeType.optimization,
                    confidence=STRATEGY_ALTERNATIVE_CONFIDENCE,
                )
            )

        return alternatives[:MAX_ALTERNATIVES]
