"""Card type, supertype, functional grouping and subtype extraction."""

from __future__ import annotations

from dataclasses import dataclass

from src.nl.normalize import context_window
from src.nl.schema import SubtypeCategory, SubtypeConcept, TypeConcept

PRIMARY_CARD_TYPES: frozenset[str] = frozenset(
    {"creature", "instant", "sorcery", "artifact", "enchantment", "planeswalker", "land", "battle"}
)


@dataclass(frozen=True)
class TypeTemplate:
    """A type phrase matched to a `TypeConcept` template."""

    confidence: float
    type: str | None = None
    supertype: str | None = None
    function: str | None = None
    negated: bool = False


def _card_type(name: str) -> TypeTemplate:
    return TypeTemplate(confidence=0.98, type=name)


TYPE_PATTERNS: dict[str, TypeTemplate] = {
    # Primary types.
    "creature": _card_type("creature"),
    "creatures": _card_type("creature"),
    "instant": _card_type("instant"),
    "instants": _card_type("instant"),
    "sorcery": _card_type("sorcery"),
    "sorceries": _card_type("sorcery"),
    "artifact": _card_type("artifact"),
    "artifacts": _card_type("artifact"),
    "enchantment": _card_type("enchantment"),
    "enchantments": _card_type("enchantment"),
    "planeswalker": _card_type("planeswalker"),
    "planeswalkers": _card_type("planeswalker"),
    "land": _card_type("land"),
    "lands": _card_type("land"),
    "battle": _card_type("battle"),
    "battles": _card_type("battle"),
    # Common umbrella terms.
    "spell": TypeTemplate(0.85, type="instant OR sorcery"),
    "spells": TypeTemplate(0.85, type="instant OR sorcery"),
    "permanent": TypeTemplate(0.80, type="creature OR artifact OR enchantment OR planeswalker OR land"),
    "permanents": TypeTemplate(0.80, type="creature OR artifact OR enchantment OR planeswalker OR land"),
    "nonland": TypeTemplate(0.85, type="land", negated=True),
    "non-land": TypeTemplate(0.85, type="land", negated=True),
    "noncreature": TypeTemplate(0.85, type="creature", negated=True),
    "non-creature": TypeTemplate(0.85, type="creature", negated=True),
    # Supertypes.
    "legendary": TypeTemplate(0.95, supertype="legendary"),
    "basic": TypeTemplate(0.95, supertype="basic"),
    "snow": TypeTemplate(0.95, supertype="snow"),
    "world": TypeTemplate(0.95, supertype="world"),
    # Functional groupings.
    "removal": TypeTemplate(0.88, function="removal"),
    "counterspell": TypeTemplate(0.90, function="counterspell"),
    "counterspells": TypeTemplate(0.90, function="counterspell"),
    "draw": TypeTemplate(0.85, function="draw"),
    "card draw": TypeTemplate(0.88, function="draw"),
    "ramp": TypeTemplate(0.90, function="ramp"),
    "mana ramp": TypeTemplate(0.92, function="ramp"),
    "tutor": TypeTemplate(0.88, function="tutor"),
    "tutors": TypeTemplate(0.88, function="tutor"),
    "wipe": TypeTemplate(0.85, function="wipe"),
    "board wipe": TypeTemplate(0.90, function="wipe"),
    "sweeper": TypeTemplate(0.88, function="wipe"),
}


@dataclass(frozen=True)
class SubtypeTemplate:
    """A subtype phrase matched to its canonical subtype and category."""

    subtype: str
    category: SubtypeCategory
    confidence: float


def _subtypes(
        category: SubtypeCategory,
        confidence: float,
        entries: dict[str, tuple[str, ...]],
) -> dict[str, SubtypeTemplate]:
    return {
        phrase: SubtypeTemplate(subtype=subtype, category=category, confidence=confidence)
        for subtype, phrases in entries.items()
        for phrase in phrases
    }


SUBTYPE_PATTERNS: dict[str, SubtypeTemplate] = {
    **_subtypes(SubtypeCategory.creature, 0.90, {"human": ("human", "humans")}),
    **_subtypes(
        SubtypeCategory.creature,
        0.95,
        {
            "elf": ("elf", "elves"),
            "goblin": ("goblin", "goblins"),
            "zombie": ("zombie", "zombies"),
            "dragon": ("dragon", "dragons"),
            "angel": ("angel", "angels"),
            "demon": ("demon", "demons"),
        },
    ),
    **_subtypes(
        SubtypeCategory.creature,
        0.90,
        {
            "wizard": ("wizard", "wizards"),
            "warrior": ("warrior", "warriors"),
            "knight": ("knight", "knights"),
            "beast": ("beast", "beasts"),
            "spirit": ("spirit", "spirits"),
            "elemental": ("elemental", "elementals"),
        },
    ),
    **_subtypes(
        SubtypeCategory.artifact,
        0.95,
        {
            "equipment": ("equipment",),
            "vehicle": ("vehicle", "vehicles"),
            "treasure": ("treasure", "treasures"),
            "food": ("food",),
            "clue": ("clue", "clues"),
        },
    ),
    **_subtypes(
        SubtypeCategory.land,
        0.90,
        {
            "mountain": ("mountain", "mountains"),
            "island": ("island", "islands"),
            "forest": ("forest", "forests"),
            "plains": ("plains",),
            "swamp": ("swamp", "swamps"),
        },
    ),
    **_subtypes(
        SubtypeCategory.enchantment,
        0.95,
        {
            "aura": ("aura", "auras"),
            "saga": ("saga", "sagas"),
        },
    ),
}

_CONTEXT_WORDS = 3


def deduplicate_types(concepts: list[TypeConcept]) -> list[TypeConcept]:
    """Keep the first concept per type/supertype/function key."""

    seen: set[str] = set()
    uniq: list[TypeConcept] = []
    for concept in concepts:
        key = concept.dedup_key
        if key in seen:
            continue
        seen.add(key)
        uniq.append(concept)
    return uniq


class TypeExtractor:
    """Extract card types, supertypes, functional groupings and subtypes from free text."""

    def __init__(
            self,
            patterns: dict[str, TypeTemplate] | None = None,
            subtype_patterns: dict[str, SubtypeTemplate] | None = None,
    ) -> None:
        self._patterns = dict(patterns if patterns is not None else TYPE_PATTERNS)
        self._subtype_patterns = dict(
            subtype_patterns if subtype_patterns is not None else SUBTYPE_PATTERNS
        )

    def extract(self, text: str) -> list[TypeConcept]:
        """Return type concepts with a short context window around each match."""

        lowered = (text or "").lower()
        concepts = [
            TypeConcept(
                type=template.type,
                supertype=template.supertype,
                function=template.function,
                negated=template.negated,
                confidence=template.confidence,
                context=context_window(lowered, phrase, _CONTEXT_WORDS),
            )
            for phrase, template in self._patterns.items()
            if phrase in lowered
        ]
        return deduplicate_types(concepts)

    def extract_subtypes(self, text: str) -> list[SubtypeConcept]:
        """Return one concept per subtype phrase found in `text`."""

        lowered = (text or "").lower()
        return [
            SubtypeConcept(
                subtype=template.subtype,
                category=template.category,
                confidence=template.confidence,
            )
            for phrase, template in self._subtype_patterns.items()
            if phrase in lowered
        ]
