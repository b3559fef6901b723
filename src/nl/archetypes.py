"""Deck archetype extraction.

Each archetype carries card-level constraints (mana value range, keywords, functions, card types)
that the mapper turns into low-confidence search hints.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.nl.schema import ArchetypeConcept, ArchetypeConstraints


@dataclass(frozen=True)
class ArchetypeDefinition:
    """Constraints and base confidence for one archetype."""

    constraints: ArchetypeConstraints
    confidence: float


ARCHETYPE_DEFINITIONS: dict[str, ArchetypeDefinition] = {
    "aggressive": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(1, 4),
            power_min=2,
            keywords=("haste", "trample", "first strike", "double strike"),
            functions=("burn", "direct damage"),
            card_types=("creature", "instant", "sorcery"),
        ),
        0.90,
    ),
    "aggro": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(1, 3),
            power_min=2,
            keywords=("haste", "prowess", "menace"),
            functions=("burn",),
            card_types=("creature",),
        ),
        0.92,
    ),
    "control": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(2, 8),
            keywords=("flash", "vigilance"),
            functions=("counterspell", "removal", "draw", "wipe"),
            card_types=("instant", "sorcery", "enchantment", "planeswalker"),
        ),
        0.88,
    ),
    "midrange": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(3, 6),
            power_min=2,
            functions=("removal", "value"),
            card_types=("creature", "planeswalker"),
        ),
        0.85,
    ),
    "combo": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("flash", "storm", "cascade"),
            functions=("tutor", "draw", "ritual"),
            card_types=("instant", "sorcery", "artifact", "enchantment"),
        ),
        0.80,
    ),
    "ramp": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("vigilance",),
            functions=("ramp", "mana acceleration"),
            card_types=("land", "artifact", "creature", "sorcery"),
        ),
        0.93,
    ),
    "tribal": ArchetypeDefinition(ArchetypeConstraints(card_types=("creature",)), 0.85),
    "tempo": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(1, 4),
            keywords=("flash", "prowess", "flying"),
            functions=("bounce", "counterspell"),
            card_types=("creature", "instant"),
        ),
        0.87,
    ),
    "burn": ArchetypeDefinition(
        ArchetypeConstraints(
            cmc_range=(1, 4),
            functions=("burn", "direct damage"),
            card_types=("instant", "sorcery", "creature"),
        ),
        0.90,
    ),
    "reanimator": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("flashback",),
            functions=("reanimation", "graveyard"),
            card_types=("sorcery", "instant", "creature"),
        ),
        0.88,
    ),
    "prison": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("static",),
            functions=("lock", "stax"),
            card_types=("artifact", "enchantment"),
        ),
        0.82,
    ),
    "storm": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("storm",),
            functions=("ritual", "draw"),
            card_types=("instant", "sorcery"),
        ),
        0.95,
    ),
    "voltron": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("hexproof", "shroud", "indestructible"),
            functions=("protection", "pump"),
            card_types=("equipment", "aura", "creature"),
        ),
        0.85,
    ),
    "tokens": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("convoke",),
            functions=("token generation",),
            card_types=("sorcery", "instant", "creature", "enchantment"),
        ),
        0.88,
    ),
    "aristocrats": ArchetypeDefinition(
        ArchetypeConstraints(
            keywords=("sacrifice",),
            functions=("sacrifice", "death triggers"),
            card_types=("creature", "enchantment"),
        ),
        0.86,
    ),
}

# Synonyms only count when the archetype's own name is absent. The sets overlap
# ("tempo" is both an archetype and an "aggressive" synonym) and both concepts are reported.
ARCHETYPE_SYNONYMS: dict[str, tuple[str, ...]] = {
    "aggressive": ("aggro", "fast", "beatdown", "rush", "tempo"),
    "control": ("controlling", "defensive", "reactive", "late game"),
    "midrange": ("midgame", "value", "grindy", "fair"),
    "combo": ("synergy", "engine", "infinite", "lock"),
    "ramp": ("acceleration", "big mana", "ramping", "fast mana"),
    "tribal": ("creature type", "synergy", "lord effects"),
    "tempo": ("pressure", "clock", "efficient"),
    "burn": ("direct damage", "face damage", "lightning"),
    "reanimator": ("graveyard", "resurrection", "cheat"),
    "prison": ("stax", "lock", "denial"),
    "storm": ("spell velocity", "ritual"),
    "voltron": ("equipment", "aura", "pump"),
    "tokens": ("go wide", "swarm", "army"),
    "aristocrats": ("sacrifice", "death", "blood artist"),
}

TRIBAL_CONFIDENCE_BOOST = 0.1


class ArchetypeExtractor:
    """Extract archetype concepts from free text."""

    def __init__(
            self,
            definitions: dict[str, ArchetypeDefinition] | None = None,
            synonyms: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._definitions = dict(definitions if definitions is not None else ARCHETYPE_DEFINITIONS)
        self._synonyms = dict(synonyms if synonyms is not None else ARCHETYPE_SYNONYMS)

    def _matches(self, text: str, name: str) -> bool:
        if name in text:
            return True
        return any(synonym in text for synonym in self._synonyms.get(name, ()))

    def extract(self, text: str) -> list[ArchetypeConcept]:
        """Return one concept per archetype named (or described by a synonym) in `text`."""

        lowered = (text or "").lower()
        return [
            ArchetypeConcept(
                name=name,
                constraints=definition.constraints,
                confidence=definition.confidence,
            )
            for name, definition in self._definitions.items()
            if self._matches(lowered, name)
        ]


def enhance_tribal(archetype: ArchetypeConcept, subtypes: list[str]) -> ArchetypeConcept:
    """Attach detected creature subtypes to a "tribal" archetype.

    Non-tribal archetypes, or an empty subtype list, are returned unchanged. The confidence boost
    is not clamped to 1.0.
    """

    if archetype.name != "tribal" or not subtypes:
        return archetype

    constraints = archetype.constraints.model_copy(update={"subtypes": tuple(subtypes)})
    return archetype.model_copy(
        update={
            "constraints": constraints,
            "confidence": archetype.confidence + TRIBAL_CONFIDENCE_BOOST,
        }
    )
