"""Play format extraction.

Direct format names ("modern"), phrasings ("legal in modern", "for edh") and indirect cues
("kitchen table", "100 card") all map to a `FormatConcept`. Single-word patterns match on word
boundaries; multi-word patterns use substring containment.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.nl.normalize import contains_word
from src.nl.schema import FormatConcept

FORMAT_NAMES: tuple[str, ...] = (
    "standard",
    "modern",
    "legacy",
    "vintage",
    "pioneer",
    "commander",
    "brawl",
    "pauper",
    "penny",
    "historic",
    "alchemy",
    "explorer",
    "timeless",
)


@dataclass(frozen=True)
class FormatTemplate:
    """A format phrase matched to a canonical format name and base confidence."""

    name: str
    confidence: float


def _phrasings(aliases: dict[str, str], template: str, confidence: float) -> dict[str, FormatTemplate]:
    return {
        template.format(alias): FormatTemplate(name=name, confidence=confidence)
        for alias, name in aliases.items()
    }


_DIRECT: dict[str, str] = {name: name for name in FORMAT_NAMES}

FORMAT_PATTERNS: dict[str, FormatTemplate] = {
    **_phrasings(_DIRECT, "{}", 0.95),
    "edh": FormatTemplate("commander", 0.98),
    **_phrasings(_DIRECT, "{} legal", 0.90),
    "edh legal": FormatTemplate("commander", 0.92),
    **_phrasings(_DIRECT, "in {}", 0.88),
    "in edh": FormatTemplate("commander", 0.90),
    **_phrasings(_DIRECT, "for {}", 0.85),
    "for edh": FormatTemplate("commander", 0.87),
    # Casual play.
    "casual": FormatTemplate("casual", 0.75),
    "kitchen table": FormatTemplate("casual", 0.80),
    "multiplayer": FormatTemplate("commander", 0.70),
    # Platforms.
    "arena": FormatTemplate("standard", 0.70),
    "mtg arena": FormatTemplate("standard", 0.72),
    "mtga": FormatTemplate("standard", 0.72),
    "mtgo": FormatTemplate("legacy", 0.60),
    "magic online": FormatTemplate("legacy", 0.60),
    # Competitive play.
    "competitive": FormatTemplate("modern", 0.60),
    "tournament": FormatTemplate("standard", 0.65),
    "fnm": FormatTemplate("standard", 0.70),
    "friday night magic": FormatTemplate("standard", 0.70),
    # Deck construction.
    "100 card": FormatTemplate("commander", 0.85),
    "100-card": FormatTemplate("commander", 0.85),
    "singleton": FormatTemplate("commander", 0.75),
    "highlander": FormatTemplate("commander", 0.80),
    # Power level.
    "high power": FormatTemplate("vintage", 0.60),
    "powered": FormatTemplate("vintage", 0.70),
    "unpowered": FormatTemplate("legacy", 0.65),
    "budget": FormatTemplate("pauper", 0.60),
}

EXPLICIT_FORMAT_THRESHOLD = 0.85


def _matches(text: str, pattern: str) -> bool:
    if " " not in pattern:
        return contains_word(text, pattern)
    return pattern in text


class FormatExtractor:
    """Extract format concepts from free text."""

    def __init__(self, patterns: dict[str, FormatTemplate] | None = None) -> None:
        self._patterns = dict(patterns if patterns is not None else FORMAT_PATTERNS)

    def extract(self, text: str) -> list[FormatConcept]:
        """Return one concept per format name, keeping the highest-confidence match."""

        lowered = (text or "").lower()
        best: dict[str, FormatConcept] = {}
        for pattern, template in self._patterns.items():
            if not _matches(lowered, pattern):
                continue
            existing = best.get(template.name)
            if existing is None or template.confidence > existing.confidence:
                best[template.name] = FormatConcept(name=template.name, confidence=template.confidence)
        return list(best.values())


def best_format(concepts: list[FormatConcept]) -> FormatConcept | None:
    """Return the most confident format, or `None` if there is none."""

    if not concepts:
        return None
    return max(concepts, key=lambda c: c.confidence)


def has_explicit_format(
        concepts: list[FormatConcept],
        threshold: float = EXPLICIT_FORMAT_THRESHOLD,
) -> bool:
    """Whether any format was named explicitly enough to trust."""

    return any(c.confidence >= threshold for c in concepts)
