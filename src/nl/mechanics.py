"""Keyword ability and numeric stat extraction ("flying", "cmc 3 or less", "power 4", "2/2")."""

from __future__ import annotations

import re

from src.nl.normalize import contains_word
from src.nl.schema import Comparison, KeywordConcept, Stat, StatConcept

KEYWORDS: tuple[str, ...] = (
    "flying",
    "trample",
    "haste",
    "vigilance",
    "lifelink",
    "deathtouch",
    "first strike",
    "double strike",
    "flash",
    "menace",
    "reach",
    "hexproof",
    "indestructible",
)

KEYWORD_CONFIDENCE = 0.85
MANA_VALUE_CONFIDENCE = 0.80
POWER_TOUGHNESS_CONFIDENCE = 0.85

_SUFFIX = r"(?:\s+or\s+(?P<suffix>less|fewer|lower|more|greater|higher))?"

SUFFIX_COMPARISONS: dict[str, Comparison] = {
    "less": "<=",
    "fewer": "<=",
    "lower": "<=",
    "more": ">=",
    "greater": ">=",
    "higher": ">=",
}

STAT_PATTERNS: tuple[tuple[Stat, re.Pattern[str], float], ...] = (
    (
        Stat.mana_value,
        re.compile(rf"\b(?:cmc|mv|mana\s+value|converted\s+mana\s+cost)\s*(?:of\s+)?(?P<value>\d+){_SUFFIX}"),
        MANA_VALUE_CONFIDENCE,
    ),
    (
        Stat.mana_value,
        re.compile(rf"\b(?P<value>\d+)\s+mana\b{_SUFFIX}"),
        MANA_VALUE_CONFIDENCE,
    ),
    (
        Stat.power,
        re.compile(rf"\bpower\s*(?:of\s+)?(?P<value>\d+){_SUFFIX}"),
        POWER_TOUGHNESS_CONFIDENCE,
    ),
    (
        Stat.toughness,
        re.compile(rf"\btoughness\s*(?:of\s+)?(?P<value>\d+){_SUFFIX}"),
        POWER_TOUGHNESS_CONFIDENCE,
    ),
)

_POWER_TOUGHNESS_RE = re.compile(r"\b(?P<power>\d+)/(?P<toughness>\d+)\b")


class MechanicsExtractor:
    """Extract keyword abilities and mana value / power / toughness bounds."""

    def __init__(self, keywords: tuple[str, ...] | None = None) -> None:
        self._keywords = tuple(keywords if keywords is not None else KEYWORDS)

    def extract_keywords(self, text: str) -> list[KeywordConcept]:
        lowered = (text or "").lower()
        return [
            KeywordConcept(keyword=keyword, confidence=KEYWORD_CONFIDENCE)
            for keyword in self._keywords
            if contains_word(lowered, keyword)
        ]

    def extract_stats(self, text: str) -> list[StatConcept]:
        """Return numeric bounds, keeping the first match per stat."""

        lowered = (text or "").lower()
        found: dict[Stat, StatConcept] = {}

        for stat, pattern, confidence in STAT_PATTERNS:
            if stat in found:
                continue
            match = pattern.search(lowered)
            if not match:
                continue
            suffix = match.group("suffix")
            found[stat] = StatConcept(
                stat=stat,
                value=int(match.group("value")),
                comparison=SUFFIX_COMPARISONS[suffix] if suffix else "=",
                confidence=confidence,
            )

        pt = _POWER_TOUGHNESS_RE.search(lowered)
        if pt:
            for stat, group in ((Stat.power, "power"), (Stat.toughness, "toughness")):
                found.setdefault(
                    stat,
                    StatConcept(
                        stat=stat,
                        value=int(pt.group(group)),
                        confidence=POWER_TOUGHNESS_CONFIDENCE,
                    ),
                )

        return list(found.values())
