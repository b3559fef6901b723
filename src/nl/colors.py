"""Color concept extraction.

Color words, guild/shard/wedge names and a few special terms ("colorless", "rainbow") map to
`ColorConcept` templates. Matching is plain substring containment over the whole text, so "red"
also fires inside longer words; the mapper resolves what survives.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.nl.normalize import contains_word, context_window
from src.nl.schema import ColorCode, ColorConcept, sort_colors

W, U, B, R, G = ColorCode.w, ColorCode.u, ColorCode.b, ColorCode.r, ColorCode.g


@dataclass(frozen=True)
class ColorTemplate:
    """A color phrase matched to a concept template and base confidence."""

    colors: tuple[ColorCode, ...]
    confidence: float
    exact: bool = False
    multicolor: bool = False
    colorless: bool = False


COLOR_PATTERNS: dict[str, ColorTemplate] = {
    # Basic colors.
    "red": ColorTemplate((R,), 0.95),
    "blue": ColorTemplate((U,), 0.95),
    "white": ColorTemplate((W,), 0.95),
    "black": ColorTemplate((B,), 0.95),
    "green": ColorTemplate((G,), 0.95),
    # Guilds.
    "azorius": ColorTemplate((W, U), 0.98, exact=True),
    "dimir": ColorTemplate((U, B), 0.98, exact=True),
    "rakdos": ColorTemplate((B, R), 0.98, exact=True),
    "gruul": ColorTemplate((R, G), 0.98, exact=True),
    "selesnya": ColorTemplate((G, W), 0.98, exact=True),
    "orzhov": ColorTemplate((W, B), 0.98, exact=True),
    "izzet": ColorTemplate((U, R), 0.98, exact=True),
    "golgari": ColorTemplate((B, G), 0.98, exact=True),
    "boros": ColorTemplate((R, W), 0.98, exact=True),
    "simic": ColorTemplate((G, U), 0.98, exact=True),
    # Shards.
    "bant": ColorTemplate((G, W, U), 0.98, exact=True),
    "esper": ColorTemplate((W, U, B), 0.98, exact=True),
    "grixis": ColorTemplate((U, B, R), 0.98, exact=True),
    "jund": ColorTemplate((B, R, G), 0.98, exact=True),
    "naya": ColorTemplate((R, G, W), 0.98, exact=True),
    # Wedges.
    "abzan": ColorTemplate((W, B, G), 0.98, exact=True),
    "jeskai": ColorTemplate((U, R, W), 0.98, exact=True),
    "sultai": ColorTemplate((B, G, U), 0.98, exact=True),
    "mardu": ColorTemplate((R, W, B), 0.98, exact=True),
    "temur": ColorTemplate((G, U, R), 0.98, exact=True),
    # Special combinations.
    "multicolor": ColorTemplate((), 0.90, multicolor=True),
    "multicolored": ColorTemplate((), 0.90, multicolor=True),
    "colorless": ColorTemplate((), 0.95, colorless=True),
    "rainbow": ColorTemplate((W, U, B, R, G), 0.85),
    "five-color": ColorTemplate((W, U, B, R, G), 0.90),
    "five color": ColorTemplate((W, U, B, R, G), 0.90),
    # Mono-colored.
    "mono-red": ColorTemplate((R,), 0.92, exact=True),
    "mono-blue": ColorTemplate((U,), 0.92, exact=True),
    "mono-white": ColorTemplate((W,), 0.92, exact=True),
    "mono-black": ColorTemplate((B,), 0.92, exact=True),
    "mono-green": ColorTemplate((G,), 0.92, exact=True),
    "mono red": ColorTemplate((R,), 0.92, exact=True),
    "mono blue": ColorTemplate((U,), 0.92, exact=True),
    "mono white": ColorTemplate((W,), 0.92, exact=True),
    "mono black": ColorTemplate((B,), 0.92, exact=True),
    "mono green": ColorTemplate((G,), 0.92, exact=True),
}

INCLUSIVE_INDICATORS: tuple[str, ...] = ("or", "any", "either", "include", "containing")
EXCLUSIVE_INDICATORS: tuple[str, ...] = ("only", "just", "exactly", "purely", "solely", "mono")

_CONTEXT_WORDS = 5


def _has_indicator(text: str, phrase: str, indicators: tuple[str, ...]) -> bool:
    window = context_window(text, phrase, _CONTEXT_WORDS)
    return any(contains_word(window, indicator) for indicator in indicators)


def _can_merge(a: ColorConcept, b: ColorConcept) -> bool:
    has_overlap = bool(set(a.colors) & set(b.colors))
    compatible_flags = a.multicolor == b.multicolor and a.colorless == b.colorless
    return has_overlap or compatible_flags


def _merge(a: ColorConcept, b: ColorConcept) -> ColorConcept:
    return ColorConcept(
        colors=sort_colors((*a.colors, *b.colors)),
        exact=a.exact and b.exact,
        inclusive=a.inclusive or b.inclusive,
        exclusive=a.exclusive or b.exclusive,
        multicolor=a.multicolor or b.multicolor,
        colorless=a.colorless or b.colorless,
        confidence=max(a.confidence, b.confidence),
    )


def merge_color_concepts(concepts: list[ColorConcept]) -> list[ColorConcept]:
    """Greedily merge compatible color concepts, keeping the first concept's position."""

    merged: list[ColorConcept] = []
    processed: set[int] = set()
    for i, concept in enumerate(concepts):
        if i in processed:
            continue
        current = concept
        for j in range(i + 1, len(concepts)):
            if j in processed:
                continue
            if _can_merge(current, concepts[j]):
                current = _merge(current, concepts[j])
                processed.add(j)
        merged.append(current)
        processed.add(i)
    return merged


class ColorExtractor:
    """Extract color concepts from free text."""

    def __init__(self, patterns: dict[str, ColorTemplate] | None = None) -> None:
        self._patterns = dict(patterns if patterns is not None else COLOR_PATTERNS)

    def extract(self, text: str) -> list[ColorConcept]:
        """Return merged color concepts for every color phrase in `text`."""

        lowered = (text or "").lower()
        concepts: list[ColorConcept] = []
        for phrase, template in self._patterns.items():
            if phrase not in lowered:
                continue
            concepts.append(
                ColorConcept(
                    colors=template.colors,
                    exact=template.exact,
                    inclusive=_has_indicator(lowered, phrase, INCLUSIVE_INDICATORS),
                    exclusive=_has_indicator(lowered, phrase, EXCLUSIVE_INDICATORS),
                    multicolor=template.multicolor,
                    colorless=template.colorless,
                    confidence=template.confidence,
                )
            )
        return merge_color_concepts(concepts)
