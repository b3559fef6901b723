"""Natural-language query parser.

The parser runs every extractor over the same normalized text and collects the results into a
`ParsedQuery`. It does no cross-extractor reasoning; combining concepts into a search is the
mapper's job.
"""

from __future__ import annotations

import logging

from src.nl.archetypes import ArchetypeExtractor
from src.nl.card_types import TypeExtractor
from src.nl.colors import ColorExtractor
from src.nl.formats import FormatExtractor
from src.nl.mechanics import MechanicsExtractor
from src.nl.normalize import normalize_text
from src.nl.prices import PriceExtractor
from src.nl.schema import ParsedQuery

logger = logging.getLogger(__name__)


def overall_confidence(confidences: list[float]) -> float:
    """Weighted mean that favors confident concepts: `sum(c * c**1.5) / n`, clamped to 1."""

    if not confidences:
        return 0.0
    weighted = sum(c * c ** 1.5 for c in confidences)
    return min(1.0, weighted / len(confidences))


class NaturalLanguageParser:
    """Run all extractors over one input string."""

    def __init__(
            self,
            *,
            colors: ColorExtractor | None = None,
            types: TypeExtractor | None = None,
            archetypes: ArchetypeExtractor | None = None,
            prices: PriceExtractor | None = None,
            formats: FormatExtractor | None = None,
            mechanics: MechanicsExtractor | None = None,
    ) -> None:
        self.colors = colors or ColorExtractor()
        self.types = types or TypeExtractor()
        self.archetypes = archetypes or ArchetypeExtractor()
        self.prices = prices or PriceExtractor()
        self.formats = formats or FormatExtractor()
        self.mechanics = mechanics or MechanicsExtractor()

    def parse(self, text: str) -> ParsedQuery:
        """Parse free text into a `ParsedQuery`.

        Empty or whitespace-only input yields an empty query with confidence 0.
        """

        normalized = normalize_text(text)
        if not normalized:
            return ParsedQuery(original_text=text or "")

        colors = self.colors.extract(normalized)
        types = self.types.extract(normalized)
        subtypes = self.types.extract_subtypes(normalized)
        archetypes = self.archetypes.extract(normalized)
        prices = self.prices.extract(normalized)
        formats = self.formats.extract(normalized)
        keywords = self.mechanics.extract_keywords(normalized)
        stats = self.mechanics.extract_stats(normalized)

        ambiguities: list[str] = []
        if len(colors) > 1:
            ambiguities.append("multiple color interpretations")
        if len(formats) > 1:
            ambiguities.append("multiple formats mentioned")

        # Archetype confidence may exceed 1 after enhancement; the aggregate is clamped.
        confidences = [
            c.confidence
            for group in (colors, types, subtypes, archetypes, prices, formats, keywords, stats)
            for c in group
        ]

        parsed = ParsedQuery(
            original_text=text,
            colors=colors,
            types=types,
            subtypes=subtypes,
            archetypes=archetypes,
            prices=prices,
            formats=formats,
            keywords=keywords,
            stats=stats,
            confidence=overall_confidence(confidences),
            ambiguities=ambiguities,
        )
        logger.debug(
            "parsed colors=%d types=%d subtypes=%d archetypes=%d prices=%d formats=%d confidence=%.2f",
            len(colors),
            len(types),
            len(subtypes),
            len(archetypes),
            len(prices),
            len(formats),
            parsed.confidence,
        )
        return parsed
