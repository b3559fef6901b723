"""Typo-tolerant matching for operator names and enumerated values."""

from __future__ import annotations

from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

DEFAULT_MAX_DISTANCE = 2
DEFAULT_LIMIT = 3


def closest_matches(
        query: str,
        candidates: Iterable[str],
        *,
        max_distance: int = DEFAULT_MAX_DISTANCE,
        limit: int = DEFAULT_LIMIT,
) -> list[str]:
    """Return up to `limit` candidates within `max_distance` edits of `query`.

    Matching is case-insensitive. Results are ordered by ascending edit distance; ties keep the
    candidates' input order. An exact match is never returned (there is nothing to correct).
    """

    needle = query.lower().strip()
    scored: list[tuple[int, int, str]] = []
    seen: set[str] = set()

    for order, candidate in enumerate(candidates):
        lowered = candidate.lower()
        if lowered in seen or lowered == needle:
            continue
        seen.add(lowered)

        # Skip if the length difference alone exceeds the budget.
        if abs(len(needle) - len(lowered)) > max_distance:
            continue

        distance = Levenshtein.distance(needle, lowered, score_cutoff=max_distance)
        if distance <= max_distance:
            scored.append((distance, order, candidate))

    scored.sort()
    return [candidate for _distance, _order, candidate in scored[:limit]]
