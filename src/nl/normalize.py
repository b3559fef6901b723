"""Text normalization for deterministic concept extraction."""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"[^\w\s$€./-]+")
_MULTISPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize user text for vocabulary matching.

    Normalization is intentionally conservative:
        - Lowercase.
        - Replace punctuation with spaces, keeping `$`, `€`, `.`, `/` and `-` (prices, stats and
          hyphenated phrases such as "mono-red").
        - Collapse whitespace.
    """

    value = (text or "").strip().lower()

    # Normalize common unicode dashes to ASCII hyphen.
    value = value.replace("—", "-").replace("–", "-")

    value = _NON_WORD_RE.sub(" ", value)
    value = _MULTISPACE_RE.sub(" ", value).strip()
    return value


def context_window(text: str, phrase: str, word_count: int) -> str:
    """Return up to `word_count` words on either side of the first word containing `phrase`.

    Returns an empty string if the phrase does not occur in the text.
    """

    lowered = text.lower()
    if phrase.lower() not in lowered:
        return ""

    words = text.split()
    phrase_words = phrase.lower().split()
    start_idx = next(
        (idx for idx, word in enumerate(words) if phrase_words[0] in word.lower()),
        None,
    )
    if start_idx is None:
        return ""

    start = max(0, start_idx - word_count)
    end = min(len(words), start_idx + len(phrase_words) + word_count)
    return " ".join(words[start:end])


def contains_word(text: str, word: str) -> bool:
    """Whether `word` occurs in `text` on word boundaries (case-insensitive)."""

    return re.search(rf"\b{re.escape(word)}\b", text, flags=re.IGNORECASE) is not None
