"""Correction and refinement suggestions.

Every suggestion carries a complete rewritten query, not a patch. Fixes are computed from the
finding's span in the original text, so each suggestion corrects exactly one finding.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from src.validation.registry import OperatorRegistry
from src.validation.schema import (
    Finding,
    OperatorToken,
    Suggestion,
    SuggestionConfidence,
    SuggestionImpact,
    SuggestionType,
    ValidationCode,
)
from src.validation.tokenizer import tokenize

logger = logging.getLogger(__name__)

DEFAULT_REFINEMENT_THRESHOLD = 100

# Optional `-`, operator name, comparison.
_OPERATOR_HEAD_RE = re.compile(r"(?P<neg>-?)(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<cmp>>=|<=|!=|:|=|<|>)")
_NEEDS_QUOTES_RE = re.compile(r"[\s()\"']")

SYMBOLIC_BOOLEANS = {"&&": "AND", "||": "OR"}

_REMOVABLE_BOOLEAN_CODES = frozenset(
    {
        ValidationCode.boolean_at_start,
        ValidationCode.boolean_at_end,
        ValidationCode.orphaned_boolean,
    }
)

_VALUE_CODES = frozenset(
    {
        ValidationCode.invalid_color,
        ValidationCode.invalid_number,
        ValidationCode.invalid_set_code,
        ValidationCode.invalid_rarity,
        ValidationCode.invalid_format,
        ValidationCode.invalid_enum_value,
        ValidationCode.invalid_power_toughness,
        ValidationCode.invalid_loyalty,
        ValidationCode.invalid_mana_cost,
        ValidationCode.invalid_year,
    }
)

# Canonical operators dropped, one group at a time, to broaden a query with no results.
BROADEN_GROUPS: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"set"}), "Remove the set restriction"),
    (frozenset({"manavalue"}), "Remove the mana value constraint"),
    (frozenset({"format", "banned", "restricted"}), "Remove the format restriction"),
)


def remove_span(query: str, start: int, end: int) -> str:
    """Cut `query[start:end]` and rejoin the remainder with a single space where needed."""

    before = query[:start].rstrip()
    after = query[end:].lstrip()
    if not before or not after or before.endswith("(") or after.startswith(")"):
        return before + after
    return f"{before} {after}"


def replace_span(query: str, start: int, end: int, replacement: str) -> str:
    return query[:start] + replacement + query[end:]


def quote_value(value: str) -> str:
    if _NEEDS_QUOTES_RE.search(value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _suggestion(
        type_: SuggestionType,
        description: str,
        query: str,
        *,
        confidence: SuggestionConfidence = SuggestionConfidence.high,
        impact: SuggestionImpact = SuggestionImpact.fixes_error,
) -> Suggestion:
    return Suggestion(
        type=type_,
        description=description,
        suggested_query=query,
        confidence=confidence,
        impact=impact,
    )


class SuggestionEngine:
    """Turns validation findings into corrected queries and proposes result-count refinements."""

    def __init__(
            self,
            registry: OperatorRegistry,
            *,
            refinement_threshold: int = DEFAULT_REFINEMENT_THRESHOLD,
    ) -> None:
        self._registry = registry
        self._refinement_threshold = refinement_threshold
        self._fixers: dict[ValidationCode, Callable[[Finding, str, list[Finding]], Suggestion | None]] = {
            ValidationCode.unmatched_opening_paren: self._close_parens,
            ValidationCode.unmatched_closing_paren: self._drop_closing_paren,
            ValidationCode.unknown_operator: self._rename_operator,
            ValidationCode.unclosed_quote: self._close_quote,
            ValidationCode.consecutive_boolean: self._drop_second_boolean,
            ValidationCode.empty_parentheses: self._drop_empty_parens,
            ValidationCode.trailing_open_paren: self._drop_trailing_paren,
            ValidationCode.comparison_not_supported: self._use_colon,
            ValidationCode.comparison_not_allowed: self._use_negation,
            ValidationCode.symbolic_boolean: self._spell_boolean,
        }
        for code in _REMOVABLE_BOOLEAN_CODES:
            self._fixers[code] = self._drop_boolean
        for code in _VALUE_CODES:
            self._fixers[code] = self._replace_value

    def generate_suggestions(self, findings: Iterable[Finding], original_query: str) -> list[Suggestion]:
        """Render one corrected query per fixable finding, deduplicated by query text."""

        findings = list(findings)
        suggestions: list[Suggestion] = []
        seen: set[str] = {original_query}

        for finding in findings:
            fixer = self._fixers.get(finding.code)
            if fixer is None or finding.position is None:
                continue
            suggestion = fixer(finding, original_query, findings)
            if suggestion is None or suggestion.suggested_query in seen:
                continue
            seen.add(suggestion.suggested_query)
            suggestions.append(suggestion)

        logger.debug("suggestions findings=%d suggestions=%d", len(findings), len(suggestions))
        return suggestions

    def generate_refinement_suggestions(self, query: str, result_count: int) -> list[Suggestion]:
        """Broaden a query with no results, or narrow one above the result threshold."""

        if result_count == 0:
            return self._broaden(query)
        if result_count > self._refinement_threshold:
            return self._narrow(query)
        return []

    # Fix templates.

    def _close_parens(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        missing = sum(1 for f in findings if f.code == ValidationCode.unmatched_opening_paren)
        noun = "parenthesis" if missing == 1 else "parentheses"
        return _suggestion(
            SuggestionType.addition,
            f"Add {missing} missing closing {noun}",
            query.rstrip() + ")" * missing,
        )

    def _drop_closing_paren(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        start = finding.position or 0
        return _suggestion(
            SuggestionType.removal,
            "Remove the extra closing parenthesis",
            remove_span(query, start, start + 1),
        )

    def _rename_operator(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion | None:
        if not finding.suggestions:
            return None
        start = finding.position or 0
        match = _OPERATOR_HEAD_RE.match(query, start)
        if match is None:
            return None
        correction = finding.suggestions[0]
        confidence = SuggestionConfidence.high if len(finding.suggestions) == 1 else SuggestionConfidence.medium
        return _suggestion(
            SuggestionType.replacement,
            f"Replace unknown operator '{match.group('name')}' with '{correction}'",
            replace_span(query, match.start("name"), match.end("name"), correction),
            confidence=confidence,
        )

    def _close_quote(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        quote = query[finding.position or 0]
        return _suggestion(
            SuggestionType.addition,
            f"Add the missing closing quote {quote}",
            query.rstrip() + quote,
        )

    def _drop_boolean(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        start = finding.position or 0
        word = query[start:start + finding.length]
        return _suggestion(
            SuggestionType.removal,
            f"Remove the misplaced '{word}'",
            remove_span(query, start, start + finding.length),
        )

    def _drop_second_boolean(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        start = finding.position or 0
        span = query[start:start + finding.length]
        second = span.split()[-1]
        second_start = start + len(span) - len(second)
        return _suggestion(
            SuggestionType.removal,
            f"Remove the redundant '{second}'",
            remove_span(query, second_start, second_start + len(second)),
        )

    def _drop_empty_parens(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        start = finding.position or 0
        return _suggestion(
            SuggestionType.removal,
            "Remove the empty parentheses",
            remove_span(query, start, start + finding.length),
        )

    def _drop_trailing_paren(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion:
        start = finding.position or 0
        return _suggestion(
            SuggestionType.removal,
            "Remove the trailing opening parenthesis",
            remove_span(query, start, start + 1),
        )

    def _use_colon(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion | None:
        match = _OPERATOR_HEAD_RE.match(query, finding.position or 0)
        if match is None:
            return None
        return _suggestion(
            SuggestionType.replacement,
            f"Operator '{match.group('name')}' does not support '{match.group('cmp')}'; use ':'",
            replace_span(query, match.start("cmp"), match.end("cmp"), ":"),
            confidence=SuggestionConfidence.medium,
        )

    def _use_negation(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion | None:
        match = _OPERATOR_HEAD_RE.match(query, finding.position or 0)
        if match is None:
            return None
        if match.group("cmp") == "!=" and not match.group("neg"):
            head = f"-{match.group('name')}:"
            description = f"Negate with '-{match.group('name')}:' instead of '!='"
        elif match.group("cmp") == "!=":
            # `-t!=x` is a double negation of `t:x`.
            head = f"{match.group('name')}:"
            description = f"Drop the double negation and use '{match.group('name')}:'"
        else:
            head = f"{match.group('neg')}{match.group('name')}:"
            description = f"Use ':' instead of '{match.group('cmp')}'"
        return _suggestion(
            SuggestionType.replacement,
            description,
            replace_span(query, match.start(), match.end(), head),
            confidence=SuggestionConfidence.medium,
        )

    def _replace_value(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion | None:
        if not finding.suggestions:
            return None
        start = finding.position or 0
        match = _OPERATOR_HEAD_RE.match(query, start)
        if match is None:
            return None
        correction = finding.suggestions[0]
        return _suggestion(
            SuggestionType.replacement,
            f"Replace '{query[match.end():start + finding.length]}' with '{correction}'",
            replace_span(query, match.end(), start + finding.length, quote_value(correction)),
            confidence=SuggestionConfidence.medium,
        )

    def _spell_boolean(self, finding: Finding, query: str, findings: list[Finding]) -> Suggestion | None:
        start = finding.position or 0
        symbol = query[start:start + finding.length]
        word = SYMBOLIC_BOOLEANS.get(symbol)
        if word is None:
            return None
        end = start + finding.length
        # `a&&b` needs spaces around the spelled-out word.
        if start > 0 and not query[start - 1].isspace():
            word = " " + word
        if end < len(query) and not query[end].isspace():
            word += " "
        return _suggestion(
            SuggestionType.replacement,
            f"Use '{word.strip()}' instead of '{symbol}'",
            replace_span(query, start, end, word),
            impact=SuggestionImpact.improves_style,
        )

    # Refinements.

    def _canonical_operators(self, query: str) -> list[tuple[OperatorToken, str]]:
        found: list[tuple[OperatorToken, str]] = []
        for token in tokenize(query):
            if not isinstance(token, OperatorToken):
                continue
            definition = self._registry.get(token.name)
            if definition is not None:
                found.append((token, definition.name))
        return found

    def _broaden(self, query: str) -> list[Suggestion]:
        operators = self._canonical_operators(query)
        suggestions: list[Suggestion] = []
        for names, description in BROADEN_GROUPS:
            spans = [(t.position, t.end) for t, name in operators if name in names]
            if not spans:
                continue
            broadened = query
            for start, end in reversed(spans):
                broadened = remove_span(broadened, start, end)
            broadened = broadened.strip()
            if not broadened or broadened == query:
                continue
            suggestions.append(
                _suggestion(
                    SuggestionType.query_refinement,
                    f"{description} to broaden your search",
                    broadened,
                    confidence=SuggestionConfidence.medium,
                    impact=SuggestionImpact.broadens_results,
                )
            )
        return suggestions

    def _narrow(self, query: str) -> list[Suggestion]:
        present = {name for _token, name in self._canonical_operators(query)}
        if "format" not in present:
            addition, description = "f:standard", "Restrict to Standard-legal cards"
        elif "manavalue" not in present:
            addition, description = "mv<=6", "Limit mana value to 6 or less"
        else:
            return []
        return [
            _suggestion(
                SuggestionType.query_refinement,
                f"{description} to narrow your search",
                f"{query.rstrip()} {addition}",
                confidence=SuggestionConfidence.medium,
                impact=SuggestionImpact.narrows_results,
            )
        ]
