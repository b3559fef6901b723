"""DSL tokenizer.

Splits query text into tokens that partition the source left to right: whitespace runs, quoted
phrases, parentheses, boolean keywords, `name:value` / `name<cmp>value` operator expressions and
bare search terms. `&&` and `||` always form their own term so the orchestrator can flag them. Only
the double quote delimits phrases. The tokenizer never fails; malformed input (e.g. an unterminated
quote) still produces tokens and is reported by the syntax layer.
"""

from __future__ import annotations

import re

from src.validation.schema import (
    BooleanOperator,
    BooleanToken,
    EOFToken,
    OperatorToken,
    ParenToken,
    QuotedToken,
    TermToken,
    Token,
    WhitespaceToken,
)

# Apostrophes are ordinary characters: `name:urza's` is a plain value.
QUOTE_CHARS = frozenset({'"'})
_RUN_STOP_CHARS = frozenset({"(", ")"}) | QUOTE_CHARS

# C-style booleans split runs even without surrounding spaces (`c:red&&t:creature`).
SYMBOLIC_BOOLEAN_SYMBOLS: tuple[str, ...] = ("&&", "||")

# Longest comparison first so `<=` wins over `<`.
_OPERATOR_RE = re.compile(
    r"(?P<neg>-?)(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<cmp>>=|<=|!=|:|=|<|>)(?P<value>.*)",
    re.DOTALL,
)

_BOOLEAN_WORDS: dict[str, BooleanOperator] = {op.value: op for op in BooleanOperator}


def _read_quoted(text: str, start: int) -> tuple[str, int, bool]:
    """Read a quoted phrase starting at `text[start]`.

    Returns the unescaped value, the index just past the phrase, and whether it was closed.
    """

    quote = text[start]
    chars: list[str] = []
    idx = start + 1
    while idx < len(text):
        ch = text[idx]
        if ch == "\\" and idx + 1 < len(text):
            chars.append(text[idx + 1])
            idx += 2
            continue
        if ch == quote:
            return "".join(chars), idx + 1, True
        chars.append(ch)
        idx += 1
    return "".join(chars), idx, False


def _read_run(text: str, start: int) -> int:
    if text.startswith(SYMBOLIC_BOOLEAN_SYMBOLS, start):
        return start + 2

    idx = start
    while (
            idx < len(text)
            and not text[idx].isspace()
            and text[idx] not in _RUN_STOP_CHARS
            and not text.startswith(SYMBOLIC_BOOLEAN_SYMBOLS, idx)
    ):
        idx += 1
    return idx


def _word_token(text: str, start: int, end: int) -> tuple[Token, int]:
    """Classify the run `text[start:end]`, absorbing a directly following quoted value."""

    word = text[start:end]

    boolean = _BOOLEAN_WORDS.get(word.upper())
    if boolean is not None:
        return BooleanToken(operator=boolean, text=word, position=start, length=end - start), end

    match = _OPERATOR_RE.fullmatch(word)
    if match is None:
        return TermToken(text=word, position=start, length=end - start), end

    value = match.group("value")
    quoted = False
    if not value and end < len(text) and text[end] in QUOTE_CHARS:
        value, end, _closed = _read_quoted(text, end)
        quoted = True

    cmp = match.group("cmp")
    token = OperatorToken(
        name=match.group("name"),
        comparison=None if cmp == ":" else cmp,
        value=value,
        negated=bool(match.group("neg")),
        quoted=quoted,
        text=text[start:end],
        position=start,
        length=end - start,
    )
    return token, end


def tokenize(text: str) -> list[Token]:
    """Tokenize DSL text.

    The returned list always ends with exactly one `EOF` token whose position equals `len(text)`.
    """

    tokens: list[Token] = []
    idx = 0
    length = len(text)

    while idx < length:
        ch = text[idx]

        if ch.isspace():
            end = idx
            while end < length and text[end].isspace():
                end += 1
            tokens.append(WhitespaceToken(text=text[idx:end], position=idx, length=end - idx))
            idx = end
            continue

        if ch in QUOTE_CHARS:
            value, end, closed = _read_quoted(text, idx)
            tokens.append(
                QuotedToken(
                    value=value,
                    quote=ch,
                    closed=closed,
                    text=text[idx:end],
                    position=idx,
                    length=end - idx,
                )
            )
            idx = end
            continue

        if ch in "()":
            tokens.append(ParenToken(is_open=ch == "(", text=ch, position=idx, length=1))
            idx += 1
            continue

        token, idx = _word_token(text, idx, _read_run(text, idx))
        tokens.append(token)

    tokens.append(EOFToken(position=length))
    return tokens


def meaningful_tokens(tokens: list[Token] | tuple[Token, ...]) -> list[Token]:
    """Drop whitespace and EOF tokens."""

    return [t for t in tokens if t.is_meaningful]
