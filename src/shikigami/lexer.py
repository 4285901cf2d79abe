"""Tokenization for the prefix-notation keypad language."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ErrorKind, LexError
from .rational import is_number_literal


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


_SINGLE_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    ",": "COMMA",
    ";": "SEMI",
}

OPERATORS = frozenset({"+", "-", "*", "/", ">", ">=", "==", "="})

_QUOTES = {"'", '"'}
_NAME_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")
_COMMENT_RE = re.compile(r"#[^\r\n]*")


def is_name(text: str) -> bool:
    return bool(_NAME_RE.match(text))


def strip_comments(source: str) -> str:
    """Blank out every ``#`` through end of line, quotes included.

    Comment text is replaced by spaces of the same length so token spans still
    index into the unmodified text.
    """
    return _COMMENT_RE.sub(lambda m: " " * len(m.group()), source)


def _classify_word(text: str) -> str:
    if is_number_literal(text):
        return "NUMBER"
    if text in OPERATORS:
        return "OP"
    if is_name(text):
        return "NAME"
    return "WORD"


def _scan_string(source: str, start: int) -> int:
    quote = source[start]
    i = start + 1
    while i < len(source):
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        i += 1
    raise LexError(ErrorKind.UNTERMINATED_STRING, "Unterminated string literal", start)


def tokenize(source: str) -> list[Token]:
    source = strip_comments(source)
    tokens: list[Token] = []
    word_start: int | None = None
    i = 0

    def flush(end: int) -> None:
        nonlocal word_start
        if word_start is not None:
            text = source[word_start:end]
            tokens.append(Token(_classify_word(text), text, word_start, end))
            word_start = None

    while i < len(source):
        ch = source[i]

        if ch.isspace():
            flush(i)
            i += 1
            continue

        if ch in _QUOTES:
            flush(i)
            end = _scan_string(source, i)
            tokens.append(Token("STRING", source[i:end], i, end))
            i = end
            continue

        if ch in _SINGLE_TOKENS:
            flush(i)
            tokens.append(Token(_SINGLE_TOKENS[ch], ch, i, i + 1))
            i += 1
            continue

        if word_start is None:
            word_start = i
        i += 1

    flush(len(source))
    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens


def token_texts(source: str) -> list[str]:
    return [tok.text for tok in tokenize(source) if tok.kind != "EOF"]
