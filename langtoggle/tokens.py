"""
Script-agnostic tokenizer.

Text is split into maximal runs of three mutually exclusive classes:
- word runs: letters, marks and numbers of any script
- symbol runs: anything that is neither a word character nor whitespace
- whitespace runs

Every character belongs to exactly one token, so joining the tokens
reproduces the input exactly. All position arithmetic in the translators
and the reconciler relies on that.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import regex

TOKEN_PATTERN = regex.compile(r'[\p{L}\p{M}\p{N}]+|[^\s\p{L}\p{M}\p{N}]+|\s+')

WORD_PATTERN = regex.compile(r'[\p{L}\p{M}\p{N}]+')


class TokenKind(str, Enum):
    WORD = "word"
    SYMBOL = "symbol"
    SPACE = "space"


@dataclass(frozen=True)
class Token:
    """A token and its character offset in the tokenized text."""
    text: str
    start: int
    kind: TokenKind

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    @property
    def is_word(self) -> bool:
        return self.kind is TokenKind.WORD


def tokenize(text: str) -> list[str]:
    """Split text into word, symbol and whitespace runs."""
    return TOKEN_PATTERN.findall(text)


def is_word(token: str) -> bool:
    """Whether a token is a word run (as opposed to symbols or whitespace)."""
    return bool(token) and WORD_PATTERN.fullmatch(token) is not None


def _kind_of(token: str) -> TokenKind:
    if is_word(token):
        return TokenKind.WORD
    if token.isspace():
        return TokenKind.SPACE
    return TokenKind.SYMBOL


def iter_tokens(text: str) -> Iterator[Token]:
    """Yield tokens with their start offsets."""
    for match in TOKEN_PATTERN.finditer(text):
        token = match.group(0)
        yield Token(text=token, start=match.start(), kind=_kind_of(token))


def token_positions(text: str) -> dict[str, list[int]]:
    """Map each distinct token to the offsets where it occurs, in order."""
    positions: dict[str, list[int]] = {}
    for token in iter_tokens(text):
        positions.setdefault(token.text, []).append(token.start)
    return positions
