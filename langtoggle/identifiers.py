"""
Occurrence-indexed identifiers for term occurrences.

Every translated token occurrence gets an identifier::

    <base>_<occurrence>[_type]

- ``base`` is the translated text, lower-cased for latin script
- ``occurrence`` is 1 + the number of case-insensitive matches of ``base``
  in the text preceding the token
- ``_type`` marks a token right after ``:`` or ``->`` (a type annotation)

The forward pass counts over the text it has produced so far; the backward
pass counts over the target text it is reading. With no edits in between
both see the same prefix, so both derive the same identifier. Both passes
use ``IdentifierScheme`` so the counting rules cannot drift apart.

Counting is incremental: for each base the counter remembers where its last
scan stopped and only looks at text appended since, giving the same result
as rescanning the whole prefix every time.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import NamedTuple, Optional

import regex

from langtoggle.config import TranslatorConfig
from langtoggle.script import Script, classify

TYPE_SUFFIX = "_type"

IDENTIFIER_PATTERN = re.compile(r'^(.+)_(\d+)(_type)?$')


class ParsedIdentifier(NamedTuple):
    base: str
    occurrence: int
    is_type: bool


def identifier_base(translated: str) -> str:
    """Normalize translated text into an identifier base."""
    if classify(translated) is Script.LATIN:
        return translated.lower()
    return translated


def make_identifier(base: str, occurrence: int, is_type: bool = False) -> str:
    return f"{base}_{occurrence}{TYPE_SUFFIX if is_type else ''}"


def parse_identifier(identifier: str) -> Optional[ParsedIdentifier]:
    """Split an identifier into base, occurrence and type flag.

    Example:
        >>> parse_identifier("welt_2_type")
        ParsedIdentifier(base='welt', occurrence=2, is_type=True)
    """
    match = IDENTIFIER_PATTERN.match(identifier)
    if not match:
        return None
    return ParsedIdentifier(match.group(1), int(match.group(2)), bool(match.group(3)))


def count_occurrences(base: str, text: str) -> int:
    """Non-overlapping, case-insensitive matches of base in text."""
    if not base:
        return 0
    pattern = regex.compile(regex.escape(base), regex.IGNORECASE)
    return sum(1 for _ in pattern.finditer(text))


class TextBuffer:
    """Append-only text with cheap slicing of recent ranges."""

    def __init__(self):
        self._pieces: list[str] = []
        self._starts: list[int] = []
        self.length = 0

    def append(self, piece: str) -> None:
        if not piece:
            return
        self._pieces.append(piece)
        self._starts.append(self.length)
        self.length += len(piece)

    def slice(self, start: int, end: int) -> str:
        start = max(0, start)
        end = min(end, self.length)
        if start >= end:
            return ""
        first = bisect_right(self._starts, start) - 1
        chunks = []
        i = first
        while i < len(self._pieces) and self._starts[i] < end:
            chunks.append(self._pieces[i])
            i += 1
        offset = self._starts[first]
        return "".join(chunks)[start - offset:end - offset]

    def tail(self, size: int) -> str:
        return self.slice(self.length - size, self.length)

    def text(self) -> str:
        return "".join(self._pieces)


@dataclass
class _ScanState:
    pattern: regex.Pattern
    resume: int = 0
    count: int = 0


class OccurrenceCounter:
    """Counts matches of each base in a growing prefix."""

    def __init__(self):
        self.buffer = TextBuffer()
        self._states: dict[str, _ScanState] = {}

    def feed(self, text: str) -> None:
        self.buffer.append(text)

    def count(self, base: str) -> int:
        if not base:
            return 0
        state = self._states.get(base)
        if state is None:
            state = _ScanState(pattern=regex.compile(regex.escape(base), regex.IGNORECASE))
            self._states[base] = state

        end = self.buffer.length
        if end <= state.resume:
            return state.count

        window = self.buffer.slice(state.resume, end)
        resume = state.resume
        for match in state.pattern.finditer(window):
            state.count += 1
            resume = state.resume + match.end()
        # a match not found yet has to end past the current prefix
        state.resume = max(resume, end - len(base) + 1)
        return state.count


class IdentifierScheme:
    """Assigns identifiers while a translation pass walks its tokens.

    Callers must ``feed`` every token of the counted text (output text going
    forward, input text going back), in order, after asking for the
    identifiers of that token.
    """

    def __init__(self, config: Optional[TranslatorConfig] = None):
        self.config = config or TranslatorConfig()
        self.counter = OccurrenceCounter()
        markers = "|".join(re.escape(m) for m in self.config.annotation_markers)
        self._annotation_pattern = re.compile(rf'(?:{markers})\s*$')

    @property
    def position(self) -> int:
        """Length of the text fed so far."""
        return self.counter.buffer.length

    def feed(self, text: str) -> None:
        self.counter.feed(text)

    def in_annotation(self) -> bool:
        """Whether the next token sits in type-annotation position."""
        if not self.config.annotation_markers or self.config.annotation_window <= 0:
            return False
        tail = self.counter.buffer.tail(self.config.annotation_window)
        return bool(self._annotation_pattern.search(tail))

    def identifiers_for(self, translated: str) -> tuple[str, str]:
        """Return the (plain, type) identifier pair for the next token."""
        base = identifier_base(translated)
        occurrence = self.counter.count(base) + 1
        return make_identifier(base, occurrence), make_identifier(base, occurrence, True)

    def identifier_for(self, translated: str, annotated: bool = False) -> str:
        plain, typed = self.identifiers_for(translated)
        return typed if annotated else plain


def is_annotation_position(prefix: str, config: Optional[TranslatorConfig] = None) -> bool:
    """Check a full prefix for the annotation markers (see ``IdentifierScheme``)."""
    scheme = IdentifierScheme(config)
    scheme.feed(prefix)
    return scheme.in_annotation()


def identifier_at(text: str, position: int, translated: str, annotated: bool = False) -> str:
    """Compute the identifier of ``translated`` occurring at ``position`` in text.

    This rescans the prefix and is meant for one-off lookups; the
    translators use ``IdentifierScheme`` instead.
    """
    base = identifier_base(translated)
    occurrence = count_occurrences(base, text[:position]) + 1
    return make_identifier(base, occurrence, annotated)
