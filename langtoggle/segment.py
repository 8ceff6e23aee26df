"""
Compound segmentation of single word tokens.

Strategy depends on the script of the token:
- latin: split before capital letters (``camelCase`` -> ``camel``, ``Case``)
- other or mixed scripts: split into same-script runs, then segment each run
  (latin runs by case, the rest by greedy longest dictionary match)

The greedy matcher never backtracks, so text the vocabulary does not know
degrades to one piece per character.
"""

from __future__ import annotations

from typing import Callable, Optional

import regex

from langtoggle.config import LOGOGRAPHIC_MAX_SEGMENT
from langtoggle.script import Script, classify

# Membership test used by the greedy matcher
Vocabulary = Callable[[str], bool]

# Uppercase letter plus everything up to the next uppercase letter, or a
# leading run without uppercase letters (digits stay in their piece).
LATIN_PART_PATTERN = regex.compile(r'\p{Lu}[^\p{Lu}]*|[^\p{Lu}]+')


def split_latin(token: str) -> list[str]:
    """Split a latin token on capital-letter boundaries."""
    parts = LATIN_PART_PATTERN.findall(token)
    return [p for p in parts if p] or [token]


def segment_greedy(
    text: str,
    vocabulary: Optional[Vocabulary],
    max_length: Optional[int] = None,
) -> list[str]:
    """Greedy longest-match segmentation against a vocabulary.

    Args:
        text: A same-script run
        vocabulary: Returns True for known terms; None means nothing is known
        max_length: Longest substring tried at each position (None = unbounded)

    Returns:
        Pieces in order; unknown characters become one-character pieces
    """
    segments: list[str] = []
    pos = 0
    while pos < len(text):
        longest = ""
        if vocabulary is not None:
            limit = len(text) - pos
            if max_length is not None:
                limit = min(limit, max_length)
            for length in range(limit, 0, -1):
                candidate = text[pos:pos + length]
                if vocabulary(candidate):
                    longest = candidate
                    break
        if longest:
            segments.append(longest)
            pos += len(longest)
        else:
            segments.append(text[pos])
            pos += 1
    return segments


def _segment_run(
    run: str,
    script: Script,
    vocabulary: Optional[Vocabulary],
    logographic_max: int,
) -> list[str]:
    if script is Script.LATIN:
        return split_latin(run)
    if script is Script.LOGOGRAPHIC:
        return segment_greedy(run, vocabulary, logographic_max)
    return segment_greedy(run, vocabulary)


def split_mixed(
    token: str,
    vocabulary: Optional[Vocabulary] = None,
    logographic_max: int = LOGOGRAPHIC_MAX_SEGMENT,
) -> list[str]:
    """Split a token into same-script runs and segment each run."""
    if not token:
        return []
    parts: list[str] = []
    current = token[0]
    current_script = classify(token[0])
    for char in token[1:]:
        char_script = classify(char)
        if char_script is current_script:
            current += char
            continue
        parts.extend(_segment_run(current, current_script, vocabulary, logographic_max))
        current = char
        current_script = char_script
    parts.extend(_segment_run(current, current_script, vocabulary, logographic_max))
    return [p for p in parts if p]


def segment(
    token: str,
    vocabulary: Optional[Vocabulary] = None,
    logographic_max: int = LOGOGRAPHIC_MAX_SEGMENT,
) -> list[str]:
    """Split one word token into its sub-terms.

    Example:
        >>> segment("camelCaseWord")
        ['camel', 'Case', 'Word']
        >>> segment("lowercase")
        ['lowercase']
    """
    if classify(token) is Script.LATIN:
        return split_latin(token)
    return split_mixed(token, vocabulary, logographic_max)


def is_compound(parts: list[str]) -> bool:
    return len(parts) > 1
