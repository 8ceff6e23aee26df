"""
Script classification for tokens and documents.

The script decides how a word is segmented and whether identifiers are
lower-cased. Classification is by priority, so mixed strings always resolve
the same way: logographic > devanagari > cyrillic > latin.
"""

from __future__ import annotations

import re
from enum import Enum


class Script(str, Enum):
    """Writing systems the translator distinguishes."""
    LATIN = "latin"
    CYRILLIC = "cyrillic"
    DEVANAGARI = "devanagari"
    LOGOGRAPHIC = "logographic"


# CJK Unified Ideographs
LOGOGRAPHIC_PATTERN = re.compile(r'[\u4e00-\u9fff]')

# Devanagari block
DEVANAGARI_PATTERN = re.compile(r'[\u0900-\u097f]')

# Russian Cyrillic letters
CYRILLIC_PATTERN = re.compile(r'[а-яА-ЯёЁ]')


def classify(text: str) -> Script:
    """Classify text into one of the supported scripts.

    Args:
        text: A character, token or whole document

    Returns:
        The highest-priority script with at least one character in text
    """
    if LOGOGRAPHIC_PATTERN.search(text):
        return Script.LOGOGRAPHIC
    if DEVANAGARI_PATTERN.search(text):
        return Script.DEVANAGARI
    if CYRILLIC_PATTERN.search(text):
        return Script.CYRILLIC
    return Script.LATIN


def is_latin(text: str) -> bool:
    return classify(text) is Script.LATIN
