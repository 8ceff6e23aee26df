"""
Project-wide configuration for langtoggle.

This module defines the paths, store layout and translation policy knobs used
throughout the system.

Module Contents:
    APP_NAME: Application name for display purposes
    DATA_DIR: Main data directory (dictionaries, state files)
    DICTIONARY_DIR: Directory holding ``<language>.json`` dictionaries
    DEFAULT_STATE_FILE: JSON file backing the CLI's key-value store
    STORE_NAMESPACE: Prefix for every key the store writes
    TranslatorConfig: Policy parameters shared by both translation directions

Example:
    >>> from langtoggle.config import TranslatorConfig, PYTHON_KEYWORDS
    >>> config = TranslatorConfig(protected_keywords=PYTHON_KEYWORDS)
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from pathlib import Path

# Application name for display and identification
APP_NAME = "langtoggle"

# Main data directory (created on demand by the CLI)
DATA_DIR = Path.home() / ".langtoggle"

# Per-language dictionary files: <DICTIONARY_DIR>/<language>.json
DICTIONARY_DIR = DATA_DIR / "dictionaries"

# Key-value store file used by the CLI between invocations
DEFAULT_STATE_FILE = Path(".langtoggle-state.json")

# Every store key starts with this prefix
STORE_NAMESPACE = "langtoggle"

# Characters looked at before a token when checking for a type annotation
ANNOTATION_WINDOW = 10

# Longest dictionary probe for logographic scripts
LOGOGRAPHIC_MAX_SEGMENT = 4

# Reserved words of Python, usable as a protected keyword preset
PYTHON_KEYWORDS = frozenset(keyword.kwlist)


@dataclass
class TranslatorConfig:
    """Policy parameters for forward and backward translation.

    Both directions must use the same values, otherwise identifiers
    computed going forward will not be found going back.

    Attributes:
        protected_keywords: Tokens never translated in either direction
        annotation_window: Lookbehind size for the type-annotation check
        annotation_markers: Markers that put the next token in annotation position
        logographic_max_segment: Longest dictionary probe for logographic text
    """
    protected_keywords: frozenset[str] = field(default_factory=frozenset)
    annotation_window: int = ANNOTATION_WINDOW
    annotation_markers: tuple[str, ...] = (":", "->")
    logographic_max_segment: int = LOGOGRAPHIC_MAX_SEGMENT

    def is_protected(self, token: str) -> bool:
        return token in self.protected_keywords

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            "protected_keywords": sorted(self.protected_keywords),
            "annotation_window": self.annotation_window,
            "annotation_markers": list(self.annotation_markers),
            "logographic_max_segment": self.logographic_max_segment,
        }
