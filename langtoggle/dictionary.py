"""
Bilingual dictionaries for term substitution.

A dictionary maps a target-language term to an ordered list of
original-language synonyms:

    {"Hallo": ["Hello", "Hi"], "Welt": ["World"]}

This module handles:
- Loading and saving per-language JSON files
- Case-insensitive lookup on the original-language side
- Learning new case variants (``HELLO`` next to ``Hello``) during translation
- Adding and removing meanings

The dictionary is mutable and tracks a dirty flag; callers save it once
after a pass instead of after each change.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class DictionaryError(Exception):
    """A dictionary file could not be used."""


class DictionaryNotFoundError(DictionaryError):
    """No dictionary file exists for the requested language."""


@dataclass
class Dictionary:
    """Target term -> original-language synonyms, with a reverse index.

    Attributes:
        entries: The raw mapping, in file order
        language: Target language code (file stem)
        path: File the dictionary was loaded from, if any
        dirty: Whether entries changed since the last load/save
    """
    entries: dict[str, list[str]] = field(default_factory=dict)
    language: str = ""
    path: Optional[Path] = None
    dirty: bool = False
    _index_lower: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._rebuild_index()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __contains__(self, term: object) -> bool:
        return term in self.entries

    def _rebuild_index(self) -> None:
        # lower-cased synonym -> first target term listing it
        self._index_lower = {}
        for target, synonyms in self.entries.items():
            for synonym in synonyms:
                self._index_lower.setdefault(synonym.lower(), target)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def synonyms(self, target: str) -> list[str]:
        return self.entries.get(target, [])

    def has_target(self, term: str) -> bool:
        """Whether term is a key (target-language side)."""
        return term in self.entries

    def has_original(self, term: str) -> bool:
        """Whether term is a known synonym, ignoring case."""
        return term.lower() in self._index_lower

    def lookup_original(self, word: str) -> Optional[str]:
        """Find the target term for an original-language word (case-insensitive)."""
        return self._index_lower.get(word.lower())

    def lookup_target(self, token: str, case_sensitive: bool = False) -> Optional[str]:
        """Find the key matching a target-language token.

        Exact keys win; otherwise the first key equal ignoring case
        (only when case_sensitive is False).
        """
        if token in self.entries:
            return token
        if case_sensitive:
            return None
        token_lower = token.lower()
        for target in self.entries:
            if target.lower() == token_lower:
                return target
        return None

    def first_synonym(self, target: str) -> Optional[str]:
        synonyms = self.entries.get(target)
        return synonyms[0] if synonyms else None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_variant(self, target: str, variant: str) -> bool:
        """Append an original-language variant to a target's synonyms.

        Returns:
            True if the variant was new
        """
        synonyms = self.entries.setdefault(target, [])
        if variant in synonyms:
            return False
        synonyms.append(variant)
        self._index_lower.setdefault(variant.lower(), target)
        self.dirty = True
        logger.debug(f"Added variant '{variant}' to '{target}'")
        return True

    def add_entry(self, target: str, meaning: str) -> bool:
        """Add a meaning for a target term (creating the term if needed)."""
        return self.add_variant(target, meaning)

    def remove_meaning(self, target: str, meaning: str) -> bool:
        """Remove one meaning; the term is dropped when none remain."""
        synonyms = self.entries.get(target)
        if not synonyms or meaning not in synonyms:
            return False
        synonyms.remove(meaning)
        if not synonyms:
            del self.entries[target]
        self._rebuild_index()
        self.dirty = True
        logger.debug(f"Removed meaning '{meaning}' from '{target}'")
        return True

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        return json.dumps(self.entries, indent=2, ensure_ascii=False)

    def save(self, path: Optional[Path] = None) -> None:
        """Write the dictionary back to disk (pretty-printed)."""
        path = Path(path) if path is not None else self.path
        if path is None:
            raise DictionaryError("Dictionary has no file to save to")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")
        self.path = path
        self.dirty = False
        logger.info(f"Saved dictionary '{self.language}' ({len(self)} terms) to {path}")

    def save_if_dirty(self) -> bool:
        if not self.dirty or self.path is None:
            return False
        self.save()
        return True

    @classmethod
    def from_mapping(cls, mapping: dict[str, list[str]], language: str = "") -> Dictionary:
        """Build an in-memory dictionary (copies the lists)."""
        return cls(entries={k: list(v) for k, v in mapping.items()}, language=language)

    @classmethod
    def load(cls, path: str | Path, language: Optional[str] = None) -> Dictionary:
        """Load a dictionary from a JSON file.

        Raises:
            DictionaryNotFoundError: If the file does not exist
            DictionaryError: If the file is not a JSON object of string lists
        """
        path = Path(path)
        if not path.exists():
            raise DictionaryNotFoundError(f"No dictionary found at {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DictionaryError(f"Could not read dictionary {path}: {e}") from e

        if not isinstance(data, dict):
            raise DictionaryError(f"Dictionary {path} must be a JSON object")

        entries: dict[str, list[str]] = {}
        for target, synonyms in data.items():
            if isinstance(synonyms, str):
                synonyms = [synonyms]
            if not isinstance(synonyms, list):
                raise DictionaryError(f"Entry '{target}' in {path} must be a list of strings")
            entries[str(target)] = [str(s) for s in synonyms]

        dictionary = cls(entries=entries, language=language or path.stem, path=path)
        logger.info(f"Loaded dictionary '{dictionary.language}' ({len(dictionary)} terms) from {path}")
        return dictionary


class DictionaryRepository:
    """Directory of ``<language>.json`` dictionaries.

    Usage:
        repo = DictionaryRepository(Path("dictionaries"))
        repo.available()        # ['de', 'ru']
        german = repo.load("de")
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, language: str) -> Path:
        return self.directory / f"{language}.json"

    def available(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def exists(self, language: str) -> bool:
        return self.path_for(language).exists()

    def load(self, language: str) -> Dictionary:
        return Dictionary.load(self.path_for(language), language=language)

    def load_or_create(self, language: str) -> Dictionary:
        """Load a dictionary, or start an empty one bound to its file."""
        path = self.path_for(language)
        if path.exists():
            return Dictionary.load(path, language=language)
        return Dictionary(language=language, path=path)
