"""
Per-document translation session.

A ``TranslationSession`` owns everything one open document needs between
toggles: the mapping store, the active dictionary, the last original and
translated texts, and whether the document currently shows the target
language. Nothing is kept in module globals, so two sessions never share
state.

Usage:
    session = TranslationSession(DictionaryRepository(Path("dicts")))
    translated = session.toggle("Hello World", language="de")   # 'Hallo Welt'
    restored = session.toggle(translated)                        # 'Hello World'
"""

from __future__ import annotations

import logging
from typing import Optional

from langtoggle.config import STORE_NAMESPACE, TranslatorConfig
from langtoggle.dictionary import Dictionary, DictionaryRepository
from langtoggle.edits import MeaningChooser, detect_compound
from langtoggle.identifiers import identifier_at, identifier_base, is_annotation_position, parse_identifier
from langtoggle.reconcile import ReconcileResult, Reconciler
from langtoggle.store import KeyValueStore, MappingStore, MemoryKeyValueStore
from langtoggle.translate import translate_to_original, translate_to_target
from langtoggle.translate.forward import ProgressCallback

logger = logging.getLogger(__name__)


class MissingLanguageError(Exception):
    """A target language is required but none was selected."""


class TranslationSession:
    """Toggles one document between original and target language."""

    def __init__(
        self,
        repository: DictionaryRepository,
        kv: Optional[KeyValueStore] = None,
        config: Optional[TranslatorConfig] = None,
        namespace: str = STORE_NAMESPACE,
    ):
        self.repository = repository
        self.kv = kv if kv is not None else MemoryKeyValueStore()
        self.config = config or TranslatorConfig()
        self.namespace = namespace
        self.store = MappingStore(self.kv, namespace)
        self.reconciler = Reconciler(self.store)
        self.dictionary: Optional[Dictionary] = None
        self.last_reconcile: Optional[ReconcileResult] = None

    # -- persisted state ----------------------------------------------------

    def _key(self, name: str) -> str:
        return f"{self.namespace}:session:{name}"

    @property
    def is_target(self) -> bool:
        return bool(self.kv.get(self._key("is_target"), False))

    @property
    def language(self) -> Optional[str]:
        return self.kv.get(self._key("language"))

    @property
    def last_translated_text(self) -> Optional[str]:
        return self.kv.get(self._key("last_translated"))

    @property
    def last_original_text(self) -> Optional[str]:
        return self.kv.get(self._key("last_original"))

    def _set_state(self, is_target: bool, language: Optional[str], original: Optional[str], translated: Optional[str]) -> None:
        self.kv.set(self._key("is_target"), is_target or None)
        self.kv.set(self._key("language"), language)
        self.kv.set(self._key("last_original"), original)
        self.kv.set(self._key("last_translated"), translated)

    def _active_dictionary(self, create: bool = False) -> Dictionary:
        if self.dictionary is not None:
            return self.dictionary
        language = self.language
        if not language:
            raise MissingLanguageError("Please select a target language first")
        if create:
            self.dictionary = self.repository.load_or_create(language)
        else:
            self.dictionary = self.repository.load(language)
        return self.dictionary

    # -- toggling -----------------------------------------------------------

    def to_target(self, text: str, language: str, progress: Optional[ProgressCallback] = None) -> str:
        """Translate the original document into ``language``.

        Raises:
            MissingLanguageError: If no language is given
            DictionaryError: If the dictionary cannot be loaded (store untouched)
        """
        if not language:
            raise MissingLanguageError("Please select a target language first")
        dictionary = self.repository.load(language)

        result = translate_to_target(text, dictionary, self.store, self.config, progress)
        self.dictionary = dictionary
        self._set_state(True, language, text, result.text)
        self.kv.flush()
        return result.text

    def to_original(self, current_text: str, progress: Optional[ProgressCallback] = None) -> str:
        """Translate the (possibly edited) target document back.

        The store is reconciled first when the text changed since the forward
        pass, and cleared once the document is back in the original language.
        """
        last_translated = self.last_translated_text
        last_original = self.last_original_text
        self.last_reconcile = None
        if last_translated is not None and last_original is not None and current_text != last_translated:
            self.last_reconcile = self.reconciler.rebuild(last_translated, last_original, current_text)

        if self.dictionary is None and self.language and self.repository.exists(self.language):
            self.dictionary = self.repository.load(self.language)
        dictionary = self.dictionary or Dictionary()

        text = translate_to_original(current_text, dictionary, self.store, self.config, progress)
        self.store.clear()
        self._set_state(False, self.language, None, None)
        self.dictionary = None
        self.kv.flush()
        return text

    def toggle(self, text: str, language: Optional[str] = None, progress: Optional[ProgressCallback] = None) -> str:
        """Switch the document to the other language."""
        if self.is_target:
            logger.info("Toggling back to original language")
            return self.to_original(text, progress)
        language = language or self.language
        logger.info(f"Toggling to '{language}'")
        return self.to_target(text, language, progress)

    # -- editing in target mode --------------------------------------------

    def register_word(
        self,
        word: str,
        start: int,
        current_text: str,
        choose: Optional[MeaningChooser] = None,
    ) -> Optional[str]:
        """Map a word typed into the translated document (see ``detect_compound``)."""
        compound_id = detect_compound(
            self.store, self._active_dictionary(), word, start, current_text, choose, self.config
        )
        self.kv.flush()
        return compound_id

    def add_to_dictionary(self, term: str, meaning: str, offset: int, current_text: str) -> str:
        """Add ``term -> meaning`` and map the occurrence of term at ``offset``.

        Returns:
            Identifier of the new mapping
        """
        dictionary = self._active_dictionary(create=True)
        dictionary.add_entry(term, meaning)
        dictionary.save()

        annotated = is_annotation_position(current_text[:offset], self.config)
        identifier = identifier_at(current_text, offset, term, annotated)
        self.store.add_term(identifier, meaning, term, offset)
        self.kv.flush()
        logger.info(f"Added '{identifier}' -> '{meaning}' to mappings for {dictionary.language}")
        return identifier

    def remove_from_dictionary(self, term: str, meaning: str) -> list[str]:
        """Remove one meaning of ``term`` and fix up occurrences mapped to it.

        Occurrences mapped to the removed meaning switch to the term's
        remaining first meaning; when no meaning remains they are unmapped.

        Returns:
            Identifiers of the affected mappings (before any renumbering)
        """
        dictionary = self._active_dictionary()
        if not dictionary.remove_meaning(term, meaning):
            logger.info(f"'{meaning}' is not a meaning of '{term}'")
            return []
        dictionary.save()

        base = identifier_base(term)
        affected = []
        for identifier, record in self.store.terms().items():
            parsed = parse_identifier(identifier)
            if parsed and parsed.base == base and record.original == meaning:
                affected.append((parsed.occurrence, identifier))
        affected.sort(reverse=True)

        default = dictionary.first_synonym(term)
        for _, identifier in affected:
            if default:
                record = self.store.get_term(identifier)
                record.original = default
                self.store.update_term(record)
                logger.debug(f"Updated '{identifier}' from '{meaning}' to '{default}'")
            else:
                # descending order: removal renumbers higher occurrences only
                self.store.remove_term(identifier)
                logger.debug(f"Removed mapping '{identifier}', no meanings remain for '{term}'")
        self.kv.flush()
        return [identifier for _, identifier in affected]
