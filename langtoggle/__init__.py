"""
langtoggle: reversible dictionary translation of documents.

Translate a document into another language, edit it there, and translate it
back without losing which original word each translated word came from.

Core pieces:
1. Script-aware tokenization and compound segmentation
2. Occurrence-indexed identifiers shared by both translation directions
3. A mapping store that reconciles itself after edits

License: MIT
"""

__version__ = "0.1.0"

from langtoggle.config import TranslatorConfig
from langtoggle.dictionary import Dictionary, DictionaryError, DictionaryNotFoundError, DictionaryRepository
from langtoggle.reconcile import Reconciler, ReconcileResult
from langtoggle.session import MissingLanguageError, TranslationSession
from langtoggle.store import JsonFileKeyValueStore, MappingStore, MemoryKeyValueStore
from langtoggle.translate import translate_to_original, translate_to_target

__all__ = [
    "Dictionary",
    "DictionaryError",
    "DictionaryNotFoundError",
    "DictionaryRepository",
    "JsonFileKeyValueStore",
    "MappingStore",
    "MemoryKeyValueStore",
    "MissingLanguageError",
    "Reconciler",
    "ReconcileResult",
    "TranslationSession",
    "TranslatorConfig",
    "translate_to_original",
    "translate_to_target",
]
