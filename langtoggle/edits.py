"""
Compound detection for words typed while the document is in target mode.

When the user types a word into the translated document, the word is split
into parts that the dictionary knows (as target-language terms), each part
is mapped to an original-language meaning, and the parts are linked into a
compound. A compound ending right where the word starts is extended, and an
already mapped word directly after it is absorbed, so typing a compound in
several steps still yields one record.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from langtoggle.config import TranslatorConfig
from langtoggle.dictionary import Dictionary
from langtoggle.identifiers import identifier_at
from langtoggle.segment import segment
from langtoggle.store import MappingStore

logger = logging.getLogger(__name__)

# Picks one meaning for an ambiguous part: (part, options) -> choice or None
MeaningChooser = Callable[[str, list[str]], Optional[str]]

FOLLOWING_WORD_PATTERN = re.compile(r'^[^\s().]+')


def _meanings(part: str, dictionary: Dictionary) -> list[str]:
    return dictionary.synonyms(part) or dictionary.synonyms(part.lower())


def map_part(
    part: str,
    start: int,
    current_text: str,
    store: MappingStore,
    dictionary: Dictionary,
    choose: Optional[MeaningChooser] = None,
) -> tuple[str, str]:
    """Map one part at ``start``, reusing a mapping already recorded there.

    Returns:
        (identifier, original-language meaning)
    """
    identifier = identifier_at(current_text, start, part)
    existing = store.get_term(identifier)
    if existing is not None and existing.position == start:
        logger.debug(f"Reusing mapping '{existing.original}' for '{part}' at {start}")
        return identifier, existing.original

    options = _meanings(part, dictionary)
    selected: Optional[str] = None
    if len(options) > 1 and choose is not None:
        selected = choose(part, options)
    elif options:
        selected = options[0]

    meaning = selected or part
    identifier = store.insert_term(meaning, part, start, current_text)
    logger.debug(f"Mapped '{part}' to '{meaning}' as '{identifier}'")
    return identifier, meaning


def detect_compound(
    store: MappingStore,
    dictionary: Dictionary,
    word: str,
    start: int,
    current_text: str,
    choose: Optional[MeaningChooser] = None,
    config: Optional[TranslatorConfig] = None,
) -> Optional[str]:
    """Map a typed word and register it as a compound when it has several parts.

    Args:
        store: Mapping store of the document
        dictionary: Active dictionary; gains an entry for new compounds
        word: The typed word (as it appears in current_text)
        start: Offset of word in current_text
        current_text: Document text after the edit
        choose: Resolves parts with several meanings (default: first meaning)
        config: Translation policy (logographic probe length)

    Returns:
        The compound id, or None if no compound was formed
    """
    config = config or TranslatorConfig()
    parts = segment(word, dictionary.has_target, config.logographic_max_segment)
    logger.debug(f"Split '{word}' at {start} into {parts}")

    part_ids: list[str] = []
    translated = ""
    original = ""
    for part in parts:
        identifier, meaning = map_part(part, start + len(translated), current_text, store, dictionary, choose)
        part_ids.append(identifier)
        translated += part
        original += meaning

    compound_start = start
    for compound in store.compounds().values():
        end = compound.position + len(compound.translated)
        if end == start and current_text[compound.position:start] == compound.translated:
            translated = compound.translated + translated
            original = compound.original + original
            part_ids = compound.part_ids + part_ids
            compound_start = compound.position
            store.remove_compound(compound.compound_id)
            logger.debug(f"Extending compound '{compound.compound_id}'")
            break

    after = start + len(word)
    following = FOLLOWING_WORD_PATTERN.match(current_text[after:])
    if following:
        next_word = following.group(0)
        next_id = identifier_at(current_text, after, next_word)
        next_term = store.get_term(next_id)
        if next_term is not None and dictionary.has_target(next_word):
            translated += next_word
            original += next_term.original
            part_ids.append(next_id)

    if len(part_ids) < 2:
        logger.debug(f"No compound formed for '{word}'")
        return None

    compound_id = store.add_compound(original, translated, part_ids, compound_start)
    logger.info(f"Added compound '{compound_id}': '{translated}' -> '{original}'")
    if not dictionary.has_target(translated):
        dictionary.add_entry(translated, original)
        dictionary.save_if_dirty()
    return compound_id
