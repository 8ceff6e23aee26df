"""
Forward translation: original language -> target language.

The pass walks the token stream left to right:
- symbol and whitespace runs, and protected keywords, are copied through
- a word found in the dictionary (ignoring case) is replaced by its target
  term, with the first-letter case of the source word
- other words are split into compound parts; each part is translated on its
  own (new case variants of parts are added to the dictionary), the parts
  are concatenated, and a compound record links them
- words that do not split stay as they are but are still recorded, so the
  backward pass finds an entry for every word

Each recorded term gets an identifier computed from the text produced so
far (see ``langtoggle.identifiers``). The store is cleared before the pass
and the dictionary is saved once at the end if it learned new variants.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from langtoggle.config import TranslatorConfig
from langtoggle.dictionary import Dictionary
from langtoggle.identifiers import IdentifierScheme
from langtoggle.segment import is_compound, segment
from langtoggle.store import MappingStore
from langtoggle.tokens import is_word, tokenize
from langtoggle.translate.casing import match_case

logger = logging.getLogger(__name__)

# Called with (tokens done, tokens total)
ProgressCallback = Callable[[int, int], None]


@dataclass
class ForwardResult:
    """Result of a forward pass.

    Attributes:
        text: The target-language text
        terms: Number of term records written
        compounds: Number of compound records written
        dictionary_updated: Whether new variants were saved to the dictionary
    """
    text: str
    terms: int = 0
    compounds: int = 0
    dictionary_updated: bool = False


def _translate_part(part: str, dictionary: Dictionary) -> str:
    target = dictionary.lookup_original(part)
    if target is None:
        return part
    if dictionary.add_variant(target, part):
        logger.debug(f"Learned variant '{part}' for '{target}'")
    return match_case(part, target)


def _translate_word(
    token: str,
    position: int,
    dictionary: Dictionary,
    store: MappingStore,
    scheme: IdentifierScheme,
    config: TranslatorConfig,
) -> str:
    target = dictionary.lookup_original(token)
    if target is not None:
        translated = match_case(token, target)
        identifier = scheme.identifier_for(translated, scheme.in_annotation())
        store.add_term(identifier, token, translated, position)
        scheme.feed(translated)
        logger.debug(f"Translated '{token}' to '{translated}' at {position} as '{identifier}'")
        return translated

    parts = segment(token, dictionary.has_original, config.logographic_max_segment)
    if is_compound(parts):
        pieces: list[str] = []
        part_ids: list[str] = []
        part_position = position
        for part in parts:
            part_translated = _translate_part(part, dictionary)
            identifier = scheme.identifier_for(part_translated)
            store.add_term(identifier, part, part_translated, part_position)
            scheme.feed(part_translated)
            pieces.append(part_translated)
            part_ids.append(identifier)
            part_position += len(part_translated)
        translated = "".join(pieces)
        compound_id = store.add_compound(token, translated, part_ids, position)
        logger.debug(f"Mapped compound '{compound_id}': '{token}' -> '{translated}' at {position}")
        return translated

    identifier = scheme.identifier_for(token, scheme.in_annotation())
    store.add_term(identifier, token, token, position)
    scheme.feed(token)
    logger.debug(f"Kept '{token}' at {position} as '{identifier}'")
    return token


def translate_to_target(
    text: str,
    dictionary: Dictionary,
    store: MappingStore,
    config: Optional[TranslatorConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> ForwardResult:
    """Translate original text into the target language.

    Args:
        text: Original-language document
        dictionary: Target term -> synonyms; may gain case variants
        store: Cleared, then filled with one record per translated occurrence
        config: Translation policy (protected keywords, annotation window)
        progress: Optional callback(done, total) per token

    Returns:
        ForwardResult with the translated text and record counts
    """
    config = config or TranslatorConfig()
    store.clear()
    scheme = IdentifierScheme(config)
    output: list[str] = []

    tokens = tokenize(text)
    total = len(tokens)
    logger.info(f"Translating {len(text)} chars ({total} tokens) to '{dictionary.language or 'target'}'")

    for done, token in enumerate(tokens, start=1):
        if is_word(token) and not config.is_protected(token):
            translated = _translate_word(token, scheme.position, dictionary, store, scheme, config)
        else:
            translated = token
            scheme.feed(token)
        output.append(translated)
        if progress:
            progress(done, total)

    updated = dictionary.save_if_dirty()
    if updated:
        logger.info("Updated dictionary with new variants")

    result = ForwardResult(
        text="".join(output),
        terms=len(store),
        compounds=len(store.compounds()),
        dictionary_updated=updated,
    )
    logger.info(f"Forward pass done: {result.terms} terms, {result.compounds} compounds")
    return result
