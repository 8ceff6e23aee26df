"""
Backward translation: target language -> original language.

Word tokens are resolved in a fixed order, earlier matches winning:
1. a compound whose translation is the whole token
2. the term with the token's identifier (type variant first when the token
   follows ``:`` or ``->``, else the plain variant)
3. the term with the other identifier variant
4. the dictionary: first synonym of the matching key
5. the token itself

Identifiers are recomputed over the target text being read, which is the
text the forward pass produced unless it was edited in between.
"""

from __future__ import annotations

import logging
from typing import Optional

from langtoggle.config import TranslatorConfig
from langtoggle.dictionary import Dictionary
from langtoggle.identifiers import IdentifierScheme
from langtoggle.script import Script, classify
from langtoggle.store import MappingStore
from langtoggle.tokens import is_word, tokenize
from langtoggle.translate.casing import match_case
from langtoggle.translate.forward import ProgressCallback

logger = logging.getLogger(__name__)


def resolve_token(
    token: str,
    position: int,
    dictionary: Dictionary,
    store: MappingStore,
    scheme: IdentifierScheme,
) -> str:
    """Find the original-language text for one target-language word."""
    compound = store.compound_for(token, position)
    if compound is not None:
        logger.debug(f"Matched compound '{token}' to '{compound.original}' at {position}")
        return compound.original

    latin = classify(token) is Script.LATIN
    plain, typed = scheme.identifiers_for(token)
    candidates = (typed, plain) if scheme.in_annotation() else (plain, typed)
    for identifier in candidates:
        original = store.original_of(identifier)
        if original is not None:
            resolved = match_case(token, original) if latin else original
            logger.debug(f"Matched '{token}' to '{resolved}' at {position} via '{identifier}'")
            return resolved

    key = dictionary.lookup_target(token, case_sensitive=not latin)
    if key is not None:
        synonym = dictionary.first_synonym(key)
        if synonym is not None:
            resolved = match_case(token, synonym) if latin else synonym
            logger.debug(f"Dictionary fallback '{token}' to '{resolved}' at {position}")
            return resolved

    logger.debug(f"No match for '{token}' at {position}, keeping it")
    return token


def translate_to_original(
    text: str,
    dictionary: Dictionary,
    store: MappingStore,
    config: Optional[TranslatorConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> str:
    """Translate target-language text back to the original language.

    The store is only read; clearing it afterwards is up to the caller.
    """
    config = config or TranslatorConfig()
    scheme = IdentifierScheme(config)
    output: list[str] = []

    tokens = tokenize(text)
    total = len(tokens)
    logger.info(f"Translating back {len(text)} chars ({total} tokens), {len(store)} terms mapped")

    for done, token in enumerate(tokens, start=1):
        if is_word(token) and not config.is_protected(token):
            output.append(resolve_token(token, scheme.position, dictionary, store, scheme))
        else:
            output.append(token)
        scheme.feed(token)
        if progress:
            progress(done, total)

    return "".join(output)
