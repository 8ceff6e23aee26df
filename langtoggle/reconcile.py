"""
Reconciliation of the mapping store after edits in target-language mode.

When the user edits the translated document and then toggles back, some
records no longer correspond to anything in the text. ``Reconciler.rebuild``
compares three texts:

- the last translated text (what the forward pass produced)
- the original text (what the forward pass started from)
- the current text (the edited translation)

and keeps only the records that still make sense:

- a compound survives if its translation is still a token of the current text
- a part of a surviving compound survives with it
- a part of only pruned compounds survives if it still stands alone at its
  recorded offset in the current text
- any other term survives if its translation is a token of the current text,
  or if its recorded offset is one of the places it occupied in the last
  translated text

Survivors whose offset moved are relocated to the nearest occurrence of
their token in the current text. The store is then cleared and rewritten
with exactly the survivors. Only one rebuild runs at a time; a call made
while another is in progress does nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from langtoggle.script import classify
from langtoggle.store import CompoundRecord, MappingStore, TermRecord
from langtoggle.tokens import token_positions

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one rebuild.

    Attributes:
        kept_terms: Identifiers of surviving terms
        pruned_terms: Identifiers of removed terms
        kept_compounds: Ids of surviving compounds
        pruned_compounds: Ids of removed compounds
        relocated: Identifiers (terms and compounds) whose offset changed
        original_tokens: Distinct tokens of the original text
    """
    kept_terms: list[str] = field(default_factory=list)
    pruned_terms: list[str] = field(default_factory=list)
    kept_compounds: list[str] = field(default_factory=list)
    pruned_compounds: list[str] = field(default_factory=list)
    relocated: list[str] = field(default_factory=list)
    original_tokens: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.pruned_terms or self.pruned_compounds or self.relocated)


def _nearest(position: int, candidates: list[int]) -> int:
    return min(candidates, key=lambda p: (abs(p - position), p))


class Reconciler:
    """Repairs a ``MappingStore`` against an edited document.

    Usage:
        reconciler = Reconciler(store)
        result = reconciler.rebuild(last_translated, original, current)
    """

    def __init__(self, store: MappingStore):
        self.store = store
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def rebuild(self, last_translated: str, original: str, current: str) -> Optional[ReconcileResult]:
        """Prune and relocate records to match ``current``.

        Returns:
            ReconcileResult, or None if another rebuild is in progress
        """
        if self._busy:
            logger.debug("Rebuild already in progress, skipping")
            return None
        self._busy = True
        try:
            return self._rebuild(last_translated, original, current)
        finally:
            self._busy = False

    def _rebuild(self, last_translated: str, original: str, current: str) -> ReconcileResult:
        script = classify(last_translated)
        last_positions = token_positions(last_translated)
        current_positions = token_positions(current)
        original_positions = token_positions(original)
        logger.debug(
            f"Rebuilding map ({script.value}): {len(last_positions)} last, "
            f"{len(current_positions)} current, {len(original_positions)} original tokens"
        )

        result = ReconcileResult(original_tokens=len(original_positions))
        terms = self.store.terms()
        compounds = self.store.compounds()

        kept_compounds: dict[str, CompoundRecord] = {}
        for compound_id, compound in compounds.items():
            found = current_positions.get(compound.translated, [])
            if found:
                kept_compounds[compound_id] = compound
                logger.debug(f"Kept compound {compound_id} -> '{compound.original}' (found at {found})")
            else:
                result.pruned_compounds.append(compound_id)
                logger.debug(f"Pruned compound {compound_id} -> '{compound.original}'")

        kept_terms: dict[str, TermRecord] = {}
        for identifier, term in terms.items():
            in_current = current_positions.get(term.translated, [])
            in_last = last_positions.get(term.translated, [])

            if any(cid in kept_compounds for cid in term.compound_ids):
                kept_terms[identifier] = term
                continue

            if term.compound_ids and term.position not in in_current:
                logger.debug(f"Pruned term {identifier} -> '{term.original}' (part of pruned compound)")
                result.pruned_terms.append(identifier)
                continue

            if in_current or term.position in in_last:
                kept_terms[identifier] = term
                logger.debug(f"Kept term {identifier} -> '{term.original}' at {term.position}")
            else:
                result.pruned_terms.append(identifier)
                logger.debug(f"Pruned term {identifier} -> '{term.original}' (not in current or last text)")

        # relocate compounds first so their parts can move by the same delta
        new_compounds: list[CompoundRecord] = []
        deltas: dict[str, int] = {}
        for compound_id, compound in kept_compounds.items():
            parts = [p for p in compound.part_ids if p in kept_terms]
            if not parts:
                result.pruned_compounds.append(compound_id)
                continue
            found = current_positions[compound.translated]
            position = compound.position if compound.position in found else _nearest(compound.position, found)
            deltas[compound_id] = position - compound.position
            if position != compound.position:
                result.relocated.append(compound_id)
            new_compounds.append(replace(compound, part_ids=parts, position=position))

        surviving_compounds = {c.compound_id for c in new_compounds}
        new_terms: list[TermRecord] = []
        for identifier, term in kept_terms.items():
            compound_ids = [cid for cid in term.compound_ids if cid in surviving_compounds]
            position = term.position
            owner = next((cid for cid in compound_ids if cid in deltas), None)
            if owner is not None:
                position += deltas[owner]
            else:
                found = current_positions.get(term.translated, [])
                if found and position not in found:
                    position = _nearest(position, found)
            if position != term.position:
                result.relocated.append(identifier)
            new_terms.append(replace(term, position=position, compound_ids=compound_ids))

        self.store.replace(new_terms, new_compounds)
        result.kept_terms = [t.identifier for t in new_terms]
        result.kept_compounds = [c.compound_id for c in new_compounds]
        logger.info(
            f"Map rebuilt: terms={len(new_terms)} (pruned {len(result.pruned_terms)}), "
            f"compounds={len(new_compounds)} (pruned {len(result.pruned_compounds)})"
        )
        return result
