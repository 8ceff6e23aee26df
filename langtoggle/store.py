"""
Term and compound store.

The store owns every term and compound record of one open document. Records
live in typed in-memory tables (identifier -> record) with a secondary index
from compound translation to compound ids, and every change is written
through to an injectable key-value store so the mapping survives restarts.

Key layout (``ns`` is the namespace, default ``langtoggle``):
- ``ns:term:<identifier>``      -> {original, translated, position, compound_ids}
- ``ns:compound:<compound_id>`` -> {original, translated, parts, position}
- ``ns:compound_counter``       -> last compound number handed out

Damaged records read back from the key-value store are repaired, never
fatal: a non-numeric position becomes 0, a non-list id list becomes empty,
and a compound left without parts is dropped.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from langtoggle.config import STORE_NAMESPACE
from langtoggle.identifiers import identifier_at, make_identifier, parse_identifier

logger = logging.getLogger(__name__)


# ============================================================================
# Key-value stores
# ============================================================================

class KeyValueStore(ABC):
    """Minimal persistent key-value interface the mapping store needs."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value; ``None`` deletes the key."""
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        pass

    def delete(self, key: str) -> None:
        self.set(key, None)

    def flush(self) -> None:
        """Make pending writes durable (no-op for in-memory stores)."""


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and single-process use."""

    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self.data.pop(key, None)
        else:
            self.data[key] = value

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self.data if k.startswith(prefix)]


class JsonFileKeyValueStore(MemoryKeyValueStore):
    """Store persisted as one JSON file.

    Writes are buffered in memory; ``flush()`` replaces the file atomically
    (write to a temp file, then rename).
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        data: dict[str, Any] = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    data = loaded
                else:
                    logger.warning(f"State file {self.path} is not a JSON object, starting empty")
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning(f"Could not read state file {self.path}: {e}, starting empty")
        super().__init__(data)
        self._dirty = False

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self._dirty = True

    def flush(self) -> None:
        if not self._dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        self._dirty = False
        logger.debug(f"Flushed {len(self.data)} keys to {self.path}")


# ============================================================================
# Records
# ============================================================================

def _as_position(value: Any, label: str) -> int:
    if isinstance(value, bool):
        value = None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Malformed position {value!r} for {label}, using 0")
        return 0


def _as_string_list(value: Any, label: str) -> list[str]:
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    if value is not None:
        logger.warning(f"Malformed list {value!r} for {label}, using []")
    return []


@dataclass
class TermRecord:
    """One mapped token occurrence.

    Attributes:
        identifier: ``<base>_<occurrence>[_type]``
        original: Original-language text
        translated: Target-language text
        position: Offset of ``translated`` in the text that contains it
        compound_ids: Compounds this term is a part of
    """
    identifier: str
    original: str
    translated: str
    position: int = 0
    compound_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "translated": self.translated,
            "position": self.position,
            "compound_ids": list(self.compound_ids),
        }

    @classmethod
    def from_dict(cls, identifier: str, data: dict) -> TermRecord:
        return cls(
            identifier=identifier,
            original=str(data.get("original", "")),
            translated=str(data.get("translated", "")),
            position=_as_position(data.get("position"), identifier),
            compound_ids=_as_string_list(data.get("compound_ids"), identifier),
        )


@dataclass
class CompoundRecord:
    """A word whose translation is the concatenation of several terms."""
    compound_id: str
    original: str
    translated: str
    part_ids: list[str] = field(default_factory=list)
    position: int = 0

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "translated": self.translated,
            "parts": list(self.part_ids),
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, compound_id: str, data: dict) -> CompoundRecord:
        return cls(
            compound_id=compound_id,
            original=str(data.get("original", "")),
            translated=str(data.get("translated", "")),
            part_ids=_as_string_list(data.get("parts"), compound_id),
            position=_as_position(data.get("position"), compound_id),
        )


# ============================================================================
# Mapping store
# ============================================================================

class MappingStore:
    """Typed term/compound tables written through to a key-value store.

    Usage:
        store = MappingStore(MemoryKeyValueStore())
        store.add_term("hallo_1", "Hello", "Hallo", 0)
        store.get_term("hallo_1").original   # 'Hello'
    """

    def __init__(self, kv: Optional[KeyValueStore] = None, namespace: str = STORE_NAMESPACE):
        self.kv = kv if kv is not None else MemoryKeyValueStore()
        self.namespace = namespace
        self._terms: dict[str, TermRecord] = {}
        self._compounds: dict[str, CompoundRecord] = {}
        self._by_translated: dict[str, list[str]] = {}
        self.compound_counter = 0
        self.load()

    # -- keys ---------------------------------------------------------------

    @property
    def _term_prefix(self) -> str:
        return f"{self.namespace}:term:"

    @property
    def _compound_prefix(self) -> str:
        return f"{self.namespace}:compound:"

    @property
    def _counter_key(self) -> str:
        return f"{self.namespace}:compound_counter"

    def _write_term(self, record: TermRecord) -> None:
        self.kv.set(self._term_prefix + record.identifier, record.to_dict())

    def _write_compound(self, record: CompoundRecord) -> None:
        self.kv.set(self._compound_prefix + record.compound_id, record.to_dict())

    # -- loading ------------------------------------------------------------

    def load(self) -> None:
        """(Re)read all records from the key-value store."""
        self._terms.clear()
        self._compounds.clear()
        self._by_translated.clear()

        for key in self.kv.keys(self._term_prefix):
            identifier = key[len(self._term_prefix):]
            data = self.kv.get(key)
            if not isinstance(data, dict):
                logger.warning(f"Dropping malformed term record {key}")
                continue
            self._terms[identifier] = TermRecord.from_dict(identifier, data)

        for key in self.kv.keys(self._compound_prefix):
            compound_id = key[len(self._compound_prefix):]
            data = self.kv.get(key)
            if not isinstance(data, dict):
                logger.warning(f"Dropping malformed compound record {key}")
                continue
            record = CompoundRecord.from_dict(compound_id, data)
            if not record.part_ids:
                logger.warning(f"Dropping compound record {key} without parts")
                self.kv.delete(key)
                continue
            self._compounds[compound_id] = record
            self._index_compound(record)

        self.compound_counter = _as_position(self.kv.get(self._counter_key, 0), "compound counter")
        if self._terms or self._compounds:
            logger.debug(f"Loaded {len(self._terms)} terms, {len(self._compounds)} compounds")

    # -- terms --------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._terms

    def terms(self) -> dict[str, TermRecord]:
        return dict(self._terms)

    def get_term(self, identifier: str) -> Optional[TermRecord]:
        return self._terms.get(identifier)

    def original_of(self, identifier: str) -> Optional[str]:
        record = self._terms.get(identifier)
        return record.original if record else None

    def add_term(
        self,
        identifier: str,
        original: str,
        translated: str,
        position: int,
        compound_ids: Optional[Iterable[str]] = None,
    ) -> TermRecord:
        """Create or overwrite a term record."""
        record = TermRecord(identifier, original, translated, position, list(compound_ids or []))
        self._terms[identifier] = record
        self._write_term(record)
        logger.debug(f"Added term '{identifier}' -> '{original}' at {position}")
        return record

    def update_term(self, record: TermRecord) -> None:
        self._terms[record.identifier] = record
        self._write_term(record)

    def insert_term(self, original: str, translated: str, position: int, current_text: str) -> str:
        """Map a term inserted into ``current_text`` at ``position``.

        Later occurrences of the same base are renumbered up by one so their
        identifiers keep matching the text.

        Returns:
            The new term's identifier
        """
        identifier = identifier_at(current_text, position, translated)
        parsed = parse_identifier(identifier)
        self._shift_occurrences(parsed.base, parsed.occurrence, +1)
        self.add_term(identifier, original, translated, position)
        return identifier

    def remove_term(self, identifier: str) -> bool:
        """Delete a term, unlink it from compounds and renumber its base.

        Compounds left without parts are removed.
        """
        record = self._terms.get(identifier)
        if record is None:
            return False

        for compound_id in list(record.compound_ids):
            compound = self._compounds.get(compound_id)
            if compound is None:
                continue
            compound.part_ids = [p for p in compound.part_ids if p != identifier]
            if compound.part_ids:
                self._write_compound(compound)
                logger.debug(f"Removed part '{identifier}' from compound '{compound_id}'")
            else:
                self._drop_compound(compound)
                logger.debug(f"Removed empty compound '{compound_id}'")

        del self._terms[identifier]
        self.kv.delete(self._term_prefix + identifier)

        parsed = parse_identifier(identifier)
        if parsed is not None:
            self._shift_occurrences(parsed.base, parsed.occurrence + 1, -1)
        logger.debug(f"Removed term '{identifier}'")
        return True

    def _shift_occurrences(self, base: str, from_occurrence: int, delta: int) -> None:
        affected = []
        for identifier in self._terms:
            parsed = parse_identifier(identifier)
            if parsed and parsed.base == base and parsed.occurrence >= from_occurrence:
                affected.append((parsed.occurrence, identifier, parsed.is_type))
        # rename away from the free slot first so no identifier is overwritten
        affected.sort(reverse=delta > 0)
        for occurrence, identifier, is_type in affected:
            new_identifier = make_identifier(base, occurrence + delta, is_type)
            self._rename_term(identifier, new_identifier)
            logger.debug(f"Shifted '{identifier}' -> '{new_identifier}'")

    def _rename_term(self, old: str, new: str) -> None:
        record = self._terms.pop(old)
        self.kv.delete(self._term_prefix + old)
        record.identifier = new
        self._terms[new] = record
        self._write_term(record)
        for compound_id in record.compound_ids:
            compound = self._compounds.get(compound_id)
            if compound is not None:
                compound.part_ids = [new if p == old else p for p in compound.part_ids]
                self._write_compound(compound)

    # -- compounds ----------------------------------------------------------

    def compounds(self) -> dict[str, CompoundRecord]:
        return dict(self._compounds)

    def get_compound(self, compound_id: str) -> Optional[CompoundRecord]:
        return self._compounds.get(compound_id)

    def _index_compound(self, record: CompoundRecord) -> None:
        ids = self._by_translated.setdefault(record.translated, [])
        if record.compound_id not in ids:
            ids.append(record.compound_id)

    def _unindex_compound(self, record: CompoundRecord) -> None:
        ids = self._by_translated.get(record.translated, [])
        if record.compound_id in ids:
            ids.remove(record.compound_id)
        if not ids:
            self._by_translated.pop(record.translated, None)

    def add_compound(
        self,
        original: str,
        translated: str,
        part_ids: list[str],
        position: int,
    ) -> str:
        """Register a compound and link its parts back to it.

        Returns:
            The new compound id (``compound_<n>``)
        """
        self.compound_counter += 1
        compound_id = f"compound_{self.compound_counter}"
        record = CompoundRecord(compound_id, original, translated, list(part_ids), position)
        self._compounds[compound_id] = record
        self._index_compound(record)
        self._write_compound(record)
        self.kv.set(self._counter_key, self.compound_counter)

        for part_id in part_ids:
            part = self._terms.get(part_id)
            if part is not None and compound_id not in part.compound_ids:
                part.compound_ids.append(compound_id)
                self._write_term(part)

        logger.debug(f"Added compound '{compound_id}' -> '{original}' with parts {part_ids} at {position}")
        return compound_id

    def remove_compound(self, compound_id: str) -> bool:
        """Delete a compound; its parts stay as plain terms."""
        record = self._compounds.get(compound_id)
        if record is None:
            return False
        for part_id in record.part_ids:
            part = self._terms.get(part_id)
            if part is not None and compound_id in part.compound_ids:
                part.compound_ids.remove(compound_id)
                self._write_term(part)
        self._drop_compound(record)
        logger.debug(f"Removed compound '{compound_id}'")
        return True

    def _drop_compound(self, record: CompoundRecord) -> None:
        self._compounds.pop(record.compound_id, None)
        self._unindex_compound(record)
        self.kv.delete(self._compound_prefix + record.compound_id)

    def compound_for(self, translated: str, position: Optional[int] = None) -> Optional[CompoundRecord]:
        """Find the compound translated as ``translated``.

        A compound recorded at ``position`` is preferred; otherwise the most
        recently registered one wins.
        """
        ids = self._by_translated.get(translated)
        if not ids:
            return None
        if position is not None:
            for compound_id in ids:
                if self._compounds[compound_id].position == position:
                    return self._compounds[compound_id]
        return self._compounds[ids[-1]]

    # -- bulk ---------------------------------------------------------------

    def clear(self) -> None:
        """Remove every record and reset the compound counter."""
        for key in self.kv.keys(self._term_prefix) + self.kv.keys(self._compound_prefix):
            self.kv.delete(key)
        self._terms.clear()
        self._compounds.clear()
        self._by_translated.clear()
        self.compound_counter = 0
        self.kv.set(self._counter_key, 0)
        logger.debug("Cleared mapping state")

    def replace(self, terms: Iterable[TermRecord], compounds: Iterable[CompoundRecord]) -> None:
        """Clear the store and write exactly the given records.

        The compound counter keeps its value so new compound ids never reuse
        an id that was handed out before.
        """
        counter = self.compound_counter
        self.clear()
        for record in terms:
            self._terms[record.identifier] = record
            self._write_term(record)
        for record in compounds:
            self._compounds[record.compound_id] = record
            self._index_compound(record)
            self._write_compound(record)
        self.compound_counter = counter
        self.kv.set(self._counter_key, counter)

    def snapshot(self) -> dict:
        """Plain-dict view of all records (for display and debugging)."""
        return {
            "terms": {k: v.to_dict() for k, v in sorted(self._terms.items())},
            "compounds": {k: v.to_dict() for k, v in sorted(self._compounds.items())},
            "compound_counter": self.compound_counter,
        }
