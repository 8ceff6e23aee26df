"""
Tests for translation sessions.

Tests cover:
- Toggling between original and target language
- Errors for missing languages and dictionaries
- Session state persisted across processes
- Reconciliation of edits before translating back
- Dictionary edits while in target mode
"""

import json

import pytest

from langtoggle.dictionary import DictionaryNotFoundError, DictionaryRepository
from langtoggle.session import MissingLanguageError, TranslationSession
from langtoggle.store import JsonFileKeyValueStore


@pytest.fixture
def repository(tmp_path):
    directory = tmp_path / "dicts"
    directory.mkdir()
    (directory / "de.json").write_text(
        json.dumps({"Hallo": ["Hello", "Hi"], "Welt": ["World"]}),
        encoding="utf-8",
    )
    return DictionaryRepository(directory)


@pytest.fixture
def session(repository):
    return TranslationSession(repository)


class TestToggle:
    """Test switching languages."""

    def test_round_trip(self, session):
        """Toggling twice restores the text."""
        translated = session.toggle("Hello World", language="de")
        assert translated == "Hallo Welt"
        assert session.is_target
        assert session.language == "de"
        assert session.last_original_text == "Hello World"
        assert session.last_translated_text == "Hallo Welt"

        assert session.toggle(translated) == "Hello World"
        assert not session.is_target
        assert len(session.store) == 0
        assert session.last_translated_text is None

    def test_remembers_language(self, session):
        """The last language is reused when none is given."""
        session.toggle(session.toggle("Hello", language="de"))
        assert session.toggle("World") == "Welt"

    def test_missing_language(self, session):
        """Going to target without a language fails."""
        with pytest.raises(MissingLanguageError):
            session.toggle("Hello")

    def test_missing_dictionary_leaves_store(self, session):
        """A failed load does not touch the store."""
        session.store.add_term("x_1", "x", "x", 0)
        with pytest.raises(DictionaryNotFoundError):
            session.to_target("Hello", "fr")
        assert "x_1" in session.store
        assert not session.is_target

    def test_state_survives_restart(self, repository, tmp_path):
        """A new session over the same state file continues the toggle."""
        state = tmp_path / "state.json"
        first = TranslationSession(repository, JsonFileKeyValueStore(state))
        translated = first.to_target("Hi World", "de")

        second = TranslationSession(repository, JsonFileKeyValueStore(state))
        assert second.is_target
        assert second.language == "de"
        assert second.to_original(translated) == "Hi World"

    def test_progress_passed_through(self, session):
        """Progress callbacks see every token."""
        calls = []
        session.to_target("Hello World", "de", progress=lambda d, t: calls.append(d))
        assert calls == [1, 2, 3]


class TestEditedDocument:
    """Test translating back after edits."""

    def test_inserted_word(self, session):
        """An inserted untranslated word survives and mappings are reconciled."""
        session.to_target("Hello World", "de")
        assert session.to_original("Hallo neue Welt") == "Hello neue World"
        assert session.last_reconcile.relocated == ["welt_1"]

    def test_unchanged_text_skips_reconcile(self, session):
        """No rebuild runs when nothing was edited."""
        translated = session.to_target("Hello World", "de")
        session.to_original(translated)
        assert session.last_reconcile is None

    def test_register_word(self, session, repository):
        """A typed compound is mapped and learned by the dictionary."""
        session.to_target("Hello", "de")
        current = "Hallo HalloWelt"
        compound_id = session.register_word("HalloWelt", 6, current)
        assert session.store.get_compound(compound_id).original == "HelloWorld"
        assert repository.load("de").synonyms("HalloWelt") == ["HelloWorld"]
        assert session.to_original(current) == "Hello HelloWorld"


class TestDictionaryEdits:
    """Test adding and removing dictionary meanings in target mode."""

    def test_add_to_dictionary(self, session, repository):
        """A new term is saved and the occurrence is mapped."""
        session.to_target("Hello World", "de")
        current = "Hallo Welt Erde"
        identifier = session.add_to_dictionary("Erde", "Earth", 11, current)
        assert identifier == "erde_1"
        assert repository.load("de").synonyms("Erde") == ["Earth"]
        assert session.to_original(current) == "Hello World Earth"

    def test_add_creates_dictionary(self, repository):
        """Adding to a language without a file creates it."""
        session = TranslationSession(repository)
        session.kv.set(session._key("language"), "fr")
        session.add_to_dictionary("Monde", "World", 0, "Monde")
        assert repository.load("fr").synonyms("Monde") == ["World"]

    def test_remove_remaps_to_default(self, session):
        """Occurrences of a removed meaning switch to the remaining default."""
        session.to_target("Hi World", "de")
        assert session.remove_from_dictionary("Hallo", "Hi") == ["hallo_1"]
        assert session.store.get_term("hallo_1").original == "Hello"
        assert session.to_original("Hallo Welt") == "Hello World"

    def test_remove_last_meaning_unmaps(self, session, repository):
        """Occurrences are unmapped when no meaning remains."""
        session.to_target("World and World", "de")
        removed = session.remove_from_dictionary("Welt", "World")
        assert removed == ["welt_2", "welt_1"]
        assert "welt_1" not in session.store
        assert "Welt" not in repository.load("de")
        assert session.to_original("Welt and Welt") == "Welt and Welt"

    def test_remove_unknown_meaning(self, session):
        """Removing a meaning the term does not have changes nothing."""
        session.to_target("Hello", "de")
        assert session.remove_from_dictionary("Hallo", "Earth") == []
        assert session.store.get_term("hallo_1").original == "Hello"

    def test_remove_without_language(self, session):
        """Dictionary edits need a selected language."""
        with pytest.raises(MissingLanguageError):
            session.remove_from_dictionary("Hallo", "Hi")
