"""
Tests for occurrence-indexed identifiers.

Tests cover:
- Identifier formatting and parsing
- Case-insensitive occurrence counting
- Incremental counting equals full rescans
- Type-annotation detection
"""

import pytest

from langtoggle.config import TranslatorConfig
from langtoggle.identifiers import (
    IdentifierScheme,
    OccurrenceCounter,
    TextBuffer,
    count_occurrences,
    identifier_at,
    identifier_base,
    is_annotation_position,
    make_identifier,
    parse_identifier,
)


class TestIdentifierFormat:
    """Test building and parsing identifiers."""

    def test_latin_base_lowercased(self):
        """Latin bases are lower-cased."""
        assert identifier_base("Welt") == "welt"

    def test_non_latin_base_verbatim(self):
        """Other scripts keep their text as is."""
        assert identifier_base("Мир") == "Мир"

    def test_make_identifier(self):
        """Occurrence and type suffix are appended."""
        assert make_identifier("welt", 2) == "welt_2"
        assert make_identifier("welt", 2, True) == "welt_2_type"

    def test_parse_identifier(self):
        """Parsing recovers the parts."""
        parsed = parse_identifier("welt_2_type")
        assert parsed.base == "welt"
        assert parsed.occurrence == 2
        assert parsed.is_type

    def test_parse_base_with_underscore(self):
        """Underscores inside the base are kept."""
        parsed = parse_identifier("my_var_3")
        assert parsed.base == "my_var"
        assert parsed.occurrence == 3
        assert not parsed.is_type

    def test_parse_invalid(self):
        """Strings without an occurrence number are rejected."""
        assert parse_identifier("compound") is None


class TestOccurrenceCounting:
    """Test occurrence counting."""

    def test_case_insensitive(self):
        """Matches ignore case."""
        assert count_occurrences("welt", "Welt und WELT") == 2

    def test_substring_matches_count(self):
        """Matches inside longer words count too."""
        assert count_occurrences("welt", "Weltall") == 1

    def test_non_overlapping(self):
        """Overlapping matches count once."""
        assert count_occurrences("aa", "aaa") == 1

    def test_identifier_at(self):
        """identifier_at counts matches before the offset."""
        text = "Welt und Welt"
        assert identifier_at(text, 0, "Welt") == "welt_1"
        assert identifier_at(text, 9, "Welt") == "welt_2"
        assert identifier_at(text, 9, "Welt", annotated=True) == "welt_2_type"


class TestTextBuffer:
    """Test the append-only buffer."""

    def test_slice_across_pieces(self):
        """Slices may span several appended pieces."""
        buffer = TextBuffer()
        for piece in ["Hal", "lo", " ", "Welt"]:
            buffer.append(piece)
        assert buffer.text() == "Hallo Welt"
        assert buffer.slice(2, 8) == "llo We"
        assert buffer.tail(4) == "Welt"
        assert buffer.tail(50) == "Hallo Welt"
        assert buffer.length == 10


class TestIncrementalCounter:
    """Test the incremental counter against full rescans."""

    @pytest.mark.parametrize("pieces,base", [
        (["Wel", "t We", "lt", "WELT", "x"], "welt"),
        (["a", "a", "a", "a", "a"], "aa"),
        (["Мир", " ", "мир", "Мир"], "Мир"),
        (["ab", "c", "abc", "", "ab"], "abc"),
    ])
    def test_matches_rescan(self, pieces, base):
        """Counting after every piece equals counting the whole prefix."""
        counter = OccurrenceCounter()
        prefix = ""
        for piece in pieces:
            counter.feed(piece)
            prefix += piece
            assert counter.count(base) == count_occurrences(base, prefix)

    def test_count_before_feed(self):
        """An empty prefix has no matches."""
        assert OccurrenceCounter().count("welt") == 0


class TestIdentifierScheme:
    """Test identifier assignment during a pass."""

    def test_occurrences_increase(self):
        """Repeated words get increasing occurrence numbers."""
        scheme = IdentifierScheme()
        assert scheme.identifier_for("Welt") == "welt_1"
        scheme.feed("Welt ")
        assert scheme.identifier_for("Welt") == "welt_2"
        assert scheme.position == 5

    def test_identifiers_for_pair(self):
        """Plain and type variants share base and occurrence."""
        scheme = IdentifierScheme()
        assert scheme.identifiers_for("Hallo") == ("hallo_1", "hallo_1_type")

    @pytest.mark.parametrize("prefix,expected", [
        ("x: ", True),
        ("x:", True),
        ("def f() -> ", True),
        ("x = ", False),
        ("", False),
        (":" + " " * 20, False),
    ])
    def test_annotation_detection(self, prefix, expected):
        """Only ':' or '->' followed by whitespace inside the window count."""
        assert is_annotation_position(prefix) is expected

    def test_window_configurable(self):
        """A larger window sees markers further back."""
        config = TranslatorConfig(annotation_window=30)
        assert is_annotation_position(":" + " " * 20, config)

    def test_markers_disabled(self):
        """Without markers nothing is an annotation."""
        config = TranslatorConfig(annotation_markers=())
        assert not is_annotation_position("x: ", config)
