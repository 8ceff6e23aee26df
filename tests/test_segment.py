"""
Tests for compound segmentation.
"""

import pytest

from langtoggle.segment import is_compound, segment, segment_greedy, split_latin, split_mixed


class TestLatinSegmentation:
    """Test case-transition splitting."""

    def test_camel_case(self):
        """camelCaseWord splits into three parts."""
        assert segment("camelCaseWord") == ["camel", "Case", "Word"]

    def test_lowercase_single_part(self):
        """A word without case transitions is not a compound."""
        parts = segment("lowercase")
        assert parts == ["lowercase"]
        assert not is_compound(parts)

    def test_pascal_case(self):
        """PascalCase splits before each capital."""
        assert segment("CamelCase") == ["Camel", "Case"]

    def test_digits_kept(self):
        """Digits stay attached to the piece they follow."""
        parts = split_latin("utf8Decoder")
        assert "".join(parts) == "utf8Decoder"
        assert parts == ["utf8", "Decoder"]

    @pytest.mark.parametrize("token", ["version2", "abc123", "42", "Version2"])
    def test_digits_without_case_transition(self, token):
        """Digits alone never turn a word into a compound."""
        parts = segment(token)
        assert parts == [token]
        assert not is_compound(parts)

    def test_acronym(self):
        """Each capital of an acronym starts a new part."""
        assert split_latin("HTTPServer") == ["H", "T", "T", "P", "Server"]


class TestGreedySegmentation:
    """Test greedy longest match."""

    def test_longest_match_wins(self):
        """The longest vocabulary word at each position is taken."""
        vocabulary = {"ab", "abc", "d"}.__contains__
        assert segment_greedy("abcd", vocabulary) == ["abc", "d"]

    def test_unknown_characters_one_by_one(self):
        """Unknown text degrades to single characters."""
        assert segment_greedy("xyz", lambda s: False) == ["x", "y", "z"]

    def test_no_vocabulary(self):
        """Without a vocabulary every character is its own piece."""
        assert segment_greedy("мир", None) == ["м", "и", "р"]

    def test_max_length(self):
        """Probes never exceed max_length."""
        vocabulary = {"世界你好", "世界你好吗"}.__contains__
        assert segment_greedy("世界你好吗", vocabulary, max_length=4) == ["世界你好", "吗"]


class TestMixedSegmentation:
    """Test script-run splitting."""

    def test_logographic_with_vocabulary(self):
        """Ideographs are matched greedily against the vocabulary."""
        vocabulary = {"你好", "世界"}.__contains__
        assert segment("你好世界", vocabulary) == ["你好", "世界"]

    def test_cyrillic_words(self):
        """Cyrillic runs use uncapped greedy matching."""
        vocabulary = {"привет", "мир"}.__contains__
        assert segment("приветмир", vocabulary) == ["привет", "мир"]

    def test_script_change_closes_run(self):
        """Latin and cyrillic runs are segmented separately."""
        vocabulary = {"мир"}.__contains__
        assert split_mixed("helloWorldмир", vocabulary) == ["hello", "World", "мир"]

    def test_lossless(self):
        """Pieces always join back into the token."""
        token = "abcПриветDef你好"
        assert "".join(segment(token)) == token

    def test_empty(self):
        """Empty input yields no pieces."""
        assert split_mixed("") == []
