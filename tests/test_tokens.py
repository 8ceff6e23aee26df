"""
Tests for script classification and tokenization.

Tests cover:
- Script priority for mixed text
- Lossless tokenization across scripts
- Token kinds and offsets
- Position sets used by reconciliation
"""

import pytest

from langtoggle.script import Script, classify, is_latin
from langtoggle.tokens import TokenKind, is_word, iter_tokens, token_positions, tokenize


class TestClassify:
    """Test script classification."""

    def test_latin(self):
        """Plain ASCII text is latin."""
        assert classify("Hello") is Script.LATIN
        assert is_latin("Hello")

    def test_empty_is_latin(self):
        """Empty text falls back to latin."""
        assert classify("") is Script.LATIN

    def test_cyrillic(self):
        """Russian letters are cyrillic."""
        assert classify("Привет") is Script.CYRILLIC

    def test_devanagari(self):
        """Hindi text is devanagari."""
        assert classify("नमस्ते") is Script.DEVANAGARI

    def test_logographic(self):
        """CJK ideographs are logographic."""
        assert classify("你好") is Script.LOGOGRAPHIC

    def test_priority_logographic_over_others(self):
        """A single ideograph wins over every other script."""
        assert classify("Привет你") is Script.LOGOGRAPHIC
        assert classify("abc नमस्ते 世") is Script.LOGOGRAPHIC

    def test_priority_devanagari_over_cyrillic(self):
        """Devanagari wins over cyrillic."""
        assert classify("Мир नमस्ते") is Script.DEVANAGARI

    def test_priority_cyrillic_over_latin(self):
        """Cyrillic wins over latin."""
        assert classify("Hello Мир") is Script.CYRILLIC
        assert not is_latin("Hello Мир")


class TestTokenize:
    """Test the lossless tokenizer."""

    @pytest.mark.parametrize("text", [
        "Hello World",
        "def foo(x: int) -> str:\n    return x",
        "  leading and trailing  ",
        "Привет, мир!",
        "你好世界。",
        "नमस्ते दुनिया",
        "mixedПривет42 ... ??",
        "",
    ])
    def test_round_trip(self, text):
        """Joining the tokens reproduces the input."""
        assert "".join(tokenize(text)) == text

    def test_maximal_runs(self):
        """Words, symbols and whitespace form maximal runs."""
        assert tokenize("Hello,  World!!") == ["Hello", ",", "  ", "World", "!!"]

    def test_digits_are_word_characters(self):
        """Numbers join the surrounding word run."""
        assert tokenize("abc123 x") == ["abc123", " ", "x"]

    def test_combining_marks_stay_in_word(self):
        """Combining marks do not break a word."""
        assert tokenize("नमस्ते") == ["नमस्ते"]

    def test_is_word(self):
        """Only letter/mark/number runs are words."""
        assert is_word("Hello")
        assert is_word("Мир")
        assert not is_word("->")
        assert not is_word("  ")
        assert not is_word("")


class TestIterTokens:
    """Test tokens with offsets."""

    def test_offsets_and_kinds(self):
        """Each token knows its start offset and kind."""
        tokens = list(iter_tokens("a: b"))
        assert [(t.text, t.start, t.kind) for t in tokens] == [
            ("a", 0, TokenKind.WORD),
            (":", 1, TokenKind.SYMBOL),
            (" ", 2, TokenKind.SPACE),
            ("b", 3, TokenKind.WORD),
        ]

    def test_end_and_is_word(self):
        """Token.end is start plus length."""
        token = list(iter_tokens("xx Hallo"))[-1]
        assert token.end == 8
        assert token.is_word

    def test_token_positions(self):
        """Position sets list every offset of every token."""
        positions = token_positions("Hallo Welt Hallo")
        assert positions["Hallo"] == [0, 11]
        assert positions["Welt"] == [6]
        assert positions[" "] == [5, 10]
