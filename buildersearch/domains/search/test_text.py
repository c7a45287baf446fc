"""
Tests for tokenization, record serialization and fuzzy matching.
"""

from __future__ import annotations

from .text import fuzzy_match, serialize_record, tokenize


# --- Tokenizer Tests ---


def test_tokenize_lowercases_and_splits() -> None:
    """Test tokens are lowercase and split on whitespace."""
    assert tokenize("Red  Shoes\tFOR\nsale") == ["red", "shoes", "for", "sale"]


def test_tokenize_strips_punctuation() -> None:
    """Test punctuation is removed from tokens."""
    assert tokenize("hello, world! (react)") == ["hello", "world", "react"]


def test_tokenize_drops_short_tokens() -> None:
    """Test tokens of two characters or fewer are dropped."""
    assert tokenize("a an the ai app") == ["the", "app"]


def test_tokenize_length_checked_after_stripping() -> None:
    """Test a word that is mostly punctuation does not survive as a short token."""
    assert tokenize("ab!! ... go") == []


def test_tokenize_empty_and_none() -> None:
    """Test empty input yields no tokens."""
    assert tokenize("") == []
    assert tokenize(None) == []
    assert tokenize("   ") == []


def test_tokenize_keeps_digits_and_underscores() -> None:
    """Test word characters other than letters survive."""
    assert tokenize("error_404 v2.0") == ["error_404", "v20"]


def test_tokenize_strips_non_ascii_letters() -> None:
    """Test only ASCII letters, digits and underscores count as word characters."""
    assert tokenize("Café naïve résumé") == ["caf", "nave", "rsum"]


# --- Serialization Tests ---


def test_serialize_record_is_compact_lowercase_json() -> None:
    """Test serialized text matches compact JSON, lowercased."""
    assert serialize_record({"Title": "Red Shoes", "views": 5}) == '{"title":"red shoes","views":5}'


def test_serialize_record_keeps_unicode() -> None:
    """Test non-ASCII text is not escaped."""
    assert "café" in serialize_record({"name": "Café"})


# --- Fuzzy Match Tests ---


def test_fuzzy_match_subsequence() -> None:
    """Test ordered subsequence is a match."""
    assert fuzzy_match("cartage", "cat") is True


def test_fuzzy_match_missing_characters() -> None:
    """Test absent characters are not a match."""
    assert fuzzy_match("dog", "cat") is False


def test_fuzzy_match_order_matters() -> None:
    """Test characters out of order are not a match."""
    assert fuzzy_match("tac", "cat") is False


def test_fuzzy_match_exact_and_empty() -> None:
    """Test exact text and empty pattern both match."""
    assert fuzzy_match("cat", "cat") is True
    assert fuzzy_match("anything", "") is True
    assert fuzzy_match("", "cat") is False


def test_fuzzy_match_pattern_longer_than_text() -> None:
    """Test a pattern longer than the text cannot match."""
    assert fuzzy_match("ca", "cat") is False
