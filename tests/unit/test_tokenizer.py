"""Tests for the keyword tokenizer and scorer."""

from traceguard.keyword_search.tokenizer import keyword_score, tokenize


def test_tokenize_basic():
    tokens = tokenize("The quick brown fox jumps over the lazy dog")
    assert "quick" in tokens
    assert "brown" in tokens
    assert "fox" in tokens
    # Stopwords removed
    assert "the" not in tokens


def test_tokenize_lowercase_and_punctuation():
    tokens = tokenize("Hello, World! How are you?")
    assert tokens == ["hello", "world", "you"]


def test_tokenize_empty():
    assert tokenize("") == []


def test_keyword_score_counts_distinct_keywords():
    text = "Traces and metrics are telemetry signals."
    assert keyword_score("traces traces metrics", text) == 2


def test_keyword_score_phrase_bonus():
    text = "Tail sampling keeps error traces."
    assert keyword_score("tail sampling", text) == 2 + 2


def test_keyword_score_no_overlap():
    assert keyword_score("bananas", "Traces and metrics.") == 0
