"""Text preprocessing for keyword retrieval."""

from __future__ import annotations

import re

from traceguard.config.constants import STOPWORDS


def tokenize(text: str) -> list[str]:
    """Tokenize text for keyword matching: lowercase, strip punctuation, remove stopwords."""
    text = text.lower()
    text = re.sub(r"[^\w\s]", " ", text)
    tokens = text.split()
    return [t for t in tokens if t not in STOPWORDS and len(t) > 2]


def keyword_score(query: str, text: str) -> int:
    """One point per distinct query keyword present in ``text``, two more for the whole phrase."""
    text_lower = text.lower()
    text_tokens = set(tokenize(text))
    score = sum(1 for word in set(tokenize(query)) if word in text_tokens)
    phrase = query.strip().lower()
    if phrase and phrase in text_lower:
        score += 2
    return score
