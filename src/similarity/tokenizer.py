# src/similarity/tokenizer.py — v1
"""Keyword extraction for quote text.

Lower-cases, strips punctuation, splits on whitespace, drops short tokens and
a fixed English stop-word list.
"""

from __future__ import annotations

import re

MIN_TOKEN_LENGTH = 3

STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "can", "shall", "this", "that", "these", "those",
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "us",
    "them", "my", "your", "his", "its", "our", "their", "not", "no", "yes",
})

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> set[str]:
    """Return the de-duplicated keyword set of ``text``.

    Empty or punctuation-only text yields an empty set.
    """
    if not text:
        return set()
    cleaned = _PUNCTUATION_RE.sub("", text.lower())
    return {
        word
        for word in cleaned.split()
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOP_WORDS
    }
