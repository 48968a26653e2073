# src/similarity/distance.py — v1
"""Edit distance and fuzzy author-name matching.

``author_similarity`` is a lexical heuristic, not semantic name resolution:
"Twain" scores 0.8 against "Mark Twain" through substring containment, and
so does any short name that happens to occur inside a longer one.
"""

from __future__ import annotations

SUBSTRING_MATCH_SCORE = 0.8


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Two-row DP over b; previous[j] = distance(a[:i-1], b[:j])
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                current[j - 1] + 1,  # insertion
                previous[j] + 1,  # deletion
                previous[j - 1] + cost,  # substitution
            )
        previous = current
    return previous[-1]


def author_similarity(a: str, b: str) -> float:
    """Similarity of two author names in [0, 1].

    Exact (trimmed, case-insensitive) match gives 1.0, containment of one name
    in the other gives 0.8, otherwise the normalized edit distance.
    """
    name_a = a.strip().lower()
    name_b = b.strip().lower()

    if name_a == name_b:
        return 1.0

    if name_a in name_b or name_b in name_a:
        return SUBSTRING_MATCH_SCORE

    max_length = max(len(name_a), len(name_b))
    distance = edit_distance(name_a, name_b)
    return max(0.0, (max_length - distance) / max_length)
