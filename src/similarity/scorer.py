# src/similarity/scorer.py — v1
"""Multi-factor lexical similarity between quotes.

overall = keyword_sim * 0.4 + semantic_sim * 0.6

keyword_sim is the Jaccard coefficient of the two keyword sets.
semantic_sim is a weighted mean of three sub-scores:
  - author (0.5): 0.9 on exact case-insensitive match, else the fuzzy
    author similarity when it exceeds 0.7, else 0. The author weight stays in
    the denominator even when it contributes nothing, which pulls scores for
    dissimilar authors down.
  - tags (0.3): Jaccard of lowercased tags; 0.5 when neither side is tagged,
    0 when only one side is.
  - length (0.2): shorter text length over longer text length.

Pure and stateless: safe to call concurrently over request-local snapshots.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from quoterec.core.models import Quote, SimilarityResult, SimilarityScore
from quoterec.similarity.distance import author_similarity
from quoterec.similarity.tokenizer import tokenize

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.4
SEMANTIC_WEIGHT = 0.6

AUTHOR_WEIGHT = 0.5
TAG_WEIGHT = 0.3
LENGTH_WEIGHT = 0.2

EXACT_AUTHOR_SCORE = 0.9
FUZZY_AUTHOR_THRESHOLD = 0.7
NEUTRAL_TAG_SCORE = 0.5

MINIMUM_SIMILARITY_SCORE = 0.08
DEFAULT_LIMIT = 10


def jaccard(a: set[str], b: set[str]) -> float:
    """|A ∩ B| / |A ∪ B|, or 0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def keyword_similarity(target: Quote, candidate: Quote) -> float:
    return jaccard(tokenize(target.text), tokenize(candidate.text))


def tag_similarity(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    set_a = {t.lower() for t in tags_a}
    set_b = {t.lower() for t in tags_b}
    if not set_a and not set_b:
        return NEUTRAL_TAG_SCORE
    if not set_a or not set_b:
        return 0.0
    return jaccard(set_a, set_b)


def length_similarity(text_a: str, text_b: str) -> float:
    longest = max(len(text_a), len(text_b))
    if longest == 0:
        return 1.0
    return min(len(text_a), len(text_b)) / longest


def author_component(author_a: str, author_b: str) -> float:
    """Author sub-score before weighting (0 when names are too dissimilar)."""
    if author_a.lower() == author_b.lower():
        return EXACT_AUTHOR_SCORE
    similarity = author_similarity(author_a, author_b)
    if similarity > FUZZY_AUTHOR_THRESHOLD:
        return similarity
    return 0.0


def semantic_similarity(target: Quote, candidate: Quote) -> float:
    components = (
        (author_component(target.author, candidate.author), AUTHOR_WEIGHT),
        (tag_similarity(target.tags, candidate.tags), TAG_WEIGHT),
        (length_similarity(target.text, candidate.text), LENGTH_WEIGHT),
    )
    weighted = sum(value * weight for value, weight in components)
    applied = sum(weight for _, weight in components)
    return weighted / applied if applied > 0 else 0.0


class SimilarityScorer:
    """Scores and ranks candidate quotes against a target quote."""

    def __init__(self, min_score: float = MINIMUM_SIMILARITY_SCORE) -> None:
        self._min_score = min_score

    @property
    def min_score(self) -> float:
        return self._min_score

    def score(self, target: Quote, candidate: Quote) -> float:
        """Blended similarity in [0, 1]."""
        overall = (
            keyword_similarity(target, candidate) * KEYWORD_WEIGHT
            + semantic_similarity(target, candidate) * SEMANTIC_WEIGHT
        )
        return min(1.0, max(0.0, overall))

    def rank(
        self,
        target: Quote,
        pool: Sequence[Quote],
        limit: int = DEFAULT_LIMIT,
    ) -> SimilarityResult:
        """Rank ``pool`` against ``target``, best first.

        The target is skipped, candidates under the minimum score are dropped
        and equal scores keep their pool order. ``limit`` is expected to be
        validated by the caller.
        """
        scored: list[tuple[float, int, Quote]] = []
        for position, candidate in enumerate(pool):
            if candidate.id == target.id:
                continue
            value = self.score(target, candidate)
            if value >= self._min_score:
                scored.append((value, position, candidate))

        scored.sort(key=lambda item: (-item[0], item[1]))

        logger.debug(
            "Ranked %d/%d candidates for %s (limit=%d)",
            len(scored), len(pool), target.id, limit,
        )
        return SimilarityResult(
            target_id=target.id,
            scores=[
                SimilarityScore(quote=candidate, score=value)
                for value, _, candidate in scored[:limit]
            ],
        )
