# tests/unit/similarity/test_scorer.py — v1
"""Tests for similarity/scorer.py — blended scores and ranking."""

from __future__ import annotations

import pytest

from quoterec.similarity.scorer import (
    MINIMUM_SIMILARITY_SCORE,
    SimilarityScorer,
    author_component,
    jaccard,
    keyword_similarity,
    length_similarity,
    semantic_similarity,
    tag_similarity,
)


class TestComponents:
    def test_jaccard(self):
        assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
        assert jaccard(set(), set()) == 0.0

    def test_tag_similarity_both_empty_is_neutral(self):
        assert tag_similarity([], []) == 0.5

    def test_tag_similarity_one_side_empty(self):
        assert tag_similarity(["work"], []) == 0.0
        assert tag_similarity([], ["work"]) == 0.0

    def test_tag_similarity_case_insensitive(self):
        assert tag_similarity(["Work", "life"], ["work"]) == pytest.approx(0.5)

    def test_length_similarity(self):
        assert length_similarity("abcd", "ab") == 0.5
        assert length_similarity("ab", "abcd") == 0.5
        assert length_similarity("", "") == 1.0

    def test_author_exact_match_caps_at_point_nine(self):
        assert author_component("Mark Twain", "mark twain") == 0.9

    def test_author_fuzzy_above_threshold(self):
        assert author_component("Jon Smith", "John Smith") == pytest.approx(0.9)
        assert author_component("Mark Twain", "Twain") == pytest.approx(0.8)

    def test_author_below_threshold_is_zero(self):
        assert author_component("Tim Notke", "Zadie Q") == 0.0

    def test_semantic_keeps_author_weight_when_authors_differ(self, make_quote):
        a = make_quote(id="a", text="abcdef", author="Plato", tags=["x"])
        b = make_quote(id="b", text="ghijkl", author="Zadie Q", tags=["x"])
        # (0 * 0.5 + 1 * 0.3 + 1 * 0.2) / 1.0
        assert semantic_similarity(a, b) == pytest.approx(0.5)


class TestScore:
    def test_related_quotes_same_author_and_tags(self, make_quote):
        target = make_quote(id="t", text="Hard work beats talent", author="A", tags=["work"])
        candidate = make_quote(
            id="c", text="Talent without hard work is nothing", author="A", tags=["work"],
        )
        scorer = SimilarityScorer()

        assert keyword_similarity(target, candidate) == pytest.approx(0.5)
        expected = 0.4 * 0.5 + 0.6 * (0.45 + 0.3 + 0.2 * 22 / 35)
        assert scorer.score(target, candidate) == pytest.approx(expected)
        assert scorer.score(target, candidate) == pytest.approx(0.7254, abs=1e-4)

    def test_unrelated_quotes_fall_below_threshold(self, make_quote):
        target = make_quote(
            id="t", text="Hard work beats talent", author="Tim Notke", tags=["work"],
        )
        candidate = make_quote(
            id="c", text="Oceans breathe slowly beneath moonlit tides",
            author="Zadie Q", tags=["nature"],
        )
        value = SimilarityScorer().score(target, candidate)
        assert value == pytest.approx(0.6 * 0.2 * 22 / 43)
        assert value < MINIMUM_SIMILARITY_SCORE

    def test_untagged_pair_has_neutral_tag_floor(self, make_quote):
        """Two untagged quotes always score at least 0.6 * 0.15."""
        target = make_quote(id="t", text="Hard work beats talent", author="Tim Notke")
        candidate = make_quote(
            id="c", text="Oceans breathe slowly beneath moonlit tides", author="Zadie Q",
        )
        value = SimilarityScorer().score(target, candidate)
        assert value == pytest.approx(0.6 * (0.15 + 0.2 * 22 / 43))
        assert value >= MINIMUM_SIMILARITY_SCORE

    def test_identical_content_is_bounded(self, make_quote):
        a = make_quote(id="a", tags=["life"])
        b = make_quote(id="b", tags=["life"])
        value = SimilarityScorer().score(a, b)
        assert value == pytest.approx(0.4 + 0.6 * 0.95)
        assert 0.0 <= value <= 1.0

    def test_symmetric_for_sample_pool(self, sample_pool):
        scorer = SimilarityScorer()
        for a in sample_pool:
            for b in sample_pool:
                assert scorer.score(a, b) == pytest.approx(scorer.score(b, a))


class TestRank:
    def test_excludes_target(self, sample_pool):
        result = SimilarityScorer().rank(sample_pool[0], sample_pool)
        assert result.target_id == "work-1"
        assert "work-1" not in result.quote_ids

    def test_sorted_descending_and_bounded(self, sample_pool):
        result = SimilarityScorer().rank(sample_pool[0], sample_pool)
        values = [s.score for s in result.scores]
        assert values == sorted(values, reverse=True)
        assert all(MINIMUM_SIMILARITY_SCORE <= v <= 1.0 for v in values)

    def test_best_match_first(self, sample_pool):
        result = SimilarityScorer().rank(sample_pool[0], sample_pool)
        assert result.quote_ids[0] == "work-2"

    def test_drops_unrelated(self, sample_pool):
        result = SimilarityScorer().rank(sample_pool[0], sample_pool)
        assert "ocean-1" not in result.quote_ids

    def test_min_score_override(self, sample_pool):
        result = SimilarityScorer(min_score=0.0).rank(sample_pool[0], sample_pool)
        assert "ocean-1" in result.quote_ids
        assert len(result.scores) == len(sample_pool) - 1

    def test_limit(self, sample_pool):
        result = SimilarityScorer(min_score=0.0).rank(sample_pool[0], sample_pool, limit=2)
        assert len(result.scores) == 2

    def test_deterministic(self, sample_pool):
        scorer = SimilarityScorer()
        first = scorer.rank(sample_pool[1], sample_pool)
        second = scorer.rank(sample_pool[1], sample_pool)
        assert first.quote_ids == second.quote_ids
        assert [s.score for s in first.scores] == [s.score for s in second.scores]

    def test_ties_keep_pool_order(self, make_quote):
        target = make_quote(id="t", text="Courage is grace under pressure", tags=["courage"])
        twins = [
            make_quote(id=f"c{i}", text="Courage is grace under fire", tags=["courage"])
            for i in range(4)
        ]
        scorer = SimilarityScorer()

        forward = scorer.rank(target, [target, *twins])
        backward = scorer.rank(target, [target, *reversed(twins)])

        assert forward.quote_ids == ["c0", "c1", "c2", "c3"]
        assert backward.quote_ids == ["c3", "c2", "c1", "c0"]

    def test_empty_pool(self, make_quote):
        target = make_quote(id="t")
        assert SimilarityScorer().rank(target, []).scores == []
        assert SimilarityScorer().rank(target, [target]).scores == []
