"""Tests for similarity ranking."""

from unittest.mock import patch

import pytest

from cicada.errors import DimensionMismatch
from cicada.ranking import rank_candidates

from tests.conftest import ORTHOGONAL, QUERY, make_passage


def test_threshold_and_top_k_keep_original_order():
    a = make_passage("a", QUERY)
    b = make_passage("b", ORTHOGONAL)
    c = make_passage("c", QUERY)

    results = rank_candidates(QUERY, [a, b, c], top_k=2, min_score=0.5)

    assert [r.passage.id for r in results] == ["a", "c"]
    assert all(r.score == pytest.approx(1.0) for r in results)


def test_empty_corpus_returns_empty():
    assert rank_candidates(QUERY, [], top_k=5, min_score=0.0) == []


def test_top_k_zero_returns_empty():
    assert rank_candidates(QUERY, [make_passage("a")], top_k=0, min_score=-1.0) == []


def test_equal_scores_keep_input_order():
    vec = [0.9, 0.4358898943540673, 0.0, 0.0]
    a = make_passage("A", vec)
    b = make_passage("B", vec)

    results = rank_candidates(QUERY, [a, b], top_k=10, min_score=0.0)

    assert [r.passage.id for r in results] == ["A", "B"]
    assert results[0].score == pytest.approx(0.9)


def test_sorted_descending_and_above_threshold():
    passages = [
        make_passage("low", [0.2, 1.0, 0.0, 0.0]),
        make_passage("high", [1.0, 0.1, 0.0, 0.0]),
        make_passage("neg", [-1.0, 0.0, 0.0, 0.0]),
        make_passage("mid", [1.0, 1.0, 0.0, 0.0]),
    ]

    results = rank_candidates(QUERY, passages, top_k=10, min_score=0.1)
    scores = [r.score for r in results]

    assert [r.passage.id for r in results] == ["high", "mid", "low"]
    assert scores == sorted(scores, reverse=True)
    assert all(s >= 0.1 for s in scores)


def test_negative_threshold_keeps_everything():
    passages = [make_passage("neg", [-1.0, 0.0, 0.0, 0.0]), make_passage("pos", QUERY)]
    results = rank_candidates(QUERY, passages, top_k=10, min_score=-1.0)
    assert [r.passage.id for r in results] == ["pos", "neg"]


def test_dimension_mismatch_aborts_ranking():
    passages = [make_passage("ok", QUERY), make_passage("bad", [1.0, 0.0])]
    with pytest.raises(DimensionMismatch) as exc_info:
        rank_candidates(QUERY, passages, top_k=10, min_score=0.0)
    assert exc_info.value.passage_id == "bad"


def test_no_candidates_skips_similarity():
    with patch("cicada.ranking.cosine_similarity") as mock_similarity:
        assert rank_candidates(QUERY, [], top_k=3, min_score=0.0) == []
    mock_similarity.assert_not_called()
