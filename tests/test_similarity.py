"""Tests for cosine similarity."""

import math

import pytest

from cicada.errors import DimensionMismatch
from cicada.similarity import cosine_similarity


def test_identical_vectors_score_one():
    assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0


def test_opposite_vectors_score_minus_one():
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_scale_invariant():
    assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)


def test_known_angle():
    assert cosine_similarity([1.0, 0.0], [1.0, 1.0]) == pytest.approx(1 / math.sqrt(2))


def test_zero_norm_scores_zero_not_nan():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0


def test_score_stays_in_range():
    score = cosine_similarity([0.1] * 1536, [0.1] * 1536)
    assert -1.0 <= score <= 1.0


def test_length_mismatch_raises():
    with pytest.raises(DimensionMismatch) as exc_info:
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0], passage_id="p9")
    assert exc_info.value.expected == 2
    assert exc_info.value.actual == 3
    assert exc_info.value.passage_id == "p9"
    assert exc_info.value.code == "DIMENSION_MISMATCH"
