import numpy as np
import pytest

from face_auth.app.errors import DegenerateVector, DimensionMismatch
from face_auth.models.base import LandmarkSet
from face_auth.pipeline.encoder import encode
from face_auth.pipeline.similarity import decide, score


def test_self_similarity_is_one():
    rng = np.random.default_rng(1)
    for _ in range(10):
        v = rng.normal(size=30)
        assert score(v, v) == pytest.approx(1.0)


def test_similarity_is_symmetric():
    rng = np.random.default_rng(2)
    a = rng.normal(size=12)
    b = rng.normal(size=12)
    assert score(a, b) == pytest.approx(score(b, a))
    assert -1.0 <= score(a, b) <= 1.0


def test_known_values():
    a = np.array([1, 0, 0, 0, 1, 0], dtype=float)
    b = np.array([0, 1, 0, 1, 0, 0], dtype=float)
    assert score(a, a) == pytest.approx(1.0)
    assert score(a, b) == pytest.approx(0.0)
    assert score(a, -a) == pytest.approx(-1.0)


def test_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        score(np.ones(6), np.ones(9))


def test_zero_vector_is_degenerate():
    zero = encode(LandmarkSet.from_xyz([(0, 0, 0)]))
    with pytest.raises(DegenerateVector):
        score(zero, zero)
    with pytest.raises(DegenerateVector):
        score(np.ones(3), zero)


def test_contract_errors_are_value_errors():
    with pytest.raises(ValueError):
        score(np.ones(2), np.ones(3))


def test_decide_is_strictly_greater_than():
    assert decide(0.95, 0.9)
    assert not decide(0.9, 0.9)
    assert not decide(0.5, 0.9)
    assert not decide(-1.0)
