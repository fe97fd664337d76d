"""
Hypothesis Property-Based Tests for the hypervector algebra
===========================================================
Algebraic properties of bind / bundle / invert / distance on both
representations, checked over generated vectors.
"""

import numpy as np
from hypothesis import given, settings, HealthCheck
import hypothesis.strategies as st

from hyperclass.core.hdv import (
    BinaryHDV,
    DenseHDV,
    bind,
    bundle,
    inverted,
)


# Use smaller dimension for faster property tests
TEST_DIMENSION = 256


@st.composite
def binary_hdv_strategy(draw, dimension: int = TEST_DIMENSION):
    """Generate a random BinaryHDV vector."""
    n_bytes = dimension // 8
    byte_list = draw(st.lists(st.integers(min_value=0, max_value=255), min_size=n_bytes, max_size=n_bytes))
    return BinaryHDV(np.array(byte_list, dtype=np.uint8), dimension)


@st.composite
def polar_hdv_strategy(draw, dimension: int = TEST_DIMENSION):
    """Generate a random {+1, -1} DenseHDV vector."""
    signs = draw(st.lists(st.sampled_from([-1, 1]), min_size=dimension, max_size=dimension))
    return DenseHDV(signs, dimension)


@st.composite
def dense_hdv_strategy(draw, dimension: int = 32):
    """Generate a small-magnitude integer DenseHDV vector."""
    values = draw(st.lists(st.integers(min_value=-50, max_value=50), min_size=dimension, max_size=dimension))
    return DenseHDV(values, dimension)


@st.composite
def invert_range_strategy(draw, dimension: int = TEST_DIMENSION):
    start = draw(st.integers(min_value=0, max_value=dimension - 1))
    end = draw(st.integers(min_value=start + 1, max_value=dimension))
    return start, end


class TestBindProperties:
    """bind() is commutative, and self-inverse for XOR and polar vectors."""

    @given(a=binary_hdv_strategy(), b=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_commutative(self, a, b):
        assert bind(a, b) == bind(b, a)

    @given(a=binary_hdv_strategy(), b=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_self_inverse(self, a, b):
        assert bind(bind(a, b), b) == a

    @given(a=polar_hdv_strategy(), b=polar_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_polar_self_inverse(self, a, b):
        assert bind(bind(a, b), b) == a

    @given(a=binary_hdv_strategy(), b=binary_hdv_strategy(), c=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_bind_preserves_distance(self, a, b, c):
        assert bind(a, c).distance(bind(b, c)) == a.distance(b)


class TestDistanceProperties:
    @given(a=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_identity(self, a):
        assert a.distance(a) == 0.0

    @given(a=dense_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_dense_identity(self, a):
        assert a.distance(a) == 0.0

    @given(a=dense_hdv_strategy(), b=dense_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_dense_bounded_and_symmetric(self, a, b):
        d = a.distance(b)
        assert 0.0 <= d <= 2.0
        assert abs(d - b.distance(a)) < 1e-12

    @given(a=binary_hdv_strategy(), b=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_bounded(self, a, b):
        assert 0.0 <= a.distance(b) <= 1.0

    @given(a=binary_hdv_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_inverse_is_farthest(self, a):
        assert a.distance(inverted(a)) == 1.0


class TestInvertProperties:
    @given(a=binary_hdv_strategy(), bounds=invert_range_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_range_invert_is_involution(self, a, bounds):
        start, end = bounds
        assert a.copy().invert(start, end).invert(start, end) == a

    @given(a=binary_hdv_strategy(), bounds=invert_range_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_range_invert_moves_by_range_length(self, a, bounds):
        start, end = bounds
        flipped = a.copy().invert(start, end)
        assert a.hamming_distance(flipped) == end - start

    @given(a=polar_hdv_strategy(), bounds=invert_range_strategy())
    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_polar_range_invert_only_touches_range(self, a, bounds):
        start, end = bounds
        flipped = a.copy().invert(start, end)
        changed = np.flatnonzero(flipped.data != a.data)
        assert changed.tolist() == list(range(start, end))


class TestBundleProperties:
    @given(a=binary_hdv_strategy(), b=binary_hdv_strategy())
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_majority_follows_repeated_vector(self, a, b):
        assert bundle([a, b, a]) == a

    @given(vectors=st.lists(dense_hdv_strategy(), min_size=1, max_size=5))
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_dense_bundle_order_independent(self, vectors):
        assert bundle(vectors) == bundle(list(reversed(vectors)))

    @given(vectors=st.lists(binary_hdv_strategy(), min_size=1, max_size=5))
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_binary_text_roundtrip(self, vectors):
        for v in vectors:
            assert BinaryHDV.from_text(v.to_text(), TEST_DIMENSION) == v
