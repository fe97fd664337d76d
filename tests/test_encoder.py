"""
Tests for frequency binning and sample encoding.
"""

import numpy as np
import pytest
from hypothesis import given, settings
import hypothesis.strategies as st

from hyperclass.core.dataset import Dataset
from hyperclass.core.encoder import (
    MAX_FREQUENCY,
    MIN_FREQUENCY,
    Encoder,
    frequency_bin,
    frequency_bins,
)
from hyperclass.core.exceptions import (
    DimensionMismatchError,
    MemoryOperationError,
    OutOfRangeError,
    ValidationError,
)
from hyperclass.core.hdv import BinaryHDV, DenseHDV, bind, bundle
from hyperclass.core.memory import ChannelMemory, ContinuousItemMemory

D = 512
LEVELS = 10
CHANNELS = 6


@pytest.fixture
def dense_encoder(rng):
    channels = ChannelMemory(DenseHDV, D, CHANNELS, "polar", rng)
    items = ContinuousItemMemory(DenseHDV, D, LEVELS, "polar", rng)
    return Encoder(channels, items)


@pytest.fixture
def binary_encoder(rng):
    channels = ChannelMemory(BinaryHDV, D, CHANNELS, "binary", rng)
    items = ContinuousItemMemory(BinaryHDV, D, LEVELS, "binary", rng)
    return Encoder(channels, items)


class TestFrequencyBin:
    def test_bounds(self):
        assert frequency_bin(MIN_FREQUENCY, LEVELS) == 0
        assert frequency_bin(MAX_FREQUENCY, LEVELS) == LEVELS - 1

    def test_interior(self):
        assert frequency_bin(-0.95, LEVELS) == 0
        assert frequency_bin(0.05, LEVELS) == 5
        assert frequency_bin(0.99, LEVELS) == 9

    @pytest.mark.parametrize("value", [1.0001, -1.5, float("nan")])
    def test_out_of_range(self, value):
        with pytest.raises(OutOfRangeError):
            frequency_bin(value, LEVELS)

    def test_vectorized_matches_scalar(self, rng):
        values = np.concatenate([rng.uniform(-1.0, 1.0, 500), [-1.0, 1.0, 0.0]])
        expected = [frequency_bin(v, LEVELS) for v in values]
        assert frequency_bins(values, LEVELS).tolist() == expected

    def test_vectorized_out_of_range(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            frequency_bins([0.0, 2.0], LEVELS)
        assert exc_info.value.context["index"] == 1

    def test_levels_must_be_positive(self):
        with pytest.raises(ValidationError):
            frequency_bin(0.0, 0)

    @settings(max_examples=200, deadline=None)
    @given(
        values=st.lists(st.floats(min_value=-1.0, max_value=1.0), min_size=1, max_size=50),
        levels=st.integers(min_value=1, max_value=64),
    )
    def test_bins_are_monotone_and_bounded(self, values, levels):
        values = sorted(values)
        bins = [frequency_bin(v, levels) for v in values]
        assert all(0 <= b < levels for b in bins)
        assert all(a <= b for a, b in zip(bins, bins[1:]))
        assert frequency_bins(values, levels).tolist() == bins


class TestEncoder:
    def test_dense_encoding_is_bundle_of_bound_channels(self, dense_encoder):
        features = [-1.0, -0.5, 0.0, 0.25, 0.7, 1.0]
        expected = bundle([
            bind(dense_encoder.channel_memory[i], dense_encoder.item_memory[frequency_bin(x, LEVELS)])
            for i, x in enumerate(features)
        ])
        assert dense_encoder.encode(features) == expected

    def test_binary_encoding_is_majority_of_bound_channels(self, binary_encoder):
        features = [-0.9, -0.1, 0.3, 0.5, 0.8]
        expected = bundle([
            bind(binary_encoder.channel_memory[i], binary_encoder.item_memory[frequency_bin(x, LEVELS)])
            for i, x in enumerate(features)
        ])
        encoded = binary_encoder.encode(features)
        assert isinstance(encoded, BinaryHDV)
        assert encoded == expected

    def test_fewer_features_than_channels(self, dense_encoder):
        encoded = dense_encoder.encode([0.1, 0.2])
        assert encoded.dimension == D

    def test_too_many_features(self, dense_encoder):
        with pytest.raises(DimensionMismatchError):
            dense_encoder.encode([0.0] * (CHANNELS + 1))

    def test_empty_features(self, dense_encoder):
        with pytest.raises(ValidationError):
            dense_encoder.encode([])

    def test_value_out_of_range(self, dense_encoder):
        with pytest.raises(OutOfRangeError):
            dense_encoder.encode([0.0, 3.0])

    def test_similar_inputs_encode_closer(self, dense_encoder):
        base = dense_encoder.encode([0.1, 0.2, 0.3, 0.4, 0.5, 0.6])
        near = dense_encoder.encode([0.1, 0.2, 0.3, 0.4, 0.5, 0.75])
        far = dense_encoder.encode([-0.9, -0.8, -0.7, -0.6, -0.5, -0.4])
        assert base.distance(near) < base.distance(far)

    def test_requires_generated_memories(self):
        encoder = Encoder(ChannelMemory(DenseHDV, D), ContinuousItemMemory(DenseHDV, D))
        with pytest.raises(MemoryOperationError):
            encoder.encode([0.0])

    def test_memories_must_match(self, rng):
        with pytest.raises(DimensionMismatchError):
            Encoder(
                ChannelMemory(DenseHDV, D, 2, "polar", rng),
                ContinuousItemMemory(BinaryHDV, D, 2, "binary", rng),
            )
        with pytest.raises(DimensionMismatchError):
            Encoder(
                ChannelMemory(DenseHDV, D, 2, "polar", rng),
                ContinuousItemMemory(DenseHDV, D * 2, 2, "polar", rng),
            )


class TestEncodeDataset:
    @pytest.fixture
    def raw(self, rng):
        return Dataset(
            (rng.uniform(-1.0, 1.0, CHANNELS), label % 3) for label in range(20)
        )

    def test_preserves_order_and_labels(self, dense_encoder, raw):
        encoded = dense_encoder.encode_dataset(raw)
        assert len(encoded) == len(raw)
        assert encoded.labels == raw.labels
        for sample, original in zip(encoded, raw):
            assert sample.features == dense_encoder.encode(original.features)

    def test_thread_pool_matches_sequential(self, dense_encoder, raw):
        sequential = dense_encoder.encode_dataset(raw, workers=1)
        pooled = dense_encoder.encode_dataset(raw, workers=4)
        assert pooled.labels == sequential.labels
        assert all(a.features == b.features for a, b in zip(pooled, sequential))

    def test_progress_is_logged(self, dense_encoder, raw, log_messages):
        dense_encoder.encode_dataset(raw)
        progress = [m for m in log_messages if "Encoded" in m]
        assert len(progress) == 10
        assert progress[-1].endswith("100% (20/20)")
