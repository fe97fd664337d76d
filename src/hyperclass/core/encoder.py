"""
Sample Encoder
==============
Maps a feature vector of F continuous values in [MIN_FREQUENCY, MAX_FREQUENCY]
onto one D-dimensional hypervector:

    HDV = bundle(channel[i] ⊗ item[bin(x_i)]  for i in 0..F-1)

Each value is binned against the continuous item memory, its level vector is
bound to the channel's role vector, and all bound vectors are bundled.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .dataset import Dataset
from .exceptions import (
    DimensionMismatchError,
    MemoryOperationError,
    OutOfRangeError,
    ValidationError,
)
from .hdv import BINARY, BinaryHDV, DenseHDV, HyperVector
from .memory import ChannelMemory, ContinuousItemMemory

MIN_FREQUENCY = -1.0
MAX_FREQUENCY = 1.0
PROGRESS_UPDATES = 10


def frequency_bin(
    value: float,
    levels: int,
    minimum: float = MIN_FREQUENCY,
    maximum: float = MAX_FREQUENCY,
) -> int:
    """
    Index of the first of ``levels`` equal-width thresholds that ``value``
    does not exceed.

    The scan runs from low to high; the last bin catches ``value == maximum``
    and any floating residue.

    Raises:
        OutOfRangeError: If ``value`` lies outside ``[minimum, maximum]``.
    """
    if levels < 1:
        raise ValidationError("levels", "at least one level is required", levels)
    if not minimum <= value <= maximum:
        raise OutOfRangeError(value, minimum, maximum)

    step = (maximum - minimum) / levels
    for i in range(levels):
        threshold = minimum + step * (i + 1)
        if value <= threshold:
            return i
    return levels - 1


def frequency_bins(
    values: Sequence[float],
    levels: int,
    minimum: float = MIN_FREQUENCY,
    maximum: float = MAX_FREQUENCY,
) -> np.ndarray:
    """Vectorized ``frequency_bin`` over a whole feature vector."""
    if levels < 1:
        raise ValidationError("levels", "at least one level is required", levels)
    values = np.asarray(values, dtype=np.float64)
    outside = ~((values >= minimum) & (values <= maximum))
    if outside.any():
        bad = float(values[np.argmax(outside)])
        raise OutOfRangeError(bad, minimum, maximum, {"index": int(np.argmax(outside))})

    step = (maximum - minimum) / levels
    thresholds = minimum + step * np.arange(1, levels + 1, dtype=np.float64)
    bins = np.searchsorted(thresholds, values, side="left")
    return np.minimum(bins, levels - 1)


class Encoder:
    """
    Encode continuous samples with a channel memory and a continuous item memory.

    The bind/bundle of all channels runs on stacked arrays; the result equals
    ``bundle([bind(channel[i], item[bin_i]) for i ...])``.
    """

    def __init__(
        self,
        channel_memory: ChannelMemory,
        item_memory: ContinuousItemMemory,
        minimum: float = MIN_FREQUENCY,
        maximum: float = MAX_FREQUENCY,
    ):
        if channel_memory.vector_cls is not item_memory.vector_cls:
            raise DimensionMismatchError(
                channel_memory.representation, item_memory.representation, "encode"
            )
        if channel_memory.dimension != item_memory.dimension:
            raise DimensionMismatchError(channel_memory.dimension, item_memory.dimension, "encode")
        self.channel_memory = channel_memory
        self.item_memory = item_memory
        self.minimum = minimum
        self.maximum = maximum

    @property
    def dimension(self) -> Optional[int]:
        return self.item_memory.dimension

    def _stacks(self) -> Tuple[np.ndarray, np.ndarray]:
        if not len(self.channel_memory) or not len(self.item_memory):
            raise MemoryOperationError(
                "encode", "channel and item memories must be generated or loaded first",
                {"channels": len(self.channel_memory), "levels": len(self.item_memory)},
            )
        return self.channel_memory.stacked(), self.item_memory.stacked()

    def _encode(self, features, channels: np.ndarray, items: np.ndarray) -> HyperVector:
        values = np.asarray(features, dtype=np.float64)
        if values.ndim != 1 or values.shape[0] > channels.shape[0]:
            raise DimensionMismatchError(
                f"at most {channels.shape[0]} features", values.shape, "encode"
            )
        if values.shape[0] == 0:
            raise ValidationError("features", "cannot encode an empty feature vector")
        bins = frequency_bins(values, items.shape[0], self.minimum, self.maximum)
        n = values.shape[0]
        dimension = self.dimension

        if self.item_memory.representation == BINARY:
            bound = np.bitwise_xor(channels[:n], items[bins])
            all_bits = np.unpackbits(bound, axis=1, count=dimension)
            sums = all_bits.sum(axis=0, dtype=np.int64)
            return BinaryHDV(np.packbits((sums > n / 2.0).astype(np.uint8)), dimension)

        # sum_i channel[i] * item[bin_i] without materialising the (F, D) product
        return DenseHDV(np.einsum("fd,fd->d", channels[:n], items[bins]), dimension)

    def encode(self, features: Sequence[float]) -> HyperVector:
        """
        Encode one feature vector.

        Raises:
            OutOfRangeError: If a value lies outside the encodable interval.
            DimensionMismatchError: If there are more features than channels.
        """
        channels, items = self._stacks()
        return self._encode(features, channels, items)

    def encode_dataset(self, dataset: Dataset, workers: int = 1) -> Dataset:
        """
        Encode every sample, preserving order and (features, label) pairing.

        Progress is logged every 10% of the dataset. With ``workers > 1`` the
        samples are encoded on a thread pool; results keep input order.
        """
        channels, items = self._stacks()
        total = len(dataset)
        chunk_size = max(total // PROGRESS_UPDATES, 1)
        result = Dataset()

        def encode_one(sample):
            return self._encode(sample.features, channels, items)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                encoded = executor.map(encode_one, dataset)
                for i, (vector, sample) in enumerate(zip(encoded, dataset), start=1):
                    result.add(vector, sample.label)
                    if i % chunk_size == 0:
                        logger.debug(f"Encoded {int(i / total * 100)}% ({i}/{total})")
        else:
            for i, sample in enumerate(dataset, start=1):
                result.add(encode_one(sample), sample.label)
                if i % chunk_size == 0:
                    logger.debug(f"Encoded {int(i / total * 100)}% ({i}/{total})")

        return result
