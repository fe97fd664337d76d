"""
Hypervector Memories
====================
Ordered vector stores used by the classifier.

  - MemoryStore: ordered, indexable collection of one representation and
    one dimension; the index of a vector is its symbol id. Persists as one
    text-encoded vector per line.
  - ContinuousItemMemory: a chain of L vectors where each step inverts the
    next contiguous chunk of D // (L-1) elements, so similarity falls off
    with the distance between levels.
  - ChannelMemory: F independently seeded role vectors, one per feature channel.
  - AssociativeMemory: one prototype per class label, queried by nearest distance.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from ._utils import atomic_write_lines, read_lines
from .exceptions import DimensionMismatchError, EmptyMemoryError, StorageError
from .hdv import (
    DenseHDV,
    HyperVector,
    SeedingStrategy,
    VectorClass,
    batch_distance,
)


class MemoryStore:
    """
    Generic ordered vector container.

    All vectors share ``vector_cls`` and ``dimension``; a store created
    without a dimension adopts the dimension of the first vector it receives.
    """

    def __init__(
        self,
        vector_cls: VectorClass = DenseHDV,
        dimension: Optional[int] = None,
        vectors: Optional[Sequence[HyperVector]] = None,
    ):
        self.vector_cls = vector_cls
        self.dimension = dimension
        self._vectors: List[HyperVector] = []
        for v in vectors or ():
            self.append(v)

    @property
    def representation(self) -> str:
        return self.vector_cls.representation

    def _check(self, vector: HyperVector) -> None:
        if not isinstance(vector, self.vector_cls):
            raise DimensionMismatchError(
                self.representation, getattr(vector, "representation", type(vector).__name__), "store"
            )
        if self.dimension is None:
            self.dimension = vector.dimension
        elif vector.dimension != self.dimension:
            raise DimensionMismatchError(self.dimension, vector.dimension, "store")

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def size(self) -> int:
        return len(self._vectors)

    def __len__(self) -> int:
        return len(self._vectors)

    def __getitem__(self, index: int) -> HyperVector:
        return self._vectors[index]

    def __setitem__(self, index: int, vector: HyperVector) -> None:
        self._check(vector)
        self._vectors[index] = vector

    def __iter__(self) -> Iterator[HyperVector]:
        return iter(self._vectors)

    def append(self, vector: HyperVector) -> int:
        """Append a vector and return its index."""
        self._check(vector)
        self._vectors.append(vector)
        return len(self._vectors) - 1

    def clear(self) -> None:
        self._vectors.clear()

    def stacked(self) -> np.ndarray:
        """All vector payloads as one (N, ...) array."""
        return np.stack([v.data for v in self._vectors], axis=0)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, path: Union[str, Path]) -> None:
        """
        Replace the contents with the vectors stored at ``path``.

        The store is left untouched when any line fails to decode.

        Raises:
            VectorFileNotFoundError: If the file does not exist.
            StorageError: If the file cannot be read.
            LengthMismatchError / VectorDecodeError: On a malformed line.
        """
        loaded = [self.vector_cls.from_text(line, self.dimension) for line in read_lines(path)]
        if loaded and self.dimension is None:
            dims = {v.dimension for v in loaded}
            if len(dims) != 1:
                raise StorageError(
                    f"Vectors in '{path}' have mixed dimensions", {"path": str(path), "dimensions": sorted(dims)}
                )
            self.dimension = dims.pop()
        self._vectors = loaded
        logger.debug(f"Loaded {len(loaded)} {self.representation} vectors from {path}")

    def save(self, path: Union[str, Path]) -> None:
        """Write one text-encoded vector per line (atomic replace)."""
        atomic_write_lines(path, (v.to_text() for v in self._vectors))
        logger.debug(f"Saved {len(self._vectors)} {self.representation} vectors to {path}")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={len(self)}, "
            f"representation={self.representation}, dimension={self.dimension})"
        )


class ContinuousItemMemory(MemoryStore):
    """
    Level vectors for binned continuous values.

    Item 0 is seeded; item i is item i-1 with ``[start, start + chunk)``
    inverted, where ``chunk = D // (L-1)`` and ``start`` advances by ``chunk``
    per step. The inverted ranges are disjoint, so the distance from item 0
    grows with the level index. A remainder of ``D mod (L-1)`` elements is
    never flipped.
    """

    def __init__(
        self,
        vector_cls: VectorClass = DenseHDV,
        dimension: Optional[int] = None,
        size: int = 0,
        strategy: Union[str, SeedingStrategy] = SeedingStrategy.NONE,
        rng: Optional[np.random.Generator] = None,
    ):
        super().__init__(vector_cls, dimension)
        if size > 0:
            if dimension is None:
                raise DimensionMismatchError("a dimension", None, "generate")
            self._generate(size, dimension, strategy, rng)

    def _generate(
        self,
        size: int,
        dimension: int,
        strategy: Union[str, SeedingStrategy],
        rng: Optional[np.random.Generator],
    ) -> None:
        first = self.vector_cls.seeded(dimension, strategy, rng)
        self.append(first)
        if size == 1:
            return

        chunk = dimension // (size - 1)
        if chunk <= 1:
            logger.warning(
                f"Continuous memory chunk size ({chunk}) causes no distinct bit-flips. "
                f"Dimensions: {dimension}, and size: {size}."
            )

        start = 0
        for _ in range(1, size):
            vector = self._vectors[-1].copy()
            end = start + chunk
            if end > start:
                vector.invert(start, end)
            start = end
            self.append(vector)


class ChannelMemory(MemoryStore):
    """One independently seeded role vector per input feature channel."""

    def __init__(
        self,
        vector_cls: VectorClass = DenseHDV,
        dimension: Optional[int] = None,
        size: int = 0,
        strategy: Union[str, SeedingStrategy] = SeedingStrategy.NONE,
        rng: Optional[np.random.Generator] = None,
    ):
        super().__init__(vector_cls, dimension)
        if size > 0:
            if dimension is None:
                raise DimensionMismatchError("a dimension", None, "generate")
            rng = rng if rng is not None else np.random.default_rng()
            for _ in range(size):
                self.append(self.vector_cls.seeded(dimension, strategy, rng))


class AssociativeMemory(MemoryStore):
    """
    Class prototypes: index == class label.

    Prototypes are replaced in place (``memory[label] = v``) during training.
    """

    def insert(self, vector: HyperVector) -> int:
        """Append a class prototype; returns its label."""
        return self.append(vector)

    def distances(self, query: HyperVector) -> np.ndarray:
        """Distance from ``query`` to every prototype, in label order."""
        return batch_distance(query, self._vectors)

    def find(self, query: HyperVector) -> int:
        """
        Label of the nearest prototype.

        A prototype only wins on a strictly smaller distance, so ties keep
        the earliest label.

        Raises:
            EmptyMemoryError: If no prototype has been inserted.
        """
        if not self._vectors:
            raise EmptyMemoryError({"dimension": self.dimension})
        return int(np.argmin(self.distances(query)))
