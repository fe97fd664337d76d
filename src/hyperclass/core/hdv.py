"""
Hyperdimensional Vector (HDV) Algebra
=====================================
The two hypervector representations used by HyperClass and the VSA
operations defined over them.

Representations (a closed set; dispatch is on ``representation``):
  - DenseHDV: D signed integers (np.int64).
      bind = element-wise product, bundle = element-wise sum,
      invert = negate, distance = cosine distance.
  - BinaryHDV: D bits packed as np.uint8, big-endian within each byte
    (element 0 is the MSB of byte 0).
      bind = XOR, bundle = majority vote (pairwise: OR),
      invert = bit flip, distance = normalized Hamming distance.

Randomness is never held by a vector: every seeding or dropout call takes an
explicit ``numpy.random.Generator``.

Text encodings (one vector per line in memory files):
  - dense: comma-separated integers, e.g. "1,-1,1,1"
  - binary: lowercase hex, first digit covers elements 0..3, e.g. "b3"
    (element 0 is the most significant bit of the first digit). Bit strings
    written highest element first, with element D-1 leading, decode here
    with their elements reversed.
"""

import re
from enum import Enum
from typing import List, Optional, Sequence, Type, Union

import numpy as np

from .exceptions import (
    DimensionMismatchError,
    InvalidRangeError,
    LengthMismatchError,
    VectorDecodeError,
    VectorOperationError,
)

DENSE = "dense"
BINARY = "binary"

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")
_INT32 = np.iinfo(np.int32)
_INT64 = np.iinfo(np.int64)

# Cached lookup table for popcount (bits set per byte value 0-255)
_POPCOUNT_TABLE: Optional[np.ndarray] = None


def _build_popcount_table() -> np.ndarray:
    """Build or return cached popcount lookup table for bytes (0-255)."""
    global _POPCOUNT_TABLE
    if _POPCOUNT_TABLE is None:
        _POPCOUNT_TABLE = np.array(
            [bin(i).count("1") for i in range(256)], dtype=np.int32
        )
    return _POPCOUNT_TABLE


class SeedingStrategy(str, Enum):
    """Policy used to fill an unconditioned hypervector."""

    NONE = "none"
    BINARY = "binary"
    POLAR = "polar"
    RANDOM = "random"

    @classmethod
    def parse(cls, value: Union[str, "SeedingStrategy"]) -> "SeedingStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise VectorOperationError(
                "seed", f"Unknown seeding strategy '{value}'",
                {"supported": [s.value for s in cls]},
            ) from None


class HyperVector:
    """
    Capability set shared by both representations.

    Attributes:
        data: np.ndarray holding the elements (layout is representation specific)
        dimension: int, number of logical elements D
    """

    __slots__ = ("data", "dimension")

    representation: str = ""

    def size(self) -> int:
        return self.dimension

    def __len__(self) -> int:
        return self.dimension

    def distance(self, other: "HyperVector") -> float:
        """Symmetric distance; ``v.distance(v) == 0``."""
        _check_compatible([self, other], "distance")
        return self._distance(other)

    def similarity(self, other: "HyperVector") -> float:
        return 1.0 - self.distance(other)

    def invert(self, start: Optional[int] = None, end: Optional[int] = None) -> "HyperVector":
        """
        Invert the elements in ``[start, end)`` in place and return ``self``.

        With no arguments the whole vector is inverted.

        Raises:
            InvalidRangeError: If ``start >= end`` or the range leaves ``[0, D]``.
        """
        start = 0 if start is None else int(start)
        end = self.dimension if end is None else int(end)
        if start >= end or start < 0 or end > self.dimension:
            raise InvalidRangeError(start, end, self.dimension)
        self._invert_range(start, end)
        return self

    def copy(self) -> "HyperVector":
        return type(self)(self.data.copy(), self.dimension)

    def _check_index(self, index: int) -> int:
        index = int(index)
        if index < 0:
            index += self.dimension
        if not 0 <= index < self.dimension:
            raise IndexError(f"index {index} out of range for dimension {self.dimension}")
        return index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HyperVector):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.dimension == other.dimension
            and np.array_equal(self.data, other.data)
        )

    # Mutable value object
    __hash__ = None  # type: ignore[assignment]

    # Implemented by the two representations
    def _distance(self, other: "HyperVector") -> float:
        raise NotImplementedError

    def _invert_range(self, start: int, end: int) -> None:
        raise NotImplementedError

    def to_text(self) -> str:
        raise NotImplementedError


class DenseHDV(HyperVector):
    """A dense hypervector of signed integers."""

    __slots__ = ()

    representation = DENSE

    def __init__(self, data: Union[np.ndarray, Sequence[int]], dimension: Optional[int] = None):
        """
        Args:
            data: Integer elements, shape (dimension,).
            dimension: Expected number of elements (inferred when omitted).
        """
        arr = np.asarray(data, dtype=np.int64)
        if arr.ndim != 1:
            raise DimensionMismatchError("1-D array", f"{arr.ndim}-D array", "construct")
        if dimension is not None and arr.shape[0] != dimension:
            raise DimensionMismatchError(dimension, arr.shape[0], "construct")
        self.data = arr
        self.dimension = int(arr.shape[0])

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, dimension: int) -> "DenseHDV":
        return cls(np.zeros(dimension, dtype=np.int64), dimension)

    @classmethod
    def seeded(
        cls,
        dimension: int,
        strategy: Union[str, SeedingStrategy] = SeedingStrategy.NONE,
        rng: Optional[np.random.Generator] = None,
    ) -> "DenseHDV":
        """
        Build a vector from a seeding strategy.

        none -> zeros, binary -> {0, 1}, polar -> {+1, -1},
        random -> uniform over the signed 32-bit range.

        Products of two ``random`` vectors reach 2^62, so a bundle of more
        than one such product can wrap around int64 without an error.
        """
        strategy = SeedingStrategy.parse(strategy)
        if strategy is SeedingStrategy.NONE:
            return cls.zeros(dimension)
        rng = rng if rng is not None else np.random.default_rng()
        if strategy is SeedingStrategy.BINARY:
            data = rng.integers(0, 2, size=dimension, dtype=np.int64)
        elif strategy is SeedingStrategy.POLAR:
            data = rng.integers(0, 2, size=dimension, dtype=np.int64) * 2 - 1
        else:
            data = rng.integers(_INT32.min, _INT32.max, size=dimension, dtype=np.int64, endpoint=True)
        return cls(data, dimension)

    @classmethod
    def from_text(cls, text: str, dimension: Optional[int] = None) -> "DenseHDV":
        """
        Decode comma-separated integers.

        Raises:
            LengthMismatchError: If the element count differs from ``dimension``.
            VectorDecodeError: If a token is not an integer or does not fit
                in 64 bits.
        """
        tokens = text.strip().split(",")
        if dimension is not None and len(tokens) != dimension:
            raise LengthMismatchError(dimension, len(tokens))
        values = []
        for token in tokens:
            try:
                value = int(token)
            except ValueError:
                raise VectorDecodeError(token, "not an integer") from None
            if not _INT64.min <= value <= _INT64.max:
                raise VectorDecodeError(token, "out of int64 range")
            values.append(value)
        return cls(np.array(values, dtype=np.int64), len(values))

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def __getitem__(self, index: int) -> int:
        return int(self.data[self._check_index(index)])

    def __setitem__(self, index: int, value: int) -> None:
        self.data[self._check_index(index)] = int(value)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def _distance(self, other: "HyperVector") -> float:
        """Cosine distance ``1 - a.b / (|a||b|)``; zero vectors are handled explicitly."""
        if np.array_equal(self.data, other.data):
            return 0.0
        a = self.data.astype(np.float64)
        b = other.data.astype(np.float64)
        a_mag = float(np.dot(a, a))
        b_mag = float(np.dot(b, b))
        if a_mag == 0.0 or b_mag == 0.0:
            return 1.0
        cosine = float(np.dot(a, b)) / float(np.sqrt(a_mag * b_mag))
        return float(np.clip(1.0 - cosine, 0.0, 2.0))

    def _invert_range(self, start: int, end: int) -> None:
        np.negative(self.data[start:end], out=self.data[start:end])

    def to_text(self) -> str:
        return ",".join(str(x) for x in self.data.tolist())

    def __repr__(self) -> str:
        return f"DenseHDV(dim={self.dimension}, norm={float(np.linalg.norm(self.data)):.2f})"


class BinaryHDV(HyperVector):
    """
    A binary hypervector stored as a packed uint8 array.

    The vector has `dimension` logical bits, stored in ceil(dimension / 8)
    bytes. Padding bits in the last byte are always zero.
    """

    __slots__ = ()

    representation = BINARY

    def __init__(self, data: np.ndarray, dimension: int):
        """
        Args:
            data: Packed uint8 array of shape (ceil(dimension / 8),).
            dimension: Number of logical bits.
        """
        data = np.asarray(data)
        n_bytes = (dimension + 7) // 8
        if data.dtype != np.uint8:
            raise DimensionMismatchError("uint8", str(data.dtype), "construct")
        if data.shape != (n_bytes,):
            raise DimensionMismatchError((n_bytes,), data.shape, "construct")
        remainder = dimension % 8
        if remainder:
            data = data.copy()
            data[-1] &= (0xFF << (8 - remainder)) & 0xFF
        self.data = data
        self.dimension = int(dimension)

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, dimension: int) -> "BinaryHDV":
        """All-zero vector."""
        return cls(np.zeros((dimension + 7) // 8, dtype=np.uint8), dimension)

    @classmethod
    def random(cls, dimension: int, rng: Optional[np.random.Generator] = None) -> "BinaryHDV":
        """Generate a random binary vector (uniform i.i.d. bits)."""
        rng = rng if rng is not None else np.random.default_rng()
        data = rng.integers(0, 256, size=(dimension + 7) // 8, dtype=np.uint8)
        return cls(data, dimension)

    @classmethod
    def from_bits(cls, bits: Sequence[int]) -> "BinaryHDV":
        arr = np.asarray(bits, dtype=np.uint8)
        if arr.ndim != 1:
            raise DimensionMismatchError("1-D array", f"{arr.ndim}-D array", "construct")
        return cls(np.packbits(arr != 0), int(arr.shape[0]))

    @classmethod
    def seeded(
        cls,
        dimension: int,
        strategy: Union[str, SeedingStrategy] = SeedingStrategy.NONE,
        rng: Optional[np.random.Generator] = None,
    ) -> "BinaryHDV":
        """Only the ``none`` and ``binary`` strategies apply to bits."""
        strategy = SeedingStrategy.parse(strategy)
        if strategy is SeedingStrategy.NONE:
            return cls.zeros(dimension)
        if strategy is not SeedingStrategy.BINARY:
            raise VectorOperationError("seed", f"Cannot seed BinaryHDV with strategy {strategy.value}")
        return cls.random(dimension, rng)

    @classmethod
    def from_text(cls, text: str, dimension: Optional[int] = None) -> "BinaryHDV":
        """
        Decode a hex string; every hex digit holds 4 bits.

        Raises:
            LengthMismatchError: If ``4 * len(text)`` differs from ``dimension``.
            VectorDecodeError: If the text holds a non-hex character.
        """
        text = text.strip()
        if not _HEX_PATTERN.fullmatch(text):
            raise VectorDecodeError(text, "not a recognized hex string")
        n_bits = len(text) * 4
        if dimension is not None and n_bits != dimension:
            raise LengthMismatchError(dimension, n_bits)
        padded = text if len(text) % 2 == 0 else text + "0"
        data = np.frombuffer(bytes.fromhex(padded), dtype=np.uint8).copy()
        return cls(data, n_bits)

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def bits(self) -> np.ndarray:
        """Unpacked bits, shape (dimension,)."""
        return np.unpackbits(self.data, count=self.dimension)

    def __getitem__(self, index: int) -> int:
        index = self._check_index(index)
        return int((self.data[index >> 3] >> (7 - (index & 7))) & 1)

    def __setitem__(self, index: int, value: int) -> None:
        index = self._check_index(index)
        mask = np.uint8(1 << (7 - (index & 7)))
        if value:
            self.data[index >> 3] |= mask
        else:
            self.data[index >> 3] &= ~mask

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def xor_bind(self, other: "BinaryHDV") -> "BinaryHDV":
        """
        Binding via element-wise XOR.

        Properties:
          - Self-inverse: a ⊕ a = 0
          - Commutative: a ⊕ b = b ⊕ a
          - Associative: (a ⊕ b) ⊕ c = a ⊕ (b ⊕ c)
        """
        _check_compatible([self, other], "bind")
        return BinaryHDV(np.bitwise_xor(self.data, other.data), self.dimension)

    def hamming_distance(self, other: "BinaryHDV") -> int:
        """
        Hamming distance: count of differing bits.

        Uses lookup table for speed (replacing unpackbits).
        Range: [0, dimension].
        """
        _check_compatible([self, other], "distance")
        xor_result = np.bitwise_xor(self.data, other.data)
        return int(_build_popcount_table()[xor_result].sum())

    def _distance(self, other: "HyperVector") -> float:
        return self.hamming_distance(other) / self.dimension

    def _invert_range(self, start: int, end: int) -> None:
        bits = self.bits()
        bits[start:end] ^= 1
        self.data = np.packbits(bits)

    def to_text(self) -> str:
        if self.dimension % 4 != 0:
            raise VectorOperationError(
                "encode", f"hex encoding needs a dimension divisible by 4, got {self.dimension}"
            )
        return self.data.tobytes().hex()[: self.dimension // 4]

    def __repr__(self) -> str:
        popcount = int(_build_popcount_table()[self.data].sum())
        return f"BinaryHDV(dim={self.dimension}, popcount={popcount}/{self.dimension})"


VectorClass = Type[HyperVector]

_REPRESENTATIONS = {DENSE: DenseHDV, BINARY: BinaryHDV}


def vector_class(representation: str) -> VectorClass:
    """Map a representation tag ('dense' / 'binary') to its vector class."""
    try:
        return _REPRESENTATIONS[str(representation).strip().lower()]
    except KeyError:
        raise VectorOperationError(
            "construct", f"Unknown representation '{representation}'",
            {"supported": sorted(_REPRESENTATIONS)},
        ) from None


# ======================================================================
# VSA operations (dispatch on representation)
# ======================================================================


def _collect(vectors) -> List[HyperVector]:
    if len(vectors) == 1 and isinstance(vectors[0], (list, tuple)):
        return list(vectors[0])
    return list(vectors)


def _check_compatible(vectors: Sequence[HyperVector], operation: str) -> None:
    if not vectors:
        raise VectorOperationError(operation, "Cannot operate on an empty list of vectors")
    first = vectors[0]
    for v in vectors[1:]:
        if type(v) is not type(first):
            raise DimensionMismatchError(first.representation, v.representation, operation)
        if v.dimension != first.dimension:
            raise DimensionMismatchError(first.dimension, v.dimension, operation)


def _dropout_mask(dimension: int, dropout: float, rng: Optional[np.random.Generator], operation: str) -> Optional[np.ndarray]:
    """Positions where a Bernoulli(dropout) draw skips accumulation, or None."""
    if not 0.0 <= dropout <= 1.0:
        raise VectorOperationError(operation, f"dropout must be in [0, 1], got {dropout}")
    if dropout == 0.0:
        return None
    if rng is None:
        raise VectorOperationError(operation, "dropout requires an explicit random generator")
    return rng.random(dimension) < dropout


def bind(*vectors: HyperVector) -> HyperVector:
    """
    Bind vectors: element-wise product (dense) or XOR (binary).

    Accepts ``bind(a, b, ...)`` or ``bind([a, b, ...])``.
    """
    vectors = _collect(vectors)
    _check_compatible(vectors, "bind")
    first = vectors[0]
    stacked = np.stack([v.data for v in vectors], axis=0)
    if first.representation == BINARY:
        return BinaryHDV(np.bitwise_xor.reduce(stacked, axis=0), first.dimension)
    return DenseHDV(np.prod(stacked, axis=0), first.dimension)


def majority_bundle(vectors: Sequence[BinaryHDV]) -> BinaryHDV:
    """
    Bundle binary vectors via element-wise majority vote.

    For each bit position, the result bit is 1 if more than half of the
    input vectors have a 1 at that position; ties default to 0.
    """
    vectors = list(vectors)
    _check_compatible(vectors, "bundle")
    dimension = vectors[0].dimension

    # Stack packed data first, then unpack all at once
    packed_data = np.stack([v.data for v in vectors], axis=0)  # (K, ceil(D/8))
    all_bits = np.unpackbits(packed_data, axis=1, count=dimension)  # (K, D)

    sums = all_bits.sum(axis=0, dtype=np.int64)
    threshold = len(vectors) / 2.0
    result_bits = (sums > threshold).astype(np.uint8)
    return BinaryHDV(np.packbits(result_bits), dimension)


def bundle(
    vectors: Sequence[HyperVector],
    dropout: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> HyperVector:
    """
    Bundle (superpose) vectors: element-wise sum (dense) or majority (binary).

    With ``dropout > 0`` (dense only) the result starts as ``vectors[0]`` and
    each position independently skips the contributions of ``vectors[1:]``
    with probability ``dropout``.
    """
    vectors = list(vectors)
    _check_compatible(vectors, "bundle")
    first = vectors[0]
    if first.representation == BINARY:
        if dropout:
            raise VectorOperationError("bundle", "dropout bundling is only defined for dense vectors")
        return majority_bundle(vectors)

    mask = _dropout_mask(first.dimension, dropout, rng, "bundle")
    rest = np.zeros(first.dimension, dtype=np.int64)
    for v in vectors[1:]:
        rest += v.data
    if mask is not None:
        rest[mask] = 0
    return DenseHDV(first.data + rest, first.dimension)


def bundle_pair(
    one: HyperVector,
    two: HyperVector,
    dropout: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> HyperVector:
    """Pairwise bundle: ``one + two`` (dense) or ``one | two`` (binary)."""
    _check_compatible([one, two], "bundle")
    if one.representation == BINARY:
        if dropout:
            raise VectorOperationError("bundle", "dropout bundling is only defined for dense vectors")
        return BinaryHDV(np.bitwise_or(one.data, two.data), one.dimension)
    return bundle([one, two], dropout=dropout, rng=rng)


def subtract(
    one: HyperVector,
    two: HyperVector,
    dropout: float = 0.0,
    rng: Optional[np.random.Generator] = None,
) -> HyperVector:
    """Remove ``two`` from ``one``: ``one - two`` (dense) or ``one & ~two`` (binary)."""
    _check_compatible([one, two], "subtract")
    if one.representation == BINARY:
        if dropout:
            raise VectorOperationError("subtract", "dropout is only defined for dense vectors")
        return BinaryHDV(np.bitwise_and(one.data, np.bitwise_not(two.data)), one.dimension)

    mask = _dropout_mask(one.dimension, dropout, rng, "subtract")
    delta = two.data.copy()
    if mask is not None:
        delta[mask] = 0
    return DenseHDV(one.data - delta, one.dimension)


def inverted(vector: HyperVector) -> HyperVector:
    """Return an inverted copy, leaving ``vector`` untouched."""
    return vector.copy().invert()


# ======================================================================
# Batch operations (NumPy-vectorized, no Python loops)
# ======================================================================


def batch_hamming_distance(query: BinaryHDV, database: np.ndarray) -> np.ndarray:
    """
    Hamming distance between a query and every row of a packed database.

    Args:
        query: Query vector.
        database: 2D array of shape (N, ceil(D/8)) packed binary vectors.
    """
    xor_result = np.bitwise_xor(database, query.data)
    popcount_table = _build_popcount_table()
    bit_counts = popcount_table[xor_result]  # (N, ceil(D/8))
    return bit_counts.sum(axis=1)


def batch_distance(query: HyperVector, vectors: Sequence[HyperVector]) -> np.ndarray:
    """
    Distance from ``query`` to each of ``vectors``, shape (N,).

    Values match ``query.distance(v)`` element for element.
    """
    vectors = list(vectors)
    _check_compatible([query] + vectors, "distance")
    if not vectors:
        return np.zeros(0, dtype=np.float64)
    database = np.stack([v.data for v in vectors], axis=0)

    if query.representation == BINARY:
        return batch_hamming_distance(query, database) / float(query.dimension)

    identical = np.all(database == query.data, axis=1)
    db = database.astype(np.float64)
    q = query.data.astype(np.float64)
    dots = db @ q
    db_mag = np.einsum("ij,ij->i", db, db)
    q_mag = float(np.dot(q, q))
    with np.errstate(divide="ignore", invalid="ignore"):
        distances = 1.0 - dots / np.sqrt(db_mag * q_mag)
    distances = np.clip(distances, 0.0, 2.0)
    distances[(db_mag == 0.0) | (q_mag == 0.0)] = 1.0
    distances[identical] = 0.0
    return distances
