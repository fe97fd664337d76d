"""
Datasets of (features, label) samples.

A dataset is stored as two parallel line files: ``<prefix><ext>`` holding one
sample per line and ``<prefix>_labels<ext>`` holding one integer label per
line. Raw datasets (``.csv``) hold comma-separated floats; encoded datasets
(``.datmem``) hold text-encoded hypervectors.
"""

from pathlib import Path
from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

import numpy as np
from loguru import logger

from ._utils import atomic_write_lines, read_lines
from .exceptions import DatasetError
from .hdv import HyperVector, VectorClass

RAW_EXTENSION = ".csv"
ENCODED_EXTENSION = ".datmem"

PathLike = Union[str, Path]


class Sample(NamedTuple):
    features: Any  # np.ndarray of floats (raw) or HyperVector (encoded)
    label: int


def dataset_paths(directory: PathLike, prefix: str, extension: str) -> Tuple[Path, Path]:
    """Data and label file paths for ``prefix`` (e.g. 'train') in ``directory``."""
    directory = Path(directory)
    return directory / f"{prefix}{extension}", directory / f"{prefix}_labels{extension}"


def _parse_features(line: str, line_no: int, path: PathLike) -> np.ndarray:
    try:
        return np.array([float(x) for x in line.split(",")], dtype=np.float64)
    except ValueError:
        raise DatasetError(str(path), f"line {line_no} is not a comma-separated float row") from None


def _format_features(features: Any) -> str:
    if isinstance(features, HyperVector):
        return features.to_text()
    return ",".join(repr(float(x)) for x in np.asarray(features).ravel())


class Dataset:
    """Ordered sequence of paired (features, label) samples."""

    def __init__(self, samples: Optional[Iterable[Tuple[Any, int]]] = None):
        self._samples: List[Sample] = []
        for features, label in samples or ():
            self.add(features, label)

    def add(self, features: Any, label: int) -> None:
        self._samples.append(Sample(features, int(label)))

    def size(self) -> int:
        return len(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> Sample:
        return self._samples[index]

    @property
    def labels(self) -> List[int]:
        return [s.label for s in self._samples]

    def class_set(self) -> List[int]:
        """Distinct labels in ascending order."""
        return sorted(set(self.labels))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def _load(cls, data_path: PathLike, labels_path: PathLike, decode) -> "Dataset":
        data_lines = read_lines(data_path)
        label_lines = read_lines(labels_path)

        if len(data_lines) != len(label_lines):
            raise DatasetError(
                str(data_path),
                f"Mismatching amount of data ({len(data_lines)}) and labels ({len(label_lines)})",
            )
        if not data_lines:
            raise DatasetError(str(data_path), "dataset is empty")

        dataset = cls()
        for line_no, (line, label) in enumerate(zip(data_lines, label_lines), start=1):
            try:
                label_value = int(label)
            except ValueError:
                raise DatasetError(str(labels_path), f"line {line_no} is not an integer label") from None
            dataset.add(decode(line, line_no), label_value)
        return dataset

    @classmethod
    def load_raw(cls, data_path: PathLike, labels_path: PathLike) -> "Dataset":
        """
        Load comma-separated float rows and their labels.

        Raises:
            VectorFileNotFoundError: If either file is missing.
            DatasetError: On mismatched row counts, an empty dataset or a bad row.
        """
        dataset = cls._load(
            data_path, labels_path, lambda line, n: _parse_features(line, n, data_path)
        )
        logger.debug(f"Loaded {len(dataset)} raw samples from {data_path}")
        return dataset

    @classmethod
    def load_encoded(
        cls,
        data_path: PathLike,
        labels_path: PathLike,
        vector_cls: VectorClass,
        dimension: Optional[int] = None,
    ) -> "Dataset":
        """
        Load text-encoded hypervectors and their labels.

        Raises:
            VectorFileNotFoundError: If either file is missing.
            DatasetError: On mismatched row counts or an empty dataset.
            LengthMismatchError / VectorDecodeError: On a malformed vector line.
        """
        dataset = cls._load(
            data_path, labels_path, lambda line, n: vector_cls.from_text(line, dimension)
        )
        logger.debug(f"Loaded {len(dataset)} encoded samples from {data_path}")
        return dataset

    def save(self, data_path: PathLike, labels_path: PathLike) -> None:
        atomic_write_lines(data_path, (_format_features(s.features) for s in self._samples))
        atomic_write_lines(labels_path, (str(s.label) for s in self._samples))

    def __repr__(self) -> str:
        return f"Dataset(size={len(self)}, classes={len(self.class_set())})"
