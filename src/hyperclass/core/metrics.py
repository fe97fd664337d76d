"""
Training metrics log and its CSV report.

The report layout is::

    epoch,error,accuracy
    0,0,41.2
    1,12.5,80.1
    ...
    "Training: epochs: 2, levels: 10, dimensions: 10000, frequency points: 617"

Reports are auto-numbered (``experiment.csv``, ``experiment1.csv``, ...) so a
new run never overwrites an earlier one.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, List, Union

from loguru import logger

from ._utils import atomic_write_lines, is_file

CSV_HEADER = "epoch,error,accuracy"
MAX_REPORT_SLOTS = 100


@dataclass(frozen=True)
class TrainingMetric:
    epoch: int
    error: float
    accuracy: float

    def to_row(self) -> str:
        return f"{self.epoch},{self.error:g},{self.accuracy:g}"


def describe_run(epochs: int, levels: int, dimensions: int, channels: int) -> str:
    """Trailing descriptive line for a report."""
    return (
        f'"Training: epochs: {epochs}, levels: {levels}, '
        f'dimensions: {dimensions}, frequency points: {channels}"'
    )


def _form_path(stub: Path, index: int) -> Path:
    name = stub.name if index == 0 else f"{stub.name}{index}"
    return stub.with_name(f"{name}.csv")


class TrainingLog:
    """Append-only (epoch, error %, accuracy %) log for one training run."""

    def __init__(self, header: str = ""):
        self.header = header
        self._metrics: List[TrainingMetric] = []

    def log(self, epoch: int, error: float, accuracy: float) -> TrainingMetric:
        metric = TrainingMetric(int(epoch), float(error), float(accuracy))
        self._metrics.append(metric)
        return metric

    @property
    def metrics(self) -> List[TrainingMetric]:
        return list(self._metrics)

    def __len__(self) -> int:
        return len(self._metrics)

    def __iter__(self) -> Iterator[TrainingMetric]:
        return iter(self._metrics)

    def __getitem__(self, index: int) -> TrainingMetric:
        return self._metrics[index]

    def rows(self) -> List[str]:
        lines = [CSV_HEADER] + [m.to_row() for m in self._metrics]
        if self.header:
            lines.append(self.header)
        return lines

    def to_dict(self) -> dict:
        return {"header": self.header, "metrics": [asdict(m) for m in self._metrics]}

    def next_report_path(self, directory: Union[str, Path], name: str = "experiment") -> Path:
        """First free ``<name><n>.csv`` slot, n in 0..99 (0 has no suffix)."""
        stub = Path(directory) / name
        index = 0
        while index < MAX_REPORT_SLOTS and is_file(_form_path(stub, index)):
            index += 1
        return _form_path(stub, index)

    def save(self, directory: Union[str, Path], name: str = "experiment") -> Path:
        """
        Write the report into ``directory`` and return its path.

        Raises:
            StorageError: If the report cannot be written.
        """
        path = self.next_report_path(directory, name)
        atomic_write_lines(path, self.rows())
        logger.info(f"Saved training metrics to {path}")
        return path
