"""
HDC Classifier / Trainer
========================
Prototype-based classification over an associative memory.

Lifecycle::

    UNCONFIGURED --configure()--> CONFIGURED --train()--> TRAINED

``configure`` builds one prototype per class by bundling that class's encoded
training vectors. Each training epoch then walks the training set in order and,
for every misclassified sample, moves the sample out of the wrongly predicted
prototype and into the prototype of its true class.
"""

from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
from loguru import logger

from .dataset import ENCODED_EXTENSION, RAW_EXTENSION, Dataset, dataset_paths
from .encoder import Encoder
from .exceptions import HyperClassError, NotTrainableError, ValidationError
from .hdv import BINARY, HyperVector, bundle, bundle_pair, subtract
from .metrics import TrainingLog, describe_run
from .model import Model
from ._utils import is_file

TRAIN_PREFIX = "train"
TEST_PREFIX = "test"


class ClassifierState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    TRAINED = "trained"


class Classifier:
    """
    Trains and evaluates a ``Model`` on encoded datasets.

    Args:
        model: Memories to train; the associative memory is updated in place.
        rng: Generator for dropout bundling.
        dropout: Prototype bundling dropout, applied to dense models only.
        encode_workers: Thread count for encoding raw datasets.
    """

    def __init__(
        self,
        model: Model,
        rng: Optional[np.random.Generator] = None,
        dropout: float = 0.0,
        encode_workers: int = 1,
    ):
        if not 0.0 <= dropout < 1.0:
            raise ValidationError("dropout", "must be in [0, 1)", dropout)
        if dropout and model.representation == BINARY:
            logger.warning("Dropout bundling is only defined for dense vectors; ignoring it")
            dropout = 0.0
        self.model = model
        self.rng = rng if rng is not None else model.rng
        self.dropout = dropout
        self.encode_workers = encode_workers
        self.train_dataset = Dataset()
        self.test_dataset = Dataset()
        self.state = (
            ClassifierState.CONFIGURED if len(model.associative_memory) else ClassifierState.UNCONFIGURED
        )

    @property
    def encoder(self) -> Encoder:
        return Encoder(self.model.channel_memory, self.model.item_memory)

    # ------------------------------------------------------------------
    # Prototypes
    # ------------------------------------------------------------------

    @staticmethod
    def _class_vectors(dataset: Dataset) -> List[List[HyperVector]]:
        grouped: Dict[int, List[HyperVector]] = defaultdict(list)
        for sample in dataset:
            grouped[sample.label].append(sample.features)

        labels = sorted(grouped)
        if labels[0] < 0 or labels != list(range(labels[-1] + 1)):
            raise ValidationError(
                "labels", "class labels must be contiguous integers starting at 0", labels
            )
        return [grouped[label] for label in labels]

    def configure(self, dataset: Dataset, fraction: float = 1.0) -> None:
        """
        Rebuild the associative memory from an encoded dataset.

        Prototype ``k`` bundles the first ``int(n_k * fraction)`` vectors of
        class ``k`` (at least one).

        Raises:
            ValidationError: On an empty dataset, a bad fraction or
                non-contiguous labels.
        """
        if not 0.0 < fraction <= 1.0:
            raise ValidationError("fraction", "must be in (0, 1]", fraction)
        if len(dataset) == 0:
            raise ValidationError("dataset", "cannot configure from an empty dataset")

        class_vectors = self._class_vectors(dataset)
        memory = self.model.associative_memory
        memory.clear()
        for vectors in class_vectors:
            count = max(int(len(vectors) * fraction), 1)
            memory.insert(bundle(vectors[:count], dropout=self.dropout, rng=self.rng))

        self.state = ClassifierState.CONFIGURED
        logger.debug(f"Configured {len(memory)} class prototypes (fraction={fraction})")

    # ------------------------------------------------------------------
    # Inference and training
    # ------------------------------------------------------------------

    def predict(self, vector: HyperVector) -> int:
        return self.model.associative_memory.find(vector)

    def train_one_epoch(self, dataset: Dataset) -> float:
        """One corrective pass over ``dataset``; returns the error percentage."""
        if len(dataset) == 0:
            raise ValidationError("dataset", "cannot train on an empty dataset")
        memory = self.model.associative_memory
        wrongs = 0
        for x, label in dataset:
            prediction = self.predict(x)
            if prediction != label:
                wrongs += 1
                memory[prediction] = subtract(memory[prediction], x)
                memory[label] = bundle_pair(memory[label], x)
        return wrongs / len(dataset) * 100.0

    def test(self, dataset: Dataset) -> float:
        """Accuracy percentage on ``dataset``; the memory is not modified."""
        if len(dataset) == 0:
            raise ValidationError("dataset", "cannot test on an empty dataset")
        correct = sum(1 for x, label in dataset if self.predict(x) == label)
        return correct / len(dataset) * 100.0

    def trainable(self) -> bool:
        return len(self.train_dataset) > 0 and len(self.test_dataset) > 0

    def train(self, epochs: int) -> TrainingLog:
        """
        Run ``epochs`` corrective epochs on the training set.

        Epoch 0 records the accuracy before any correction.

        Raises:
            NotTrainableError: If either dataset is empty.
        """
        if not self.trainable():
            raise NotTrainableError(len(self.train_dataset), len(self.test_dataset))

        metrics = TrainingLog(
            describe_run(
                epochs,
                len(self.model.item_memory),
                self.model.dimension,
                len(self.model.channel_memory),
            )
        )
        logger.info(
            f"Training: epochs: {epochs}, levels: {len(self.model.item_memory)}, "
            f"dimensions: {self.model.dimension}, frequency points: {len(self.model.channel_memory)}"
        )

        accuracy = self.test(self.test_dataset)
        logger.info(f"Accuracy before training: {accuracy:g}%")
        metrics.log(0, 0.0, accuracy)

        for epoch in range(1, epochs + 1):
            error = self.train_one_epoch(self.train_dataset)
            accuracy = self.test(self.test_dataset)
            logger.info(f"[Epoch: {epoch}]: error: {error:g}% - accuracy: {accuracy:g}%")
            metrics.log(epoch, error, accuracy)

        self.state = ClassifierState.TRAINED
        return metrics

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def set_datasets(self, train: Dataset, test: Dataset, fraction: float = 1.0) -> None:
        """Assign encoded datasets and configure prototypes from ``train``."""
        self.train_dataset = train
        self.test_dataset = test
        self.configure(train, fraction)

    def _load_datasets(self, directory: Path, extension: str) -> bool:
        train_paths = dataset_paths(directory, TRAIN_PREFIX, extension)
        test_paths = dataset_paths(directory, TEST_PREFIX, extension)
        if not all(is_file(p) for p in train_paths + test_paths):
            logger.debug(f"No {extension} dataset in {directory}")
            return False

        try:
            if extension == ENCODED_EXTENSION:
                logger.info("Loading encoded datasets...")
                model = self.model
                train = Dataset.load_encoded(*train_paths, model.vector_cls, model.dimension)
                test = Dataset.load_encoded(*test_paths, model.vector_cls, model.dimension)
            else:
                logger.info("Loading raw datasets...")
                raw_train = Dataset.load_raw(*train_paths)
                raw_test = Dataset.load_raw(*test_paths)
                encoder = self.encoder
                logger.info("Encoding training data...")
                train = encoder.encode_dataset(raw_train, workers=self.encode_workers)
                logger.info("Encoding testing data...")
                test = encoder.encode_dataset(raw_test, workers=self.encode_workers)
        except HyperClassError as e:
            logger.error(f"Failed to load {extension} datasets from {directory}: {e}")
            return False

        self.train_dataset = train
        self.test_dataset = test
        return True

    def load_datasets(self, path: Union[str, Path], fraction: float = 1.0) -> bool:
        """
        Load train/test datasets from ``path`` and configure the prototypes.

        Encoded (``.datmem``) files are preferred; raw (``.csv``) files are
        encoded with the model's memories. Returns False when neither loads.
        """
        path = Path(path)
        for extension in (ENCODED_EXTENSION, RAW_EXTENSION):
            if self._load_datasets(path, extension):
                logger.info(
                    f"Loaded {len(self.train_dataset)} training samples, "
                    f"and {len(self.test_dataset)} testing samples."
                )
                self.configure(self.train_dataset, fraction)
                return True
        return False

    def save_datasets(self, path: Union[str, Path]) -> bool:
        """Write the encoded datasets as ``.datmem`` files; False on failure."""
        try:
            self.train_dataset.save(*dataset_paths(path, TRAIN_PREFIX, ENCODED_EXTENSION))
            self.test_dataset.save(*dataset_paths(path, TEST_PREFIX, ENCODED_EXTENSION))
        except HyperClassError as e:
            logger.error(f"Failed to save dataset: {e}")
            return False
        logger.info(f"Saved encoded datasets to {path}")
        return True
