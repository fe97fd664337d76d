"""
HyperClass Core Module
======================
Vector algebra, memories, encoding and training.

Vector Operations:
    - DenseHDV / BinaryHDV: the two hypervector representations
    - bind, bundle, bundle_pair, subtract: algebra dispatching on representation
    - batch_distance: vectorized distance to many vectors

Memories:
    - ContinuousItemMemory: level vectors for binned values
    - ChannelMemory: per-channel role vectors
    - AssociativeMemory: class prototypes

Training:
    - Encoder: feature vector -> hypervector
    - Model: the three memories plus checkpoint load/save
    - Classifier: configure, train, test, predict

Configuration:
    Settings are loaded from config.yaml via the config module, with
    HYPERCLASS_* environment overrides.
"""

from .hdv import (
    BINARY,
    DENSE,
    BinaryHDV,
    DenseHDV,
    HyperVector,
    SeedingStrategy,
    batch_distance,
    bind,
    bundle,
    bundle_pair,
    inverted,
    majority_bundle,
    subtract,
    vector_class,
)
from .memory import AssociativeMemory, ChannelMemory, ContinuousItemMemory, MemoryStore
from .dataset import Dataset, Sample
from .encoder import MAX_FREQUENCY, MIN_FREQUENCY, Encoder, frequency_bin
from .metrics import TrainingLog, TrainingMetric
from .model import Model
from .classifier import Classifier, ClassifierState
from .config import HyperClassConfig, get_config, load_config, reset_config
from .exceptions import (
    HyperClassError,
    VectorError,
    DimensionMismatchError,
    LengthMismatchError,
    InvalidRangeError,
    VectorDecodeError,
    VectorOperationError,
    EncodingError,
    OutOfRangeError,
    MemoryOperationError,
    EmptyMemoryError,
    TrainingError,
    NotTrainableError,
    StorageError,
    VectorFileNotFoundError,
    DatasetError,
    ConfigurationError,
    ValidationError,
)

__all__ = [
    # Vectors
    "BINARY",
    "DENSE",
    "BinaryHDV",
    "DenseHDV",
    "HyperVector",
    "SeedingStrategy",
    "batch_distance",
    "bind",
    "bundle",
    "bundle_pair",
    "inverted",
    "majority_bundle",
    "subtract",
    "vector_class",
    # Memories
    "AssociativeMemory",
    "ChannelMemory",
    "ContinuousItemMemory",
    "MemoryStore",
    # Training
    "Dataset",
    "Sample",
    "Encoder",
    "MAX_FREQUENCY",
    "MIN_FREQUENCY",
    "frequency_bin",
    "TrainingLog",
    "TrainingMetric",
    "Model",
    "Classifier",
    "ClassifierState",
    # Config
    "HyperClassConfig",
    "get_config",
    "load_config",
    "reset_config",
    # Exceptions
    "HyperClassError",
    "VectorError",
    "DimensionMismatchError",
    "LengthMismatchError",
    "InvalidRangeError",
    "VectorDecodeError",
    "VectorOperationError",
    "EncodingError",
    "OutOfRangeError",
    "MemoryOperationError",
    "EmptyMemoryError",
    "TrainingError",
    "NotTrainableError",
    "StorageError",
    "VectorFileNotFoundError",
    "DatasetError",
    "ConfigurationError",
    "ValidationError",
]
