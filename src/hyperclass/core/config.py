"""
HyperClass Configuration System
===============================
Centralized, validated experiment configuration with environment variable overrides.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

import yaml

from hyperclass.core.exceptions import ConfigurationError, VectorOperationError
from hyperclass.core.hdv import BINARY, DENSE, SeedingStrategy


@dataclass(frozen=True)
class ModelConfig:
    dimensionality: int = 10000
    levels: int = 10
    channels: int = 617
    representation: str = DENSE  # "dense" or "binary"
    seeding: str = "polar"
    seed: Optional[int] = None  # None = fresh OS entropy


@dataclass(frozen=True)
class TrainingConfig:
    epochs: int = 2
    training_fraction: float = 1.0
    dropout: float = 0.0  # prototype bundling dropout (dense only)
    encode_workers: int = 1


@dataclass(frozen=True)
class PathsConfig:
    memory_dir: str = "./memory"
    dataset_dir: str = "./dataset"
    encoded_dataset_dir: str = "./memory/dataset"
    experiments_dir: str = "./experiments"
    experiment_name: str = "experiment"


@dataclass(frozen=True)
class ObservabilityConfig:
    log_level: str = "INFO"
    json_logs: bool = False


@dataclass(frozen=True)
class HyperClassConfig:
    """Root configuration for a HyperClass run."""

    version: str = "1.0"
    model: ModelConfig = field(default_factory=ModelConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)


def _env_override(key: str, default):
    """Check for HYPERCLASS_<KEY> environment variable override."""
    env_key = f"HYPERCLASS_{key.upper()}"
    val = os.environ.get(env_key)
    if val is None:
        return default
    # Type coercion based on the default's type
    if isinstance(default, bool):
        return val.lower() in ("true", "1", "yes")
    if isinstance(default, int):
        return int(val)
    if isinstance(default, float):
        return float(val)
    return val


def _optional_int(key: str, default: Optional[int]) -> Optional[int]:
    val = os.environ.get(f"HYPERCLASS_{key.upper()}")
    if val is None:
        return default
    return int(val) if val.strip() else None


def validate_config(config: HyperClassConfig) -> HyperClassConfig:
    """
    Check cross-field constraints.

    Raises:
        ConfigurationError: On the first invalid value.
    """
    model = config.model
    training = config.training

    if model.dimensionality <= 0:
        raise ConfigurationError("dimensionality", f"must be positive, got {model.dimensionality}")
    if model.levels < 2:
        raise ConfigurationError("levels", f"at least 2 levels are required, got {model.levels}")
    if model.channels < 1:
        raise ConfigurationError("channels", f"at least 1 channel is required, got {model.channels}")
    if model.representation not in (DENSE, BINARY):
        raise ConfigurationError("representation", f"must be '{DENSE}' or '{BINARY}', got '{model.representation}'")

    try:
        seeding = SeedingStrategy.parse(model.seeding)
    except VectorOperationError as e:
        raise ConfigurationError("seeding", str(e)) from e
    if model.representation == BINARY:
        if seeding not in (SeedingStrategy.NONE, SeedingStrategy.BINARY):
            raise ConfigurationError("seeding", f"binary vectors support 'none' or 'binary', got '{model.seeding}'")
        if model.dimensionality % 4 != 0:
            raise ConfigurationError(
                "dimensionality",
                f"binary dimensionality must be a multiple of 4 for hex persistence, got {model.dimensionality}",
            )

    if training.epochs < 0:
        raise ConfigurationError("epochs", f"must be non-negative, got {training.epochs}")
    if not 0.0 < training.training_fraction <= 1.0:
        raise ConfigurationError("training_fraction", f"must be in (0, 1], got {training.training_fraction}")
    if not 0.0 <= training.dropout < 1.0:
        raise ConfigurationError("dropout", f"must be in [0, 1), got {training.dropout}")
    if training.encode_workers < 1:
        raise ConfigurationError("encode_workers", f"must be at least 1, got {training.encode_workers}")

    return config


def load_config(path: Optional[Path] = None) -> HyperClassConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Priority: ENV > YAML > defaults.

    Args:
        path: Path to config.yaml. If None, searches ./config.yaml and the
            project root.

    Returns:
        Validated HyperClassConfig instance.

    Raises:
        ConfigurationError: If a value is invalid.
    """
    if path is None:
        # Search common locations
        candidates = [
            Path("config.yaml"),
            Path(__file__).parent.parent.parent.parent / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    raw = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
            raw = loaded.get("hyperclass") or {}

    # Build model config
    model_raw = raw.get("model") or {}
    model = ModelConfig(
        dimensionality=_env_override("DIMENSIONALITY", model_raw.get("dimensionality", 10000)),
        levels=_env_override("LEVELS", model_raw.get("levels", 10)),
        channels=_env_override("CHANNELS", model_raw.get("channels", 617)),
        representation=str(_env_override("REPRESENTATION", model_raw.get("representation", DENSE))).lower(),
        seeding=str(_env_override("SEEDING", model_raw.get("seeding", "polar"))).lower(),
        seed=_optional_int("SEED", model_raw.get("seed")),
    )

    # Build training config
    train_raw = raw.get("training") or {}
    training = TrainingConfig(
        epochs=_env_override("EPOCHS", train_raw.get("epochs", 2)),
        training_fraction=_env_override("TRAINING_FRACTION", float(train_raw.get("training_fraction", 1.0))),
        dropout=_env_override("DROPOUT", float(train_raw.get("dropout", 0.0))),
        encode_workers=_env_override("ENCODE_WORKERS", train_raw.get("encode_workers", 1)),
    )

    # Build paths config
    paths_raw = raw.get("paths") or {}
    paths = PathsConfig(
        memory_dir=_env_override("MEMORY_DIR", paths_raw.get("memory_dir", "./memory")),
        dataset_dir=_env_override("DATASET_DIR", paths_raw.get("dataset_dir", "./dataset")),
        encoded_dataset_dir=_env_override(
            "ENCODED_DATASET_DIR", paths_raw.get("encoded_dataset_dir", "./memory/dataset")
        ),
        experiments_dir=_env_override("EXPERIMENTS_DIR", paths_raw.get("experiments_dir", "./experiments")),
        experiment_name=_env_override("EXPERIMENT_NAME", paths_raw.get("experiment_name", "experiment")),
    )

    # Build observability config
    obs_raw = raw.get("observability") or {}
    observability = ObservabilityConfig(
        log_level=_env_override("LOG_LEVEL", obs_raw.get("log_level", "INFO")),
        json_logs=_env_override("JSON_LOGS", obs_raw.get("json_logs", False)),
    )

    return validate_config(HyperClassConfig(
        version=str(raw.get("version", "1.0")),
        model=model,
        training=training,
        paths=paths,
        observability=observability,
    ))


# Module-level singleton (lazy-loaded)
_CONFIG: Optional[HyperClassConfig] = None


def get_config() -> HyperClassConfig:
    """Get or initialize the global config singleton."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def reset_config():
    """Reset the global config singleton (useful for testing)."""
    global _CONFIG
    _CONFIG = None
