"""
Classifier model: the three memories that make up a trained HDC classifier.

A checkpoint is a directory holding one vector file per memory:

    associative_memory.mem   class prototypes (index == label)
    continuous_memory.mem    level vectors
    level_memory.mem         channel role vectors
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
from loguru import logger

from .config import HyperClassConfig
from .exceptions import HyperClassError
from .hdv import DENSE, SeedingStrategy, vector_class
from .memory import AssociativeMemory, ChannelMemory, ContinuousItemMemory

ASSOCIATIVE_FILE = "associative_memory.mem"
CONTINUOUS_FILE = "continuous_memory.mem"
CHANNEL_FILE = "level_memory.mem"


class Model:
    """
    Associative, continuous item and channel memories for one configuration.

    Construction seeds a fresh item memory of ``levels`` vectors and a channel
    memory of ``channels`` vectors; the associative memory starts empty.
    """

    def __init__(
        self,
        levels: int,
        dimension: int,
        channels: int,
        strategy: Union[str, SeedingStrategy] = SeedingStrategy.POLAR,
        representation: str = DENSE,
        rng: Optional[np.random.Generator] = None,
    ):
        self.levels = levels
        self.dimension = dimension
        self.channels = channels
        self.strategy = SeedingStrategy.parse(strategy)
        self.vector_cls = vector_class(representation)
        self.rng = rng if rng is not None else np.random.default_rng()
        if self.strategy is SeedingStrategy.RANDOM and self.representation == DENSE and channels > 1:
            # bound elements reach 2^62, so bundling two or more channels can wrap int64
            logger.warning(
                f"Random seeding with {channels} channels may overflow int64 when "
                "encoded channels are bundled; prefer polar seeding"
            )
        self._generate()

    @classmethod
    def from_config(cls, config: HyperClassConfig, rng: Optional[np.random.Generator] = None) -> "Model":
        model_cfg = config.model
        if rng is None:
            rng = np.random.default_rng(model_cfg.seed)
        return cls(
            levels=model_cfg.levels,
            dimension=model_cfg.dimensionality,
            channels=model_cfg.channels,
            strategy=model_cfg.seeding,
            representation=model_cfg.representation,
            rng=rng,
        )

    def _generate(self) -> None:
        self.associative_memory = AssociativeMemory(self.vector_cls, self.dimension)
        self.item_memory = ContinuousItemMemory(
            self.vector_cls, self.dimension, self.levels, self.strategy, self.rng
        )
        self.channel_memory = ChannelMemory(
            self.vector_cls, self.dimension, self.channels, self.strategy, self.rng
        )

    @property
    def representation(self) -> str:
        return self.vector_cls.representation

    def blank(self) -> bool:
        """True when every memory is empty."""
        return (
            len(self.associative_memory) == 0
            and len(self.item_memory) == 0
            and len(self.channel_memory) == 0
        )

    def reset(self) -> None:
        """Replace all memories with a freshly seeded, untrained set."""
        self._generate()

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load a checkpoint directory.

        Returns False, after resetting to a freshly seeded untrained model,
        when any of the three files is missing or malformed.
        """
        path = Path(path)
        associative = AssociativeMemory(self.vector_cls, self.dimension)
        items = ContinuousItemMemory(self.vector_cls, self.dimension)
        channels = ChannelMemory(self.vector_cls, self.dimension)
        try:
            associative.load(path / ASSOCIATIVE_FILE)
            items.load(path / CONTINUOUS_FILE)
            channels.load(path / CHANNEL_FILE)
        except HyperClassError as e:
            logger.warning(f"Could not load model from {path}: {e}")
            self.reset()
            return False

        self.associative_memory = associative
        self.item_memory = items
        self.channel_memory = channels
        logger.info(
            f"Loaded model from {path} ({len(associative)} classes, "
            f"{len(items)} levels, {len(channels)} channels)"
        )
        return True

    def save(self, path: Union[str, Path]) -> bool:
        """Write the three memory files into ``path``; False on failure."""
        path = Path(path)
        try:
            self.associative_memory.save(path / ASSOCIATIVE_FILE)
            self.item_memory.save(path / CONTINUOUS_FILE)
            self.channel_memory.save(path / CHANNEL_FILE)
        except HyperClassError as e:
            logger.error(f"Failed to save model: {e}")
            return False
        logger.info(f"Saved model to {path}")
        return True

    def __repr__(self) -> str:
        return (
            f"Model(representation={self.representation}, dimension={self.dimension}, "
            f"levels={len(self.item_memory)}, channels={len(self.channel_memory)}, "
            f"classes={len(self.associative_memory)})"
        )
