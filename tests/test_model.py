"""
Tests for Model construction and checkpoint persistence.
"""

import numpy as np
import pytest

from hyperclass.core.config import HyperClassConfig, ModelConfig
from hyperclass.core.hdv import BinaryHDV, DenseHDV
from hyperclass.core.model import (
    ASSOCIATIVE_FILE,
    CHANNEL_FILE,
    CONTINUOUS_FILE,
    Model,
)

D = 256
LEVELS = 5
CHANNELS = 4


@pytest.fixture
def model(rng):
    return Model(LEVELS, D, CHANNELS, "polar", "dense", rng)


class TestModel:
    def test_memories_are_generated(self, model):
        assert len(model.item_memory) == LEVELS
        assert len(model.channel_memory) == CHANNELS
        assert len(model.associative_memory) == 0
        assert not model.blank()

    def test_binary_model(self, rng):
        model = Model(LEVELS, D, CHANNELS, "binary", "binary", rng)
        assert model.vector_cls is BinaryHDV
        assert all(isinstance(v, BinaryHDV) for v in model.channel_memory)

    def test_random_seeding_warns_about_overflow(self, rng, log_messages):
        Model(LEVELS, D, CHANNELS, "random", "dense", rng)
        assert any(m.startswith("WARNING:") and "overflow" in m for m in log_messages)

    def test_polar_seeding_does_not_warn(self, rng, log_messages):
        Model(LEVELS, D, CHANNELS, "polar", "dense", rng)
        assert not any("overflow" in m for m in log_messages)

    def test_from_config_is_reproducible(self):
        config = HyperClassConfig(model=ModelConfig(dimensionality=D, levels=LEVELS, channels=CHANNELS, seed=5))
        a = Model.from_config(config)
        b = Model.from_config(config)
        assert a.vector_cls is DenseHDV
        assert all(x == y for x, y in zip(a.channel_memory, b.channel_memory))
        assert all(x == y for x, y in zip(a.item_memory, b.item_memory))

    def test_blank(self, model):
        model.item_memory.clear()
        model.channel_memory.clear()
        assert model.blank()


class TestCheckpoint:
    def test_save_writes_three_files(self, model, tmp_path):
        model.associative_memory.insert(DenseHDV.seeded(D, "polar", np.random.default_rng(0)))
        assert model.save(tmp_path / "memory") is True
        for name in (ASSOCIATIVE_FILE, CONTINUOUS_FILE, CHANNEL_FILE):
            assert (tmp_path / "memory" / name).is_file()
        lines = (tmp_path / "memory" / CONTINUOUS_FILE).read_text().splitlines()
        assert len(lines) == LEVELS

    def test_roundtrip(self, model, tmp_path, rng):
        model.associative_memory.insert(DenseHDV.seeded(D, "polar", rng))
        model.associative_memory.insert(DenseHDV.seeded(D, "polar", rng))
        model.save(tmp_path)

        restored = Model(LEVELS, D, CHANNELS, "polar", "dense", np.random.default_rng(99))
        assert restored.load(tmp_path) is True
        for mine, theirs in (
            (model.associative_memory, restored.associative_memory),
            (model.item_memory, restored.item_memory),
            (model.channel_memory, restored.channel_memory),
        ):
            assert len(mine) == len(theirs)
            assert all(a == b for a, b in zip(mine, theirs))

    def test_binary_roundtrip(self, tmp_path, rng):
        model = Model(LEVELS, D, CHANNELS, "binary", "binary", rng)
        model.save(tmp_path)
        restored = Model(LEVELS, D, CHANNELS, "binary", "binary", np.random.default_rng(3))
        assert restored.load(tmp_path) is True
        assert all(a == b for a, b in zip(model.channel_memory, restored.channel_memory))

    def test_missing_checkpoint_resets(self, model, tmp_path, log_messages):
        model.associative_memory.insert(DenseHDV.seeded(D, "polar", np.random.default_rng(1)))
        before = model.channel_memory[0].copy()

        assert model.load(tmp_path / "nowhere") is False
        assert len(model.associative_memory) == 0
        assert len(model.item_memory) == LEVELS
        assert len(model.channel_memory) == CHANNELS
        assert model.channel_memory[0] != before
        assert any(m.startswith("WARNING:") for m in log_messages)

    def test_partial_checkpoint_resets(self, model, tmp_path):
        model.save(tmp_path)
        (tmp_path / CHANNEL_FILE).unlink()
        assert model.load(tmp_path) is False
        assert len(model.associative_memory) == 0

    def test_wrong_dimension_resets(self, model, tmp_path, rng):
        Model(LEVELS, D * 2, CHANNELS, "polar", "dense", rng).save(tmp_path)
        assert model.load(tmp_path) is False
        assert model.channel_memory.dimension == D

    def test_save_failure_returns_false(self, model, tmp_path, log_messages):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        assert model.save(blocker / "memory") is False
        assert any(m.startswith("ERROR:") for m in log_messages)

    def test_oversized_integer_resets(self, model, tmp_path, log_messages):
        model.save(tmp_path)
        line = ",".join(["99999999999999999999999"] + ["1"] * (D - 1))
        (tmp_path / ASSOCIATIVE_FILE).write_text(line + "\n")

        assert model.load(tmp_path) is False
        assert len(model.associative_memory) == 0
        assert any(m.startswith("WARNING:") for m in log_messages)
