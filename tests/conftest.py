import sys
from pathlib import Path
from typing import List

import numpy as np
import pytest
from loguru import logger


# Ensure local src/ package imports work without editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def rng() -> np.random.Generator:
    """Deterministic generator so seeded tests are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def log_messages() -> List[str]:
    """
    Capture loguru output as a list of "LEVEL:message" strings.

    Usage:
        def test_warns(log_messages):
            do_something()
            assert any(m.startswith("WARNING:") for m in log_messages)
    """
    messages: List[str] = []
    handler_id = logger.add(
        lambda msg: messages.append(f"{msg.record['level'].name}:{msg.record['message']}"),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
