"""Pytest configuration and shared fixtures for costkit tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A fixture capturing costkit log output
"""

import logging
import os
from io import StringIO
from typing import Iterator

import numpy as np
import pytest
import torch

from costkit.logging import configure_logging


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Set global random seeds for reproducibility."""
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    np.random.seed(seed)
    torch.manual_seed(seed)


@pytest.fixture(scope="function")
def log_stream() -> Iterator[StringIO]:
    """Route costkit loggers to an in-memory stream at DEBUG level."""
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    try:
        yield stream
    finally:
        configure_logging(level=logging.WARNING)
