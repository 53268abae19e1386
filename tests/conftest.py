"""Pytest configuration and shared fixtures for reilly tests.

This module provides:
- Deterministic RNG fixtures for numpy
- Reset of process-wide debug mode between tests
"""

import os

import numpy as np
import pytest

from reilly.config import set_debug_enabled


def _test_seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_test_seed())


@pytest.fixture(scope="function", autouse=True)
def reset_debug_mode():
    """Auto-use fixture restoring debug mode after every test."""
    set_debug_enabled(False)
    yield
    set_debug_enabled(False)
