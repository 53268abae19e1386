"""Random number and validation helpers shared across reilly."""

from collections.abc import Hashable, Sequence
from typing import Any, Optional

import numpy as np


def seed_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a seeded NumPy random number generator.

    Args:
        seed: Random seed. If None, defaults to 0 for reproducibility.

    Returns:
        Seeded NumPy random generator.

    Examples:
        >>> rng = seed_rng(42)
        >>> bool(0 <= rng.integers(10) < 10)
        True
    """
    if seed is None:
        seed = 0
    return np.random.default_rng(seed)


def spawn_seeds(rng: np.random.Generator, n: int) -> list[int]:
    """Draw ``n`` unsigned 64-bit sub-seeds, one draw per item, in order.

    All seeds are drawn before any consumer runs, so the i-th seed depends
    only on the state of ``rng`` and on ``i``.

    Args:
        rng: Source generator; advanced by exactly ``n`` draws.
        n: Number of seeds.

    Returns:
        List of ``n`` Python ints in ``[0, 2**64)``.

    Examples:
        >>> spawn_seeds(seed_rng(0), 3) == spawn_seeds(seed_rng(0), 3)
        True
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    return [
        int(rng.integers(0, 2**64, dtype=np.uint64))
        for _ in range(n)
    ]


def check_unit_interval(name: str, value: float) -> float:
    """Validate ``value`` lies in the half-open interval [0, 1).

    Raises:
        ValueError: If ``value`` is outside [0, 1).
    """
    if not (0.0 <= value < 1.0):
        raise ValueError(f"{name} must be in [0, 1), got {value}")
    return float(value)


def index_of(items: Sequence) -> dict:
    """Map each item of ``items`` to its position.

    Raises:
        ValueError: If ``items`` contains duplicates.
    """
    index = {item: i for i, item in enumerate(items)}
    if len(index) != len(items):
        raise ValueError("items must be unique")
    return index


def to_jsonable(key: Hashable) -> Any:
    """Convert an action or state label into a JSON-compatible value."""
    if isinstance(key, (bool, int, float, str)) or key is None:
        return key
    if isinstance(key, np.generic):
        return key.item()
    if isinstance(key, tuple):
        return [to_jsonable(k) for k in key]
    return repr(key)
