"""
Random seed management for reproducibility.

Provides utilities for deterministic RNG seeding, including an optional
SEED_GLOBAL environment variable for single-threaded reproducibility debugging.
"""

import logging
import os
import random

import numpy as np

logger = logging.getLogger(__name__)


def set_random_seed(seed: int):
    """
    Set random seed for Python's ``random`` and NumPy's legacy global RNG.

    Args:
        seed: Random seed value
    """
    random.seed(seed)
    np.random.seed(seed)

    # sklearn has no global seed, estimators take random_state


def apply_seed_global() -> int | None:
    """
    Check SEED_GLOBAL environment variable and apply global seeding if set.

    Returns:
        The seed value applied, or None if SEED_GLOBAL was not set or invalid.

    Examples:
        >>> import os
        >>> os.environ["SEED_GLOBAL"] = "42"
        >>> seed = apply_seed_global()
        >>> seed
        42
        >>> del os.environ["SEED_GLOBAL"]
    """
    seed_str = os.environ.get("SEED_GLOBAL")
    if seed_str is None:
        return None

    seed_str = seed_str.strip()
    if not seed_str:
        return None

    try:
        seed = int(seed_str)
    except ValueError:
        logger.warning(
            "SEED_GLOBAL environment variable has non-integer value '%s'; ignoring.",
            seed_str,
        )
        return None

    if seed < 0 or seed > 2**32 - 1:
        logger.warning(
            "SEED_GLOBAL=%d out of valid range [0, 2^32-1]; ignoring.",
            seed,
        )
        return None

    set_random_seed(seed)
    logger.info("SEED_GLOBAL=%d applied (global RNG seeded for reproducibility).", seed)
    return seed


def derive_seed(base_seed: int | None, index: int) -> int | None:
    """
    Derive a deterministic child seed for the ``index``-th sub-fit.

    Used to give each forest of a hold-out pair its own seed while keeping the
    whole run reproducible from one ``random_state``. ``None`` stays ``None``
    so unseeded runs remain unseeded.

    Args:
        base_seed: Base random seed (or None)
        index: Sub-fit index (0-based)

    Returns:
        ``base_seed + 1000 * (index + 1)`` or None
    """
    if base_seed is None:
        return None
    return int(base_seed) + 1000 * (index + 1)


def make_rng(random_state: int | np.random.Generator | None) -> np.random.Generator:
    """Return a NumPy Generator from a seed, an existing Generator, or None."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)
