"""Toy data with groups of correlated informative predictors.

Each group shares one latent factor, so every variable in the group is
correlated with the others (pairwise correlation ``corr``) and with the
response. Remaining predictors are independent standard normal noise.
"""

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from vita_rf.config.schema import SimulationConfig
from vita_rf.utils.random import make_rng

logger = logging.getLogger(__name__)


def simulate_correlated_data(
    no_samples: int = 100,
    group_size: Sequence[int] = (10, 10, 10, 10, 10, 10),
    no_var_total: int = 500,
    corr: float = 0.9,
    effects: Sequence[float] = (3.0, -3.0, 2.0, -2.0, 1.0, -1.0),
    noise_sd: float = 1.0,
    random_state: int | np.random.Generator | None = None,
) -> pd.DataFrame:
    """Simulate a regression data set with correlated predictor groups.

    Args:
        no_samples: Number of samples (rows).
        group_size: Size of each correlated informative group.
        no_var_total: Total number of predictors, informative plus noise.
        corr: Within-group correlation, in [0, 1).
        effects: Effect of each group's latent factor on ``y``.
        noise_sd: Standard deviation of the response noise.
        random_state: Seed or Generator.

    Returns:
        DataFrame with column ``y`` first, then predictors ``X1..X{no_var_total}``.
        The first ``sum(group_size)`` predictors are the informative ones.

    Example:
        >>> data = simulate_correlated_data(no_samples=50, random_state=0)
        >>> data.shape
        (50, 501)
    """
    # Reuse the schema checks for group/effect consistency
    SimulationConfig(
        no_samples=no_samples,
        group_size=list(group_size),
        no_var_total=no_var_total,
        corr=corr,
        effects=list(effects),
        noise_sd=noise_sd,
    )

    rng = make_rng(random_state)
    X = rng.standard_normal((no_samples, no_var_total))
    latent = rng.standard_normal((no_samples, len(group_size)))

    start = 0
    for g, size in enumerate(group_size):
        cols = slice(start, start + size)
        X[:, cols] = np.sqrt(corr) * latent[:, [g]] + np.sqrt(1.0 - corr) * X[:, cols]
        start += size

    y = latent @ np.asarray(effects, dtype=float) + noise_sd * rng.standard_normal(no_samples)

    columns = [f"X{i + 1}" for i in range(no_var_total)]
    data = pd.DataFrame(X, columns=columns)
    data.insert(0, "y", y)

    logger.debug(
        f"Simulated {no_samples} samples: {len(group_size)} groups "
        f"({sum(group_size)} informative), {no_var_total} predictors"
    )
    return data


def informative_features(group_size: Sequence[int] = (10, 10, 10, 10, 10, 10)) -> list[str]:
    """Names of the informative predictors produced by :func:`simulate_correlated_data`."""
    return [f"X{i + 1}" for i in range(int(sum(group_size)))]


def simulate_from_config(config: SimulationConfig) -> pd.DataFrame:
    """Run :func:`simulate_correlated_data` with a validated configuration."""
    return simulate_correlated_data(**config.model_dump())
