"""Hold-out permutation importance from two complementary forests.

Samples are split into two folds by one fair coin flip each. Forest 1 is
grown on fold 1 and its permutation importance measured on fold 2; forest 2
does the reverse. The averaged importance is unbiased for noise features,
whose values scatter symmetrically around zero.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from vita_rf.forest.wrapper import ForestFit, fit_forest
from vita_rf.utils.random import derive_seed, make_rng

logger = logging.getLogger(__name__)


@dataclass
class HoldoutForest:
    """Pair of hold-out forests and their combined importance.

    Attributes:
        rf1: Forest grown on samples with weight 1, evaluated on weight 0.
        rf2: Forest grown on samples with weight 0, evaluated on weight 1.
        weights: Fold indicator per sample (0/1).
        variable_importance: Elementwise mean of both forests' importances.
        treetype: Tree type of the forests.
        importance_mode: Always "permutation".
    """

    rf1: ForestFit
    rf2: ForestFit
    weights: np.ndarray
    variable_importance: pd.Series
    treetype: str
    importance_mode: str


def draw_holdout_weights(
    n_samples: int, random_state: int | np.random.Generator | None = None
) -> np.ndarray:
    """One fair Bernoulli draw per sample, as an integer 0/1 vector."""
    rng = make_rng(random_state)
    return rng.binomial(1, 0.5, size=n_samples).astype(int)


def holdout_rf(
    X,
    y,
    ntree: int = 500,
    mtry_prop: float = 0.2,
    nodesize_prop: float = 0.1,
    no_threads: int = 1,
    tree_type: str = "regression",
    importance: str = "permutation",
    replace: bool = True,
    sample_fraction: float | None = None,
    perm_repeats: int = 1,
    random_state: int | None = None,
) -> HoldoutForest:
    """
    Compute hold-out permutation importance.

    Args:
        X: Predictors, samples in rows (DataFrame or 2-D array).
        y: Response vector.
        ntree: Number of trees per forest.
        mtry_prop: Proportion of features tried at each split.
        nodesize_prop: Proportion of samples used as minimum leaf size.
        no_threads: Threads used for tree building.
        tree_type: "regression", "classification" or "probability".
        importance: Must be "permutation".
        replace: Sample with replacement.
        sample_fraction: Fraction of samples per tree.
        perm_repeats: Permutations per feature.
        random_state: Seed for the fold split; each forest gets its own
            seed derived from it.

    Returns:
        HoldoutForest with the averaged importance

    Raises:
        ValueError: If importance is not "permutation" or a fold is empty
    """
    if importance != "permutation":
        raise ValueError(
            f"Hold-out forests require importance='permutation' (got '{importance}')."
        )

    n_samples = len(X)
    weights = draw_holdout_weights(n_samples, random_state)
    n_fold1 = int(weights.sum())
    if n_fold1 == 0 or n_fold1 == n_samples:
        raise ValueError(
            f"Hold-out split left one fold empty ({n_fold1}/{n_samples} samples in fold 1); "
            "more samples or a different random_state are needed."
        )

    logger.info(f"Hold-out folds: {n_fold1} / {n_samples - n_fold1} samples")

    common = {
        "ntree": ntree,
        "mtry_prop": mtry_prop,
        "nodesize_prop": nodesize_prop,
        "no_threads": no_threads,
        "tree_type": tree_type,
        "importance": importance,
        "replace": replace,
        "sample_fraction": sample_fraction,
        "holdout": True,
        "perm_repeats": perm_repeats,
    }
    rf1 = fit_forest(
        X, y, case_weights=weights, random_state=derive_seed(random_state, 0), **common
    )
    rf2 = fit_forest(
        X, y, case_weights=1 - weights, random_state=derive_seed(random_state, 1), **common
    )

    variable_importance = (rf1.variable_importance + rf2.variable_importance) / 2
    variable_importance.name = "variable_importance"

    return HoldoutForest(
        rf1=rf1,
        rf2=rf2,
        weights=weights,
        variable_importance=variable_importance,
        treetype=rf1.treetype,
        importance_mode=rf1.importance_mode,
    )
