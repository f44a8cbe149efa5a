"""Random-forest training and variable importance."""

from vita_rf.forest.holdout import HoldoutForest, draw_holdout_weights, holdout_rf
from vita_rf.forest.wrapper import (
    ForestFit,
    build_forest,
    fit_forest,
    impurity_importance,
    resolve_forest_params,
)

__all__ = [
    "ForestFit",
    "build_forest",
    "fit_forest",
    "impurity_importance",
    "resolve_forest_params",
    "HoldoutForest",
    "draw_holdout_weights",
    "holdout_rf",
]
