"""Random-forest trainer used by the Vita selection procedures.

Wraps scikit-learn forests behind one call that takes proportional
hyperparameters (``mtry_prop``, ``nodesize_prop``), optional case weights
with hold-out evaluation, and one of four importance modes:

- ``impurity``: mean decrease in impurity.
- ``impurity_corrected``: impurity importance of each feature minus that of a
  row-permuted shadow copy grown in the same forest. Noise features end up
  symmetric around zero, which is what the Janitza null needs.
- ``permutation``: increase in prediction error after permuting a feature,
  measured on hold-out samples when case weights mark them.
- ``none``: fit only.

Trees are grown by ``RandomForest*`` when sampling with replacement and by
``Bagging*`` of decision trees when subsampling without replacement.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from sklearn.ensemble import (
    BaggingClassifier,
    BaggingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.inspection import permutation_importance
from sklearn.metrics import mean_squared_error
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from vita_rf.config.defaults import SAMPLE_FRACTION_NO_REPLACE, VALID_IMPORTANCE_MODES
from vita_rf.data.io import validate_design
from vita_rf.utils.random import make_rng

logger = logging.getLogger(__name__)

SHADOW_SUFFIX = "__shadow"


@dataclass
class ForestFit:
    """A fitted forest and its variable importance.

    Attributes:
        estimator: Fitted scikit-learn ensemble.
        variable_importance: Importance per feature (None for mode "none").
        treetype: "regression", "classification" or "probability".
        importance_mode: Importance mode used.
        num_trees: Number of trees.
        mtry: Features tried per split, ``floor(mtry_prop * p)``; with corrected
            impurity they are drawn from originals and shadows together.
        min_node_size: Minimum leaf size.
        num_samples: Samples in the design matrix.
        num_independent_variables: Number of features.
        prediction_error: OOB error, or hold-out error when trained with
            hold-out case weights (MSE, misclassification rate, or mean squared
            error of the observed-class probability).
        n_eval: Samples importance and prediction error were evaluated on.
        replace: Whether trees sampled with replacement.
        sample_fraction: Fraction of samples drawn per tree.
        holdout: Whether zero-weight samples were held out for evaluation.
    """

    estimator: Any
    variable_importance: pd.Series | None
    treetype: str
    importance_mode: str
    num_trees: int
    mtry: int
    min_node_size: int
    num_samples: int
    num_independent_variables: int
    prediction_error: float | None = None
    n_eval: int = 0
    replace: bool = True
    sample_fraction: float = 1.0
    holdout: bool = False


def resolve_forest_params(
    n_samples: int,
    n_features: int,
    mtry_prop: float = 0.2,
    nodesize_prop: float = 0.1,
) -> tuple[int, int]:
    """Turn proportional hyperparameters into absolute ``(mtry, min_node_size)``.

    Both are floored and clipped to at least 1.

    Example:
        >>> resolve_forest_params(100, 500)
        (100, 10)
        >>> resolve_forest_params(5, 3, mtry_prop=0.1, nodesize_prop=0.1)
        (1, 1)
    """
    mtry = max(1, math.floor(mtry_prop * n_features))
    min_node_size = max(1, math.floor(nodesize_prop * n_samples))
    return mtry, min_node_size


def build_forest(
    tree_type: str,
    ntree: int,
    mtry: int,
    min_node_size: int,
    no_threads: int = 1,
    replace: bool = True,
    sample_fraction: float = 1.0,
    random_state: int | None = None,
):
    """Create an unfitted scikit-learn ensemble for the given settings.

    Args:
        tree_type: "regression" builds regressors, otherwise classifiers.
        ntree: Number of trees.
        mtry: Features tried per split.
        min_node_size: Minimum samples per leaf.
        no_threads: Parallel jobs for tree building.
        replace: Bootstrap (RandomForest) or subsample without replacement (Bagging).
        sample_fraction: Fraction of samples drawn per tree.
        random_state: Seed.

    Returns:
        Unfitted RandomForest* or Bagging* estimator
    """
    regression = tree_type == "regression"

    if replace:
        forest_cls = RandomForestRegressor if regression else RandomForestClassifier
        return forest_cls(
            n_estimators=ntree,
            max_features=mtry,
            min_samples_leaf=min_node_size,
            bootstrap=True,
            max_samples=sample_fraction,
            oob_score=True,
            n_jobs=no_threads,
            random_state=random_state,
        )

    tree_cls = DecisionTreeRegressor if regression else DecisionTreeClassifier
    bag_cls = BaggingRegressor if regression else BaggingClassifier
    return bag_cls(
        estimator=tree_cls(max_features=mtry, min_samples_leaf=min_node_size),
        n_estimators=ntree,
        max_samples=sample_fraction,
        bootstrap=False,
        n_jobs=no_threads,
        random_state=random_state,
    )


def impurity_importance(estimator, n_features: int) -> np.ndarray:
    """Mean decrease in impurity for a fitted forest or bagging ensemble."""
    if hasattr(estimator, "feature_importances_"):
        return np.asarray(estimator.feature_importances_, dtype=float)

    # Bagging: trees see a (possibly reordered) feature subset
    total = np.zeros(n_features, dtype=float)
    for tree, features in zip(
        estimator.estimators_, estimator.estimators_features_, strict=True
    ):
        total[features] += tree.feature_importances_
    return total / len(estimator.estimators_)


def _shadow_frame(X: pd.DataFrame, rng: np.random.Generator) -> pd.DataFrame:
    """Row-permuted copy of X with ``__shadow`` column names."""
    perm = rng.permutation(len(X))
    shadow = X.iloc[perm].reset_index(drop=True)
    shadow.columns = [f"{c}{SHADOW_SUFFIX}" for c in X.columns]
    return shadow


def observed_class_proba(proba: np.ndarray, classes, y_true) -> np.ndarray:
    """Probability assigned to each sample's observed class.

    Columns of ``proba`` follow ``classes``. Samples whose class is unknown to
    the forest (absent from its training fold) get probability 0.

    Example:
        >>> observed_class_proba(np.array([[0.8, 0.2], [0.3, 0.7]]), [0, 1], [1, 2]).tolist()
        [0.2, 0.0]
    """
    proba = np.asarray(proba, dtype=float).reshape(len(y_true), -1)
    column = {c: i for i, c in enumerate(np.asarray(classes).tolist())}
    idx = np.array([column.get(v, -1) for v in np.asarray(y_true).tolist()], dtype=int)
    known = idx >= 0
    p_obs = np.zeros(len(idx), dtype=float)
    p_obs[known] = proba[np.flatnonzero(known), idx[known]]
    return p_obs


def probability_error(proba: np.ndarray, classes, y_true) -> float:
    """Mean of ``(1 - p_observed)^2``; equals the Brier score for two classes."""
    return float(np.mean((1.0 - observed_class_proba(proba, classes, y_true)) ** 2))


def _neg_probability_error(estimator, X, y) -> float:
    """Scorer callable (estimator, X, y) for probability forests."""
    return -probability_error(estimator.predict_proba(X), estimator.classes_, y)


def _permutation_scoring(tree_type: str):
    if tree_type == "regression":
        return "neg_mean_squared_error"
    if tree_type == "classification":
        return "accuracy"
    # classes_ may be a subset of the labels in a hold-out fold
    return _neg_probability_error


def _prediction_error(estimator, X: pd.DataFrame, y: pd.Series, tree_type: str) -> float:
    """Error on an evaluation set (MSE, misclassification, or probability error)."""
    if tree_type == "regression":
        return float(mean_squared_error(y, estimator.predict(X)))
    if tree_type == "classification":
        return float(np.mean(estimator.predict(X) != y.to_numpy()))
    return probability_error(estimator.predict_proba(X), estimator.classes_, y.to_numpy())


def _oob_error(estimator, y: pd.Series, tree_type: str) -> float | None:
    """Out-of-bag error for bootstrap forests; None when unavailable."""
    if tree_type == "regression":
        pred = getattr(estimator, "oob_prediction_", None)
        if pred is None:
            return None
        ok = ~np.isnan(pred)
        return float(np.mean((y.to_numpy()[ok] - pred[ok]) ** 2)) if ok.any() else None

    proba = getattr(estimator, "oob_decision_function_", None)
    if proba is None:
        return None
    proba = np.asarray(proba, dtype=float).reshape(len(y), -1)
    ok = ~np.isnan(proba).any(axis=1)
    if not ok.any():
        return None
    y_ok = y.to_numpy()[ok]
    if tree_type == "classification":
        pred = estimator.classes_[np.argmax(proba[ok], axis=1)]
        return float(np.mean(pred != y_ok))
    return probability_error(proba[ok], estimator.classes_, y_ok)


def fit_forest(
    X,
    y,
    ntree: int = 500,
    mtry_prop: float = 0.2,
    nodesize_prop: float = 0.1,
    no_threads: int = 1,
    tree_type: str = "regression",
    importance: str = "impurity_corrected",
    replace: bool = True,
    sample_fraction: float | None = None,
    case_weights=None,
    holdout: bool = False,
    perm_repeats: int = 1,
    random_state: int | None = None,
) -> ForestFit:
    """
    Train a random forest and compute variable importance.

    Parameters
    ----------
    X : pd.DataFrame or np.ndarray
        Predictors, samples in rows. No missing values.
    y : array-like
        Response. Numeric for "regression"/"probability".
    ntree : int, default=500
        Number of trees.
    mtry_prop : float, default=0.2
        Proportion of features tried at each split.
    nodesize_prop : float, default=0.1
        Proportion of samples used as minimum leaf size.
    no_threads : int, default=1
        Threads used by scikit-learn for tree building.
    tree_type : str, default="regression"
        "regression", "classification" or "probability".
    importance : str, default="impurity_corrected"
        "none", "impurity", "impurity_corrected" or "permutation".
    replace : bool, default=True
        Sample with replacement.
    sample_fraction : float, optional
        Fraction of samples per tree; defaults to 1.0 with replacement and
        0.632 without.
    case_weights : array-like, optional
        Non-negative per-sample weights.
    holdout : bool, default=False
        With ``case_weights``: grow trees only on positive-weight samples and
        evaluate importance and error on the zero-weight samples.
    perm_repeats : int, default=1
        Permutations per feature for permutation importance.
    random_state : int, optional
        Seed for the forest, shadow permutation and permutation importance.

    Returns
    -------
    ForestFit

    Raises
    ------
    ValueError
        On an unknown importance mode, invalid case weights, or invalid data
    """
    if importance not in VALID_IMPORTANCE_MODES:
        raise ValueError(
            f"Unknown importance='{importance}'. Valid: {VALID_IMPORTANCE_MODES}"
        )

    X_df, y_s = validate_design(X, y, tree_type)
    n_samples, n_features = X_df.shape

    if sample_fraction is None:
        sample_fraction = 1.0 if replace else SAMPLE_FRACTION_NO_REPLACE

    train_mask = np.ones(n_samples, dtype=bool)
    eval_mask = None
    weights = None
    if case_weights is not None:
        weights = np.asarray(case_weights, dtype=float)
        if weights.shape != (n_samples,):
            raise ValueError(
                f"case_weights must have length {n_samples} (got shape {weights.shape})."
            )
        if np.any(weights < 0) or not np.all(np.isfinite(weights)):
            raise ValueError("case_weights must be finite and non-negative.")
        if holdout:
            train_mask = weights > 0
            eval_mask = ~train_mask
            if not train_mask.any() or not eval_mask.any():
                raise ValueError(
                    "Hold-out case weights must mark at least one training sample "
                    "(weight > 0) and one hold-out sample (weight == 0)."
                )
    elif holdout:
        raise ValueError("holdout=True requires case_weights.")

    mtry, min_node_size = resolve_forest_params(n_samples, n_features, mtry_prop, nodesize_prop)

    X_train = X_df[train_mask].reset_index(drop=True)
    y_train = y_s[train_mask].reset_index(drop=True)
    sample_weight = weights[train_mask] if weights is not None else None

    rng = make_rng(random_state)
    X_fit = X_train
    if importance == "impurity_corrected":
        # mtry candidates are drawn from originals and shadows together
        X_fit = pd.concat([X_train, _shadow_frame(X_train, rng)], axis=1)
    fit_mtry = min(mtry, X_fit.shape[1])

    estimator = build_forest(
        tree_type=tree_type,
        ntree=ntree,
        mtry=fit_mtry,
        min_node_size=min_node_size,
        no_threads=no_threads,
        replace=replace,
        sample_fraction=sample_fraction,
        random_state=random_state,
    )
    estimator.fit(X_fit, y_train.to_numpy(), sample_weight=sample_weight)

    if eval_mask is not None:
        X_eval = X_df[eval_mask].reset_index(drop=True)
        y_eval = y_s[eval_mask].reset_index(drop=True)
    else:
        X_eval, y_eval = X_train, y_train

    variable_importance = None
    if importance == "impurity":
        variable_importance = impurity_importance(estimator, n_features)
    elif importance == "impurity_corrected":
        imp = impurity_importance(estimator, 2 * n_features)
        variable_importance = imp[:n_features] - imp[n_features:]
    elif importance == "permutation":
        if eval_mask is None:
            logger.debug("Permutation importance evaluated on training samples (no hold-out)")
        result = permutation_importance(
            estimator,
            X_eval,
            y_eval.to_numpy(),
            scoring=_permutation_scoring(tree_type),
            n_repeats=perm_repeats,
            random_state=random_state,
        )
        variable_importance = result.importances_mean

    if variable_importance is not None:
        variable_importance = pd.Series(
            variable_importance, index=X_df.columns, name="variable_importance"
        )

    if eval_mask is not None and importance != "impurity_corrected":
        prediction_error = _prediction_error(estimator, X_eval, y_eval, tree_type)
    else:
        prediction_error = _oob_error(estimator, y_train, tree_type)

    logger.debug(
        f"Forest fitted: {tree_type}, ntree={ntree}, mtry={mtry}, "
        f"min_node_size={min_node_size}, n_train={int(train_mask.sum())}, "
        f"importance={importance}"
    )

    return ForestFit(
        estimator=estimator,
        variable_importance=variable_importance,
        treetype=tree_type,
        importance_mode=importance,
        num_trees=ntree,
        mtry=mtry,
        min_node_size=min_node_size,
        num_samples=n_samples,
        num_independent_variables=n_features,
        prediction_error=prediction_error,
        n_eval=len(X_eval),
        replace=replace,
        sample_fraction=sample_fraction,
        holdout=eval_mask is not None,
    )
