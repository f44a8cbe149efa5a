"""Variable selection using the Vita approach.

Pipeline position:
    unbiased importance -> Janitza p-values -> FDR adjustment -> threshold

The importance comes either from one forest with corrected impurity
importance (default) or from two hold-out forests with permutation
importance (``holdout=True``).
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.feature_selection import SelectorMixin
from sklearn.utils.validation import check_is_fitted

from vita_rf.config.schema import VitaConfig
from vita_rf.data.io import as_design_frame
from vita_rf.forest.holdout import HoldoutForest, holdout_rf
from vita_rf.forest.wrapper import ForestFit, fit_forest
from vita_rf.selection.pvalues import adjust_pvalues, janitza_pvalues

logger = logging.getLogger(__name__)


@dataclass
class VitaResult:
    """Result of Vita variable selection.

    Attributes:
        info: One row per variable with ``vim``, ``CI_lower``, ``CI_upper``,
            ``pvalue`` and ``selected`` (1 if selected, else 0).
        var: Selected variable names, sorted.
        forest: Forest(s) that produced the importance.
    """

    info: pd.DataFrame
    var: list[str] = field(default_factory=list)
    forest: ForestFit | HoldoutForest | None = None

    @property
    def n_selected(self) -> int:
        return len(self.var)


def select_variables(pvalues: pd.Series, p_t: float = 0.05) -> pd.Series:
    """0/1 selection flag: 1 where ``pvalue == 0`` or ``pvalue < p_t``."""
    return ((pvalues == 0) | (pvalues < p_t)).astype(int)


def var_sel_vita(
    X,
    y,
    p_t: float = 0.05,
    fdr_adj: bool = True,
    fdr_method: str = "fdr_bh",
    conf_level: float = 0.95,
    ntree: int = 500,
    mtry_prop: float = 0.2,
    nodesize_prop: float = 0.1,
    no_threads: int = 1,
    tree_type: str = "regression",
    importance: str = "impurity_corrected",
    replace: bool = True,
    sample_fraction: float | None = None,
    holdout: bool = False,
    perm_repeats: int = 1,
    random_state: int | None = None,
) -> VitaResult:
    """
    Select variables with empirical p-values from an unbiased importance.

    Parameters
    ----------
    X : pd.DataFrame or np.ndarray
        Predictors, samples in rows. No missing values.
    y : array-like
        Response.
    p_t : float, default=0.05
        Threshold: variables with p-value == 0 or < p_t are selected.
    fdr_adj : bool, default=True
        Adjust p-values for the false discovery rate.
    fdr_method : str, default="fdr_bh"
        "fdr_bh" (Benjamini-Hochberg) or "fdr_by" (Benjamini-Yekutieli).
    conf_level : float, default=0.95
        Confidence level of the CI bounds.
    ntree, mtry_prop, nodesize_prop, no_threads, tree_type, replace,
    sample_fraction, perm_repeats, random_state
        Forest settings, see :func:`vita_rf.forest.wrapper.fit_forest`.
    importance : str, default="impurity_corrected"
        "impurity_corrected" without hold-out, "permutation" with hold-out.
    holdout : bool, default=False
        Use two hold-out forests instead of one forest.

    Returns
    -------
    VitaResult

    Raises
    ------
    TypeError
        If holdout is not a boolean
    ValueError
        If importance does not match the holdout setting or p_t is outside [0, 1]

    Examples
    --------
    >>> from vita_rf.data import simulate_correlated_data
    >>> data = simulate_correlated_data(no_samples=100, random_state=1)
    >>> res = var_sel_vita(data.drop(columns="y"), data["y"], p_t=0.05, random_state=1)
    >>> res.var[:3]  # doctest: +SKIP
    ['X1', 'X10', 'X11']
    """
    if not isinstance(holdout, bool | np.bool_):
        raise TypeError(f"Logical value required for 'holdout' (got {type(holdout).__name__}).")
    if not 0.0 <= p_t <= 1.0:
        raise ValueError(f"p_t must be in [0, 1] (got {p_t}).")

    forest_kwargs = {
        "ntree": ntree,
        "mtry_prop": mtry_prop,
        "nodesize_prop": nodesize_prop,
        "no_threads": no_threads,
        "tree_type": tree_type,
        "importance": importance,
        "replace": replace,
        "sample_fraction": sample_fraction,
        "perm_repeats": perm_repeats,
        "random_state": random_state,
    }

    X_df = as_design_frame(X)

    if holdout:
        if importance != "permutation":
            raise ValueError("Set importance to 'permutation' for holdout.")
        forest = holdout_rf(X_df, y, **forest_kwargs)
    else:
        if importance != "impurity_corrected":
            raise ValueError("Set importance to 'impurity_corrected' for corrected impurity.")
        forest = fit_forest(X_df, y, **forest_kwargs)

    info = janitza_pvalues(forest.variable_importance, conf_level=conf_level)

    if fdr_adj:
        info["pvalue"] = adjust_pvalues(info["pvalue"].to_numpy(), method=fdr_method)

    info["selected"] = select_variables(info["pvalue"], p_t)
    selected = sorted(info.index[info["selected"] == 1].astype(str))

    logger.info(
        f"Vita selection ({'holdout permutation' if holdout else 'corrected impurity'}): "
        f"{len(selected)}/{len(info)} variables selected "
        f"(p_t={p_t}, fdr_adj={fdr_adj})"
    )

    return VitaResult(info=info, var=selected, forest=forest)


def var_sel_vita_from_config(X, y, config: VitaConfig) -> VitaResult:
    """Run :func:`var_sel_vita` with settings from a validated ``VitaConfig``."""
    return var_sel_vita(
        X,
        y,
        p_t=config.p_t,
        fdr_adj=config.fdr_adj,
        fdr_method=config.fdr_method,
        conf_level=config.conf_level,
        holdout=config.holdout,
        **config.forest.to_fit_kwargs(),
    )


class VitaSelector(SelectorMixin, BaseEstimator):
    """Scikit-learn feature selector based on Vita p-values.

    Parameters mirror :func:`var_sel_vita`. After ``fit``, ``info_`` holds the
    per-variable table and ``selected_features_`` the sorted selected names.
    """

    def __init__(
        self,
        p_t: float = 0.05,
        fdr_adj: bool = True,
        fdr_method: str = "fdr_bh",
        conf_level: float = 0.95,
        ntree: int = 500,
        mtry_prop: float = 0.2,
        nodesize_prop: float = 0.1,
        no_threads: int = 1,
        tree_type: str = "regression",
        importance: str = "impurity_corrected",
        replace: bool = True,
        sample_fraction: float | None = None,
        holdout: bool = False,
        perm_repeats: int = 1,
        random_state: int | None = None,
    ):
        self.p_t = p_t
        self.fdr_adj = fdr_adj
        self.fdr_method = fdr_method
        self.conf_level = conf_level
        self.ntree = ntree
        self.mtry_prop = mtry_prop
        self.nodesize_prop = nodesize_prop
        self.no_threads = no_threads
        self.tree_type = tree_type
        self.importance = importance
        self.replace = replace
        self.sample_fraction = sample_fraction
        self.holdout = holdout
        self.perm_repeats = perm_repeats
        self.random_state = random_state

    def fit(self, X, y):
        """Run Vita selection and store the support mask.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
        y : array-like of shape (n_samples,)

        Returns
        -------
        self
        """
        X_df = as_design_frame(X)
        result = var_sel_vita(X_df, y, **self.get_params())

        if isinstance(X, pd.DataFrame):
            self.feature_names_in_ = np.array(X_df.columns, dtype=object)
        self.n_features_in_ = X_df.shape[1]
        self.info_ = result.info
        self.selected_features_ = result.var
        self.forest_ = result.forest
        self.support_mask_ = result.info["selected"].to_numpy() == 1
        return self

    def _get_support_mask(self):
        """Return the boolean support mask (required by SelectorMixin)."""
        check_is_fitted(self, "support_mask_")
        return self.support_mask_
