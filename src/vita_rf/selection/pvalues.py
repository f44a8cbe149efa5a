"""
Empirical p-values for variable importance (Janitza et al., 2015).

Noise variables have importance scattered symmetrically around zero when the
importance is unbiased (hold-out permutation or corrected impurity). The
negative and zero importances therefore describe the lower half of the null
distribution; mirroring the negative part gives the full null, against which
each importance gets an upper-tail p-value.

References:
    Janitza, S., Celik, E. & Boulesteix, A.-L. (2015). A computationally fast
    variable importance test for random forests for high-dimensional data.
    Technical Report 185, University of Munich.
    Benjamini, Y. & Yekutieli, D. (2001). The control of the false discovery
    rate in multiple testing under dependency. Annals of Statistics 29.
"""

import logging

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

from vita_rf.config.defaults import MIN_NEGATIVE_IMPORTANCES, VALID_FDR_METHODS

logger = logging.getLogger(__name__)


def empirical_null(importance) -> np.ndarray:
    """
    Build the symmetric null distribution from non-positive importances.

    Args:
        importance: Importance scores (array-like or Series)

    Returns:
        Sorted array ``concat(m1, -m1, m2)`` where m1 are the negative and m2
        the zero importances

    Example:
        >>> empirical_null([-0.2, 0.0, 0.5, -0.1]).tolist()
        [-0.2, -0.1, 0.0, 0.1, 0.2]
    """
    vim = np.asarray(importance, dtype=float)
    m1 = vim[vim < 0]
    m2 = vim[vim == 0]
    return np.sort(np.concatenate([m1, -m1, m2]))


def janitza_pvalues(
    importance: pd.Series,
    conf_level: float = 0.95,
    min_negatives: int = MIN_NEGATIVE_IMPORTANCES,
) -> pd.DataFrame:
    """
    Compute empirical p-values against the mirrored non-positive null.

    ``pvalue_i = 1 - #(null < vim_i) / len(null)``. Confidence bounds are
    ``vim_i -/+ q`` with ``q`` the ``conf_level`` quantile of ``|null|``.

    Parameters
    ----------
    importance : pd.Series
        Importance per feature, indexed by feature name
    conf_level : float, default=0.95
        Confidence level for the CI bounds
    min_negatives : int, default=100
        Fewer negative importances than this triggers an accuracy warning

    Returns
    -------
    pd.DataFrame
        Indexed by feature, columns ``vim``, ``CI_lower``, ``CI_upper``, ``pvalue``

    Raises
    ------
    ValueError
        If there are no non-positive importances (empty null), conf_level is
        outside (0, 1), or importance contains non-finite values
    """
    if not 0.0 < conf_level < 1.0:
        raise ValueError(f"conf_level must be in (0, 1) (got {conf_level}).")

    if not isinstance(importance, pd.Series):
        importance = pd.Series(np.asarray(importance, dtype=float))
    vim = importance.to_numpy(dtype=float)

    if not np.all(np.isfinite(vim)):
        raise ValueError("Importance values must be finite.")

    n_negative = int(np.sum(vim < 0))
    null = empirical_null(vim)

    if len(null) == 0:
        raise ValueError(
            "No non-positive importance values found; the empirical null is empty."
        )
    if n_negative == 0:
        logger.warning(
            "No negative importance values found; null built from zero importances only, "
            "p-values are uninformative."
        )
    elif n_negative < min_negatives:
        logger.warning(
            f"Only {n_negative} negative importance values found (< {min_negatives}); "
            "p-values may be inaccurate."
        )

    # searchsorted(side="left") counts null values strictly smaller than vim
    n_smaller = np.searchsorted(null, vim, side="left")
    pvalue = 1.0 - n_smaller / len(null)

    half_width = float(np.quantile(np.abs(null), conf_level))

    result = pd.DataFrame(
        {
            "vim": vim,
            "CI_lower": vim - half_width,
            "CI_upper": vim + half_width,
            "pvalue": pvalue,
        },
        index=importance.index,
    )
    logger.debug(
        f"Janitza null: {len(null)} values ({n_negative} negative), "
        f"CI half-width={half_width:.4g}"
    )
    return result


def adjust_pvalues(pvalues, method: str = "fdr_bh") -> np.ndarray:
    """
    Adjust p-values for multiple testing (false discovery rate).

    Args:
        pvalues: Raw p-values
        method: "fdr_bh" (Benjamini-Hochberg) or "fdr_by" (Benjamini-Yekutieli)

    Returns:
        Adjusted p-values, pointwise >= the raw ones

    Raises:
        ValueError: If method is not recognized
    """
    if method not in VALID_FDR_METHODS:
        raise ValueError(f"Unknown fdr method='{method}'. Valid: {VALID_FDR_METHODS}")

    p = np.asarray(pvalues, dtype=float)
    if p.size == 0:
        return p

    _, p_adj, _, _ = multipletests(p, method=method)
    # Guard against floating-point undershoot of the monotone step-up
    return np.clip(np.maximum(p_adj, p), 0.0, 1.0)
