"""
Default configuration values.

Single source of truth for parameter defaults shared by the schema, the
library entry points and the CLI.
"""

from typing import Any

VALID_TREE_TYPES = [
    "regression",
    "classification",
    "probability",
]

VALID_IMPORTANCE_MODES = [
    "none",
    "impurity",
    "impurity_corrected",
    "permutation",
]

# statsmodels.stats.multitest method names
VALID_FDR_METHODS = [
    "fdr_bh",
    "fdr_by",
]

# Sample fraction used when trees are grown without replacement
SAMPLE_FRACTION_NO_REPLACE = 0.632

# Below this many negative importances the empirical null is considered thin
MIN_NEGATIVE_IMPORTANCES = 100

DEFAULT_FOREST_CONFIG: dict[str, Any] = {
    "ntree": 500,
    "mtry_prop": 0.2,
    "nodesize_prop": 0.1,
    "no_threads": 1,
    "tree_type": "regression",
    "importance": "impurity_corrected",
    "replace": True,
    "sample_fraction": None,  # None = 1.0 with replacement, 0.632 without
    "perm_repeats": 1,
    "random_state": None,
}

DEFAULT_VITA_CONFIG: dict[str, Any] = {
    "p_t": 0.05,
    "fdr_adj": True,
    "fdr_method": "fdr_bh",
    "conf_level": 0.95,
    "holdout": False,
}

DEFAULT_SIMULATION_CONFIG: dict[str, Any] = {
    "no_samples": 100,
    "group_size": [10, 10, 10, 10, 10, 10],
    "no_var_total": 500,
    "corr": 0.9,
    "effects": [3.0, -3.0, 2.0, -2.0, 1.0, -1.0],
    "noise_sd": 1.0,
    "random_state": None,
}

DEFAULT_OUTPUT_CONFIG: dict[str, Any] = {
    "outdir": "results",
    "save_plots": True,
    "plot_format": "png",
    "plot_top_n": 30,
    "save_forest": False,
}
