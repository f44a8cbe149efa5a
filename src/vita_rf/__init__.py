"""
vita-rf: Random-forest variable selection with the Vita approach

Empirical p-values for variable importance from the mirrored distribution of
non-positive importances (Janitza et al., 2015), for high-dimensional omics
data.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from vita_rf import (  # noqa: E402
    config,
    data,
    forest,
    plotting,
    selection,
    utils,
)
from vita_rf.forest import holdout_rf  # noqa: E402
from vita_rf.selection import VitaSelector, var_sel_vita  # noqa: E402

__all__ = [
    "__version__",
    "config",
    "data",
    "forest",
    "plotting",
    "selection",
    "utils",
    "holdout_rf",
    "var_sel_vita",
    "VitaSelector",
]
