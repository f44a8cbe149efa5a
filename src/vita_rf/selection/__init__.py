"""Vita variable selection: empirical p-values and selection."""

from vita_rf.selection.pvalues import adjust_pvalues, empirical_null, janitza_pvalues
from vita_rf.selection.vita import (
    VitaResult,
    VitaSelector,
    select_variables,
    var_sel_vita,
    var_sel_vita_from_config,
)

__all__ = [
    "adjust_pvalues",
    "empirical_null",
    "janitza_pvalues",
    "VitaResult",
    "VitaSelector",
    "select_variables",
    "var_sel_vita",
    "var_sel_vita_from_config",
]
