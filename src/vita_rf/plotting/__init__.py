"""Plotting utilities for Vita selection results."""

from vita_rf.plotting.importance import plot_null_distribution, plot_vita_importance

__all__ = [
    "plot_null_distribution",
    "plot_vita_importance",
]
