"""Importance plots for Vita selection results.

- Top-N variable importance with CI bounds, coloured by selection
- Mirrored null distribution with the selected importances overlaid
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from vita_rf.selection.pvalues import empirical_null  # noqa: E402

logger = logging.getLogger(__name__)

SELECTED_COLOR = "#2a9d8f"
NOT_SELECTED_COLOR = "#bfbfbf"


def _apply_meta_lines(fig, meta_lines: Sequence[str] | None) -> None:
    if meta_lines:
        fig.text(0.01, 0.005, "\n".join(meta_lines), fontsize=7, color="grey", va="bottom")


def plot_vita_importance(
    info: pd.DataFrame,
    out_path: Path | str,
    top_n: int = 30,
    title: str = "Vita Variable Importance",
    meta_lines: Sequence[str] | None = None,
) -> None:
    """Plot horizontal bars of the top-N importances with CI whiskers.

    Args:
        info: Selection table with ``vim``, ``CI_lower``, ``CI_upper``,
            ``pvalue`` and ``selected`` columns, indexed by variable.
        out_path: Output file path.
        top_n: Number of variables shown (largest importance first).
        title: Plot title.
        meta_lines: Optional metadata lines to display at bottom.
    """
    if info is None or info.empty:
        logger.warning("Empty selection table, skipping importance plot")
        return

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    top = info.sort_values("vim", ascending=False).head(top_n).iloc[::-1]
    names = [str(n) for n in top.index]
    values = top["vim"].to_numpy()
    err = np.vstack([values - top["CI_lower"].to_numpy(), top["CI_upper"].to_numpy() - values])
    colors = [SELECTED_COLOR if s == 1 else NOT_SELECTED_COLOR for s in top["selected"]]

    fig, ax = plt.subplots(figsize=(7, max(3, 0.3 * len(names) + 1.5)))
    ax.barh(range(len(names)), values, xerr=err, color=colors, edgecolor="white",
            linewidth=0.5, error_kw={"elinewidth": 0.8, "ecolor": "#555555"})
    ax.set_yticks(range(len(names)))
    ax.set_yticklabels(names, fontsize=8)
    ax.set_xlabel("Variable importance", fontsize=11)
    ax.axvline(0, color="grey", linewidth=0.8, linestyle="--", alpha=0.6)

    n_sel = int(info["selected"].sum())
    ax.set_title(f"{title}\n{n_sel}/{len(info)} selected", fontsize=12, fontweight="bold")

    _apply_meta_lines(fig, meta_lines)
    fig.tight_layout()
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.debug(f"Saved importance plot: {out_path}")


def plot_null_distribution(
    importance: pd.Series,
    out_path: Path | str,
    selected: Sequence[str] | None = None,
    bins: int = 40,
    title: str = "Empirical Null Distribution",
    meta_lines: Sequence[str] | None = None,
) -> None:
    """Histogram of the mirrored null against all importances.

    Args:
        importance: Importance per variable.
        out_path: Output file path.
        selected: Names of selected variables, marked with rug ticks.
        bins: Histogram bins.
        title: Plot title.
        meta_lines: Optional metadata lines to display at bottom.
    """
    if importance is None or len(importance) == 0:
        logger.warning("Empty importance vector, skipping null distribution plot")
        return

    null = empirical_null(importance)
    if len(null) == 0:
        logger.warning("No non-positive importances, skipping null distribution plot")
        return

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    values = np.asarray(importance, dtype=float)
    edges = np.histogram_bin_edges(np.concatenate([null, values]), bins=bins)

    fig, ax = plt.subplots(figsize=(7, 4))
    ax.hist(values, bins=edges, color="#264653", alpha=0.5, label="All variables")
    ax.hist(null, bins=edges, color="#e76f51", alpha=0.5, label="Mirrored null")

    if selected:
        sel_vals = importance.reindex(list(selected)).dropna().to_numpy()
        ax.plot(sel_vals, np.zeros_like(sel_vals), "|", color=SELECTED_COLOR,
                markersize=12, label=f"Selected (n={len(sel_vals)})")

    ax.set_xlabel("Variable importance", fontsize=11)
    ax.set_ylabel("Count", fontsize=11)
    ax.set_title(title, fontsize=12, fontweight="bold")
    ax.legend(fontsize=9, frameon=False)

    _apply_meta_lines(fig, meta_lines)
    fig.tight_layout()
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    logger.debug(f"Saved null distribution plot: {out_path}")
