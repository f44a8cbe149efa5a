"""
Data I/O and design-matrix validation.

Reads omics tables (CSV, TSV or Parquet) into a feature matrix and response
vector, and enforces the input contract of the forest trainer: numeric
features, no missing values, one response per sample.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from vita_rf.config.defaults import VALID_TREE_TYPES

logger = logging.getLogger(__name__)


def as_design_frame(X) -> pd.DataFrame:
    """
    Coerce a design matrix to a DataFrame with string feature names.

    DataFrames keep their column names (converted to str). 2-D arrays get
    ``X1..Xp`` names.
    """
    if isinstance(X, pd.DataFrame):
        X_df = X.copy()
        X_df.columns = [str(c) for c in X_df.columns]
        return X_df

    arr = np.asarray(X)
    if arr.ndim != 2:
        raise ValueError(f"Design matrix must be 2-dimensional (got shape {arr.shape}).")
    return pd.DataFrame(arr, columns=[f"X{i + 1}" for i in range(arr.shape[1])])


def validate_design(
    X,
    y,
    tree_type: str = "regression",
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Validate and normalise a design matrix and response for forest training.

    Args:
        X: Feature matrix (DataFrame or 2-D array), samples in rows
        y: Response vector of length n_samples
        tree_type: "regression", "classification" or "probability"

    Returns:
        (X_df, y_series): numeric DataFrame with a RangeIndex and string column
        names, and the response as a Series aligned to it (categorical for
        classification)

    Raises:
        ValueError: On unknown tree type, length mismatch, duplicate feature
            names, missing values, non-numeric features, or a non-numeric
            response in regression/probability mode
    """
    if tree_type not in VALID_TREE_TYPES:
        raise ValueError(f"Unknown tree_type='{tree_type}'. Valid: {VALID_TREE_TYPES}")

    X_df = as_design_frame(X).reset_index(drop=True)
    y_arr = np.asarray(y.to_numpy() if isinstance(y, pd.Series) else y)

    if y_arr.ndim != 1:
        raise ValueError(f"Response must be 1-dimensional (got shape {y_arr.shape}).")
    if len(y_arr) != len(X_df):
        raise ValueError(
            f"Length of y ({len(y_arr)}) and number of rows in X ({len(X_df)}) are different."
        )
    if X_df.shape[1] == 0:
        raise ValueError("Design matrix has no feature columns.")

    dup = X_df.columns[X_df.columns.duplicated()].tolist()
    if dup:
        raise ValueError(f"Duplicate feature names: {sorted(set(dup))[:10]}")

    non_numeric = [c for c in X_df.columns if not pd.api.types.is_numeric_dtype(X_df[c])]
    if non_numeric:
        raise ValueError(
            f"{len(non_numeric)} non-numeric feature columns (first: {non_numeric[:5]})."
        )

    if X_df.isna().to_numpy().any():
        n_missing = int(X_df.isna().to_numpy().sum())
        raise ValueError(f"Missing values are not allowed ({n_missing} found in X).")

    y_series = pd.Series(y_arr, name=getattr(y, "name", None) or "y")
    if y_series.isna().any():
        raise ValueError("Missing values are not allowed in y.")

    if tree_type in ("regression", "probability"):
        if not pd.api.types.is_numeric_dtype(y_series) or pd.api.types.is_bool_dtype(y_series):
            raise ValueError(f"Only numeric y allowed for {tree_type} mode.")
        y_series = y_series.astype(float)
    else:
        y_series = y_series.astype("category")

    if tree_type in ("classification", "probability") and y_series.nunique() < 2:
        raise ValueError(f"{tree_type} mode needs at least 2 classes in y.")

    return X_df.astype(float), y_series


def read_dataset(
    path: str | Path,
    target_col: str = "y",
    feature_cols: list[str] | None = None,
    id_col: str | None = None,
) -> tuple[pd.DataFrame, pd.Series]:
    """
    Read a tabular data set and split it into features and response.

    Args:
        path: CSV (.csv), TSV (.tsv/.txt) or Parquet (.parquet) file
        target_col: Response column name
        feature_cols: Restrict features to these columns (default: all other columns)
        id_col: Sample identifier column, used as index and excluded from features

    Returns:
        (X, y) with X indexed by id_col when given

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If target or requested feature columns are missing
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".parquet":
        df = pd.read_parquet(path)
    elif suffix in (".tsv", ".txt"):
        df = pd.read_csv(path, sep="\t")
    else:
        df = pd.read_csv(path)

    if target_col not in df.columns:
        raise ValueError(f"Target column '{target_col}' not found in {path.name}.")

    if id_col is not None:
        if id_col not in df.columns:
            raise ValueError(f"ID column '{id_col}' not found in {path.name}.")
        df = df.set_index(id_col)

    if feature_cols is None:
        feature_cols = [c for c in df.columns if c != target_col]
    else:
        missing = [c for c in feature_cols if c not in df.columns]
        if missing:
            raise ValueError(f"{len(missing)} feature columns not found (first: {missing[:5]}).")

    logger.info(
        f"Loaded {path.name}: {len(df)} samples, {len(feature_cols)} features, "
        f"target='{target_col}'"
    )
    return df[feature_cols], df[target_col]
