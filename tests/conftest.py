"""
Shared pytest fixtures for vita-rf tests.
"""

import logging

import numpy as np
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers that CLI entry points attach to the package logger."""
    yield
    logger = logging.getLogger("vita_rf")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def regression_data():
    """
    Small regression data set: 5 informative features out of 40.

    Returns:
        (X, y, informative) with X a DataFrame of named gene columns
    """
    rng = np.random.default_rng(42)
    n_samples, n_features = 120, 40

    X = pd.DataFrame(
        rng.standard_normal((n_samples, n_features)),
        columns=[f"gene_{i:02d}" for i in range(n_features)],
    )
    y = (
        3.0 * X["gene_00"]
        - 2.5 * X["gene_01"]
        + 2.0 * X["gene_02"]
        + 1.5 * X["gene_03"]
        - 1.5 * X["gene_04"]
        + rng.normal(0, 0.5, n_samples)
    )
    informative = [f"gene_{i:02d}" for i in range(5)]
    return X, y.to_numpy(), informative


@pytest.fixture
def classification_data():
    """Binary classification data: 4 informative features out of 30."""
    rng = np.random.default_rng(7)
    n_samples, n_features = 150, 30

    X = pd.DataFrame(
        rng.standard_normal((n_samples, n_features)),
        columns=[f"prot_{i:02d}" for i in range(n_features)],
    )
    logit = 2.0 * X["prot_00"] - 2.0 * X["prot_01"] + 1.5 * X["prot_02"] + X["prot_03"]
    y = (logit + rng.logistic(size=n_samples) > 0).astype(int).to_numpy()
    return X, y


@pytest.fixture
def toy_csv(tmp_path):
    """Write a small simulated data set to CSV."""
    from vita_rf.data.simulation import simulate_correlated_data

    data = simulate_correlated_data(
        no_samples=80,
        group_size=[5, 5],
        no_var_total=40,
        effects=[3.0, -3.0],
        random_state=0,
    )
    path = tmp_path / "toy.csv"
    data.to_csv(path, index=False)
    return path
