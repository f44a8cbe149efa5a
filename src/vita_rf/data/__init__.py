"""Data loading, validation and simulation."""

from vita_rf.data.io import as_design_frame, read_dataset, validate_design
from vita_rf.data.simulation import (
    informative_features,
    simulate_correlated_data,
    simulate_from_config,
)

__all__ = [
    "as_design_frame",
    "read_dataset",
    "validate_design",
    "informative_features",
    "simulate_correlated_data",
    "simulate_from_config",
]
