"""Utility functions for vita-rf."""

from vita_rf.utils.logging import (
    auto_log_path,
    finalize_live_log,
    log_section,
    setup_logger,
)
from vita_rf.utils.random import apply_seed_global, derive_seed, make_rng, set_random_seed
from vita_rf.utils.serialization import load_joblib, load_json, save_joblib, save_json

__all__ = [
    "setup_logger",
    "finalize_live_log",
    "auto_log_path",
    "log_section",
    "set_random_seed",
    "apply_seed_global",
    "derive_seed",
    "make_rng",
    "save_joblib",
    "load_joblib",
    "save_json",
    "load_json",
]
