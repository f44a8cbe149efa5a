"""Configuration management for vita-rf."""

from vita_rf.config.defaults import (
    DEFAULT_FOREST_CONFIG,
    DEFAULT_SIMULATION_CONFIG,
    DEFAULT_VITA_CONFIG,
    VALID_FDR_METHODS,
    VALID_IMPORTANCE_MODES,
    VALID_TREE_TYPES,
)
from vita_rf.config.loader import (
    apply_overrides,
    load_select_config,
    load_simulation_config,
    load_vita_config,
    save_config,
)
from vita_rf.config.schema import (
    ForestConfig,
    OutputConfig,
    SelectRunConfig,
    SimulationConfig,
    VitaConfig,
)
from vita_rf.config.validation import (
    ConfigValidationError,
    ConfigValidationWarning,
    validate_select_config,
    validate_vita_config,
)

__all__ = [
    "VALID_TREE_TYPES",
    "VALID_IMPORTANCE_MODES",
    "VALID_FDR_METHODS",
    "DEFAULT_FOREST_CONFIG",
    "DEFAULT_VITA_CONFIG",
    "DEFAULT_SIMULATION_CONFIG",
    "apply_overrides",
    "load_vita_config",
    "load_select_config",
    "load_simulation_config",
    "save_config",
    "ForestConfig",
    "VitaConfig",
    "SimulationConfig",
    "OutputConfig",
    "SelectRunConfig",
    "ConfigValidationError",
    "ConfigValidationWarning",
    "validate_vita_config",
    "validate_select_config",
]
