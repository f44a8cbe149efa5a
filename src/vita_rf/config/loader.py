"""
Configuration loading and merging logic.

Supports:
1. Loading from YAML files (with ``_base`` inheritance)
2. CLI argument overrides (dot-notation: e.g., vita.forest.ntree=1000)
3. Validation and resolution
"""

import copy
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vita_rf.config.defaults import (
    DEFAULT_FOREST_CONFIG,
    DEFAULT_OUTPUT_CONFIG,
    DEFAULT_SIMULATION_CONFIG,
    DEFAULT_VITA_CONFIG,
)
from vita_rf.config.schema import SelectRunConfig, SimulationConfig, VitaConfig

# Keys that should always be lists
LIST_KEYS = {
    "group_size",
    "effects",
    "feature_cols",
}

# Keys that should always be strings (not parsed as int/float)
STRING_KEYS = {
    "run_id",
    "target_col",
    "id_col",
}

PATH_LIKE_KEYS = {
    "infile",
    "outdir",
}


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overlay* into *base* (overlay wins on leaf conflicts).

    Returns a new dict; neither input is mutated.
    """
    merged = base.copy()
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml(file_path: str | Path) -> dict[str, Any]:
    """Load configuration from YAML file.

    Supports a ``_base`` key: if present, the referenced YAML file is loaded
    first and the current file's values are deep-merged on top. The ``_base``
    path is resolved relative to the directory containing *file_path*.
    """
    file_path = Path(file_path).resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path) as f:
        config_dict = yaml.safe_load(f) or {}

    base_ref = config_dict.pop("_base", None)
    if base_ref is not None:
        base_path = (file_path.parent / base_ref).resolve()
        base_dict = load_yaml(base_path)
        config_dict = _deep_merge(base_dict, config_dict)

    return config_dict


def resolve_paths_relative_to_config(
    config_dict: dict[str, Any], config_file: Path
) -> dict[str, Any]:
    """
    Resolve relative ``infile`` / ``outdir`` values against the config file directory.

    Args:
        config_dict: Configuration dictionary
        config_file: Path to the config file

    Returns:
        New config dict with relative paths resolved
    """
    config_dir = Path(config_file).resolve().parent

    def resolve(d: dict[str, Any]) -> dict[str, Any]:
        out = {}
        for key, value in d.items():
            if isinstance(value, dict):
                out[key] = resolve(value)
            elif key in PATH_LIKE_KEYS and isinstance(value, str):
                path = Path(value)
                out[key] = str(path if path.is_absolute() else config_dir / path)
            else:
                out[key] = value
        return out

    return resolve(config_dict)


def apply_overrides(config_dict: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """
    Apply CLI overrides to config dictionary.

    Supports dot-notation for nested keys:
        p_t=0.01 -> config_dict['p_t'] = 0.01
        forest.ntree=1000 -> config_dict['forest']['ntree'] = 1000

    Args:
        config_dict: Base configuration dictionary
        overrides: List of "key=value" or "nested.key=value" strings

    Returns:
        Updated config dictionary
    """
    for override in overrides:
        if "=" not in override:
            raise ValueError(f"Invalid override format: {override}. Expected 'key=value'")

        key_path, value_str = override.split("=", 1)
        keys = key_path.split(".")

        target = config_dict
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]

        final_key = keys[-1]
        target[final_key] = _parse_value(
            value_str,
            force_list=final_key in LIST_KEYS,
            force_string=final_key in STRING_KEYS,
        )

    return config_dict


def _parse_value(value_str: str, force_list: bool = False, force_string: bool = False) -> Any:
    """
    Parse string value to appropriate Python type.

    Args:
        value_str: String to parse
        force_list: If True, always return a list (for comma-separated or single values)
        force_string: If True, always return a string (skip int/float parsing)
    """
    if force_string:
        return value_str

    # Boolean
    if value_str.lower() in ("true", "yes"):
        return [True] if force_list else True
    if value_str.lower() in ("false", "no"):
        return [False] if force_list else False

    # None
    if value_str.lower() in ("none", "null"):
        return [None] if force_list else None

    # List (comma-separated) or forced list
    if "," in value_str or force_list:
        return [_parse_scalar(v.strip()) for v in value_str.split(",")]

    return _parse_scalar(value_str)


def _parse_scalar(value_str: str) -> Any:
    """Parse int, then float, falling back to the raw string."""
    try:
        return int(value_str)
    except ValueError:
        pass

    try:
        return float(value_str)
    except ValueError:
        pass

    return value_str


def _default_vita_dict() -> dict[str, Any]:
    config_dict = copy.deepcopy(DEFAULT_VITA_CONFIG)
    config_dict["forest"] = copy.deepcopy(DEFAULT_FOREST_CONFIG)
    return config_dict


def load_vita_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> VitaConfig:
    """
    Load Vita selection configuration from file and CLI overrides.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of CLI overrides in "key=value" format (optional)

    Returns:
        Validated VitaConfig instance
    """
    config_dict = _default_vita_dict()

    if config_file is not None:
        config_dict = _deep_merge(config_dict, load_yaml(config_file))

    if overrides:
        config_dict = apply_overrides(config_dict, overrides)

    try:
        return VitaConfig(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid vita configuration:\n{e}") from e


def load_select_config(
    config_file: str | Path | None = None,
    cli_args: dict[str, Any] | None = None,
    overrides: list[str] | None = None,
) -> SelectRunConfig:
    """
    Load a complete ``vita select`` run configuration.

    Precedence (lowest to highest): defaults, YAML file, CLI arguments,
    ``--override`` strings.

    Args:
        config_file: Path to YAML config file (optional)
        cli_args: Dict of CLI arguments; None values are ignored. Keys may use
            dot-notation (e.g. ``vita.p_t``)
        overrides: List of CLI overrides in "key=value" format (optional)

    Returns:
        Validated SelectRunConfig instance
    """
    config_dict: dict[str, Any] = {
        "vita": _default_vita_dict(),
        "output": copy.deepcopy(DEFAULT_OUTPUT_CONFIG),
    }

    if config_file is not None:
        config_file_path = Path(config_file)
        file_config = load_yaml(config_file_path)
        file_config = resolve_paths_relative_to_config(file_config, config_file_path)
        config_dict = _deep_merge(config_dict, file_config)

    if cli_args:
        for key_path, value in cli_args.items():
            if value is None:
                continue
            keys = key_path.split(".")
            target = config_dict
            for key in keys[:-1]:
                target = target.setdefault(key, {})
            target[keys[-1]] = value

    if overrides:
        config_dict = apply_overrides(config_dict, overrides)

    try:
        return SelectRunConfig(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid select configuration:\n{e}") from e


def load_simulation_config(
    config_file: str | Path | None = None,
    overrides: list[str] | None = None,
) -> SimulationConfig:
    """
    Load simulation configuration from file and CLI overrides.

    Args:
        config_file: Path to YAML config file (optional)
        overrides: List of CLI overrides in "key=value" format (optional)

    Returns:
        Validated SimulationConfig instance
    """
    config_dict = copy.deepcopy(DEFAULT_SIMULATION_CONFIG)

    if config_file is not None:
        config_dict = _deep_merge(config_dict, load_yaml(config_file))

    if overrides:
        config_dict = apply_overrides(config_dict, overrides)

    try:
        return SimulationConfig(**config_dict)
    except ValidationError as e:
        raise ValueError(f"Invalid simulation configuration:\n{e}") from e


def save_config(config: VitaConfig | SelectRunConfig | SimulationConfig, output_path: str | Path):
    """Save resolved configuration to YAML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = config.model_dump(mode="json")

    with open(output_path, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def print_config_summary(config: VitaConfig | SelectRunConfig, logger=None):
    """Print human-readable configuration summary."""
    lines = ["=" * 80, "Configuration Summary", "=" * 80]

    def format_dict(d, indent=0):
        result = []
        for key, value in d.items():
            if isinstance(value, dict):
                result.append(f"{'  ' * indent}{key}:")
                result.extend(format_dict(value, indent + 1))
            else:
                result.append(f"{'  ' * indent}{key}: {value}")
        return result

    lines.extend(format_dict(config.model_dump()))
    lines.append("=" * 80)

    summary = "\n".join(lines)

    if logger:
        logger.info(summary)
    else:
        print(summary)
