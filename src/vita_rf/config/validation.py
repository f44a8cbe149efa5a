"""
Configuration sanity checks.

Schema validation rejects impossible values; this module flags settings that
are legal but likely to give unreliable p-values.
"""

import warnings

from vita_rf.config.schema import SelectRunConfig, VitaConfig


class ConfigValidationError(Exception):
    """Raised when configuration validation fails in strict mode."""

    pass


class ConfigValidationWarning(UserWarning):
    """Warning for potential configuration issues."""

    pass


def validate_vita_config(config: VitaConfig, strictness: str = "warn") -> list[str]:
    """
    Check a Vita configuration for settings that weaken the empirical null.

    Args:
        config: VitaConfig instance
        strictness: "off", "warn", or "error"

    Returns:
        List of issue messages (empty if none)
    """
    issues = []
    forest = config.forest

    if forest.ntree < 100:
        issues.append(
            f"forest.ntree={forest.ntree} is small; importance estimates will be noisy."
        )

    if config.p_t > 0.2:
        issues.append(f"p_t={config.p_t} is a very permissive selection threshold.")

    if not config.fdr_adj:
        issues.append(
            "fdr_adj=False: raw empirical p-values are not corrected for multiple testing."
        )

    if config.holdout and forest.perm_repeats == 1 and forest.ntree < 500:
        issues.append(
            "Hold-out permutation importance with few trees and a single permutation "
            "per feature; consider raising forest.ntree or forest.perm_repeats."
        )

    if not forest.replace and forest.sample_fraction == 1.0:
        issues.append(
            "forest.replace=False with sample_fraction=1.0 grows every tree on all samples."
        )

    _handle_issues(issues, strictness, "Vita configuration")
    return issues


def validate_select_config(config: SelectRunConfig, strictness: str = "warn") -> list[str]:
    """
    Validate a complete selection run configuration.

    Args:
        config: SelectRunConfig instance
        strictness: "off", "warn", or "error"

    Returns:
        List of issue messages (empty if none)
    """
    issues = []

    if config.infile is not None and not config.infile.exists():
        issues.append(f"infile does not exist: {config.infile}")

    if config.feature_cols is not None and config.target_col in config.feature_cols:
        issues.append(f"target_col '{config.target_col}' is listed in feature_cols.")

    if config.id_col is not None and config.id_col == config.target_col:
        issues.append("id_col and target_col are the same column.")

    _handle_issues(issues, strictness, "Select configuration")
    return issues + validate_vita_config(config.vita, strictness)


def _handle_issues(issues: list[str], strictness: str, context: str):
    """Report issues according to strictness level."""
    if not issues or strictness == "off":
        return

    message = f"{context} issues:\n" + "\n".join(f"  - {issue}" for issue in issues)

    if strictness == "error":
        raise ConfigValidationError(message)

    warnings.warn(message, ConfigValidationWarning, stacklevel=3)
