"""CLI implementation for configuration tools."""

import warnings
from pathlib import Path

import click

from vita_rf.config.loader import load_select_config
from vita_rf.config.validation import ConfigValidationWarning, validate_select_config
from vita_rf.utils.logging import setup_logger, verbosity_to_level


def run_config_validate(
    config_file: str | Path,
    strict: bool = False,
    verbose: int = 0,
) -> list[str]:
    """
    Validate a selection configuration file.

    Schema errors abort. Soft issues are reported; with ``strict`` they abort too.

    Args:
        config_file: Path to YAML config file
        strict: Treat issues as errors
        verbose: Verbosity count from ``-v``

    Returns:
        List of issue messages
    """
    logger = setup_logger("vita_rf", level=verbosity_to_level(verbose))

    try:
        config = load_select_config(config_file=config_file)
    except ValueError as e:
        logger.error(str(e))
        raise click.Abort() from e

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConfigValidationWarning)
        issues = validate_select_config(config, strictness="warn")

    if not issues:
        logger.info(f"{config_file}: OK")
        return issues

    for issue in issues:
        logger.warning(issue)

    if strict:
        logger.error(f"{config_file}: {len(issues)} issue(s) (strict mode)")
        raise click.Abort()

    logger.info(f"{config_file}: {len(issues)} issue(s)")
    return issues
