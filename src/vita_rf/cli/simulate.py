"""CLI implementation for the ``vita simulate`` command."""

from pathlib import Path

import pandas as pd

from vita_rf.config.loader import load_simulation_config
from vita_rf.data.simulation import simulate_from_config
from vita_rf.utils.logging import setup_logger, verbosity_to_level


def run_simulate(
    outfile: str,
    config_file: str | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
) -> pd.DataFrame:
    """
    Generate a correlated-group toy data set and write it as CSV.

    Args:
        outfile: Output CSV path
        config_file: Optional YAML simulation config
        overrides: "key=value" override strings
        verbose: Verbosity count from ``-v``

    Returns:
        The simulated DataFrame
    """
    logger = setup_logger("vita_rf", level=verbosity_to_level(verbose))

    config = load_simulation_config(config_file=config_file, overrides=overrides)
    data = simulate_from_config(config)

    outfile = Path(outfile)
    outfile.parent.mkdir(parents=True, exist_ok=True)
    data.to_csv(outfile, index=False)

    logger.info(
        f"Simulated {config.no_samples} samples x {config.no_var_total} predictors "
        f"({sum(config.group_size)} informative) -> {outfile}"
    )
    return data
