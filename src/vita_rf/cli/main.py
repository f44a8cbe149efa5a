"""
Main CLI entry point for vita-rf.

Provides subcommands:
  - vita select: Vita variable selection on a data file
  - vita simulate: Generate correlated-group toy data
  - vita config validate: Check a configuration file
"""

import click

from vita_rf import __version__


@click.group()
@click.version_option(version=__version__, prog_name="vita")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv)",
)
@click.pass_context
def cli(ctx, verbose):
    """
    vita-rf: Random-forest variable selection with the Vita approach.

    Empirical p-values from the mirrored non-positive importance distribution
    (Janitza et al., 2015), with optional FDR adjustment.
    """
    from vita_rf.utils.random import apply_seed_global

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    seed_applied = apply_seed_global()
    if seed_applied is not None:
        ctx.obj["seed_global"] = seed_applied


@cli.command("select")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to YAML configuration file",
)
@click.option(
    "--infile",
    type=click.Path(exists=True),
    default=None,
    help="Input data file (CSV, TSV or Parquet), samples in rows",
)
@click.option(
    "--target",
    "target_col",
    default=None,
    help="Response column name (default: y)",
)
@click.option(
    "--id-col",
    default=None,
    help="Sample identifier column (excluded from features)",
)
@click.option(
    "--outdir",
    type=click.Path(),
    default=None,
    help="Output directory for results (default: results/)",
)
@click.option(
    "--tree-type",
    type=click.Choice(["regression", "classification", "probability"]),
    default=None,
    help="Forest mode",
)
@click.option(
    "--holdout/--no-holdout",
    default=None,
    help="Hold-out permutation importance (--holdout) or corrected impurity "
    "(--no-holdout); default: from config",
)
@click.option(
    "--p-t",
    type=float,
    default=None,
    help="P-value threshold for selection (default: 0.05)",
)
@click.option(
    "--no-fdr",
    is_flag=True,
    default=False,
    help="Skip false discovery rate adjustment",
)
@click.option(
    "--ntree",
    type=int,
    default=None,
    help="Number of trees (default: 500)",
)
@click.option(
    "--threads",
    type=int,
    default=None,
    help="Threads for tree building (default: 1)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Random seed for forests and hold-out folds",
)
@click.option(
    "--run-id",
    default=None,
    help="Run identifier used for log file naming",
)
@click.option(
    "--override",
    multiple=True,
    help="Override config values (format: key=value or nested.key=value)",
)
@click.pass_context
def select(ctx, config, **kwargs):
    """Select variables with empirical Vita p-values."""
    from vita_rf.cli.select import run_select

    overrides = list(kwargs.pop("override", []))
    no_fdr = kwargs.pop("no_fdr", False)
    holdout = kwargs.pop("holdout", None)

    cli_args = {
        "infile": kwargs.get("infile"),
        "target_col": kwargs.get("target_col"),
        "id_col": kwargs.get("id_col"),
        "run_id": kwargs.get("run_id"),
        "output.outdir": kwargs.get("outdir"),
        "vita.p_t": kwargs.get("p_t"),
        "vita.fdr_adj": False if no_fdr else None,
        "vita.forest.tree_type": kwargs.get("tree_type"),
        "vita.forest.ntree": kwargs.get("ntree"),
        "vita.forest.no_threads": kwargs.get("threads"),
        "vita.forest.random_state": kwargs.get("seed"),
    }
    if holdout is not None:
        cli_args["vita.holdout"] = holdout
        cli_args["vita.forest.importance"] = "permutation" if holdout else "impurity_corrected"

    run_select(
        config_file=config,
        cli_args=cli_args,
        overrides=overrides,
        verbose=ctx.obj.get("verbose", 0),
    )


@cli.command("simulate")
@click.option(
    "--outfile",
    type=click.Path(),
    required=True,
    help="Output CSV path",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to YAML simulation configuration",
)
@click.option(
    "--n-samples",
    type=int,
    default=None,
    help="Number of samples (default: 100)",
)
@click.option(
    "--n-vars",
    type=int,
    default=None,
    help="Total number of predictors (default: 500)",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Random seed",
)
@click.option(
    "--override",
    multiple=True,
    help="Override config values (format: key=value)",
)
@click.pass_context
def simulate(ctx, outfile, config, n_samples, n_vars, seed, override):
    """Generate toy data with correlated informative predictor groups."""
    from vita_rf.cli.simulate import run_simulate

    overrides = list(override)
    if n_samples is not None:
        overrides.append(f"no_samples={n_samples}")
    if n_vars is not None:
        overrides.append(f"no_var_total={n_vars}")
    if seed is not None:
        overrides.append(f"random_state={seed}")

    run_simulate(
        outfile=outfile,
        config_file=config,
        overrides=overrides,
        verbose=ctx.obj.get("verbose", 0),
    )


@cli.group("config")
@click.pass_context
def config_group(ctx):
    """Configuration management tools."""
    pass


@config_group.command("validate")
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--strict",
    is_flag=True,
    help="Treat warnings as errors",
)
@click.pass_context
def config_validate(ctx, config_file, strict):
    """Validate a selection configuration file and report issues."""
    from vita_rf.cli.config_tools import run_config_validate

    run_config_validate(
        config_file=config_file,
        strict=strict,
        verbose=ctx.obj.get("verbose", 0),
    )


def main():
    """Entry point for console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
