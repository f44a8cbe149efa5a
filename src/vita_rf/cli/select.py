"""CLI implementation for the ``vita select`` command."""

from datetime import datetime
from pathlib import Path
from typing import Any

from vita_rf import __version__
from vita_rf.config.loader import load_select_config, print_config_summary, save_config
from vita_rf.config.validation import validate_select_config
from vita_rf.data.io import read_dataset
from vita_rf.plotting.importance import plot_null_distribution, plot_vita_importance
from vita_rf.selection.vita import VitaResult, var_sel_vita_from_config
from vita_rf.utils.logging import (
    auto_log_path,
    finalize_live_log,
    log_section,
    setup_logger,
    verbosity_to_level,
)
from vita_rf.utils.serialization import library_versions, save_joblib, save_json


def save_selection_results(
    result: VitaResult,
    outdir: Path,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Path]:
    """
    Write the selection table and the selected variable list.

    Args:
        result: VitaResult from var_sel_vita
        outdir: Output directory
        metadata: Extra fields stored in selected_variables.json

    Returns:
        Dict of artifact name -> written path
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    info_path = outdir / "vita_info.csv"
    result.info.to_csv(info_path, index_label="variable")

    selected_path = outdir / "selected_variables.json"
    payload = {
        "n_variables": int(len(result.info)),
        "n_selected": result.n_selected,
        "selected": result.var,
    }
    if metadata:
        payload.update(metadata)
    save_json(payload, selected_path)

    return {"info": info_path, "selected": selected_path}


def run_select(
    config_file: str | None = None,
    cli_args: dict[str, Any] | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
) -> VitaResult:
    """
    Run Vita variable selection from the command line.

    Args:
        config_file: Path to YAML config file
        cli_args: CLI arguments in dot-notation (None values ignored)
        overrides: "key=value" override strings
        verbose: Verbosity count from ``-v``

    Returns:
        VitaResult
    """
    config = load_select_config(config_file=config_file, cli_args=cli_args, overrides=overrides)

    run_id = config.run_id or datetime.now().strftime("%Y%m%d_%H%M%S")
    outdir = Path(config.output.outdir)
    logger = setup_logger(
        "vita_rf",
        level=verbosity_to_level(verbose),
        log_file=auto_log_path("select", outdir=outdir, run_id=run_id),
        use_live_log=True,
    )

    try:
        if config.infile is None:
            raise ValueError("No input file given (use --infile or set 'infile' in the config).")

        log_section(logger, f"Vita variable selection (run {run_id})")
        validate_select_config(config)
        if verbose:
            print_config_summary(config, logger=logger)

        X, y = read_dataset(
            config.infile,
            target_col=config.target_col,
            feature_cols=config.feature_cols,
            id_col=config.id_col,
        )

        result = var_sel_vita_from_config(X, y, config.vita)

        forest_cfg = config.vita.forest
        artifacts = save_selection_results(
            result,
            outdir,
            metadata={
                "run_id": run_id,
                "holdout": config.vita.holdout,
                "importance": forest_cfg.importance,
                "p_t": config.vita.p_t,
                "fdr_adj": config.vita.fdr_adj,
                "vita_rf_version": __version__,
            },
        )
        save_config(config, outdir / "config_resolved.yaml")

        if config.output.save_plots:
            meta_lines = [
                f"run={run_id}  n={len(X)}  p={X.shape[1]}  ntree={forest_cfg.ntree}",
                f"importance={forest_cfg.importance}  p_t={config.vita.p_t}  "
                f"fdr={config.vita.fdr_method if config.vita.fdr_adj else 'none'}",
            ]
            fmt = config.output.plot_format
            plot_vita_importance(
                result.info,
                outdir / "plots" / f"vita_importance.{fmt}",
                top_n=config.output.plot_top_n,
                meta_lines=meta_lines,
            )
            plot_null_distribution(
                result.info["vim"],
                outdir / "plots" / f"null_distribution.{fmt}",
                selected=result.var,
                meta_lines=meta_lines,
            )

        if config.output.save_forest:
            save_joblib(
                {"forest": result.forest, "versions": library_versions()},
                outdir / "forest.joblib",
            )

        logger.info(f"Selected {result.n_selected}/{len(result.info)} variables")
        logger.info(f"Results saved to: {artifacts['info'].parent}")
        return result

    except Exception as e:
        logger.error(f"Vita selection failed: {e}")
        raise
    finally:
        finalize_live_log(logger)
