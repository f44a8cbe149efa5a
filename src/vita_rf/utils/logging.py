"""
Consistent logging setup for vita-rf.

Library modules use ``logging.getLogger(__name__)``; only CLI entry points
attach handlers through :func:`setup_logger`.
"""

import logging
import shutil
import sys
from pathlib import Path


def setup_logger(
    name: str = "vita_rf",
    level: int = logging.INFO,
    log_file: Path | None = None,
    format_string: str | None = None,
    use_live_log: bool = False,
) -> logging.Logger:
    """
    Setup a logger with console and optional file output.

    USAGE PATTERN:
        - CLI entrypoints: Call this function to create a logger with handlers
        - Library modules: Use logging.getLogger(__name__) directly (no handlers)
        - Child loggers automatically propagate to parent logger with handlers

    Args:
        name: Logger name (typically "vita_rf" for the CLI)
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        format_string: Custom format string (default: timestamp + level + message)
        use_live_log: If True, log to .live file and rename on completion

    Returns:
        Configured logger instance with handlers attached
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    # Child loggers keep propagate=True and bubble up to this one.
    logger.propagate = False

    if format_string is None:
        format_string = "[%(asctime)s] %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if use_live_log:
            live_log_file = log_file.with_suffix(".live")
            file_handler = logging.FileHandler(live_log_file, mode="a")
            # Final path is picked up by finalize_live_log()
            file_handler._final_log_path = log_file
            file_handler._live_log_path = live_log_file
        else:
            file_handler = logging.FileHandler(log_file, mode="a")

        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def verbosity_to_level(verbose: int) -> int:
    """Map a click ``-v`` count to a logging level (0 -> INFO, 1+ -> DEBUG)."""
    return logging.DEBUG if verbose and verbose > 0 else logging.INFO


def finalize_live_log(logger: logging.Logger) -> None:
    """
    Finalize .live log files by renaming them to their final names.

    Call at the end of a CLI command to mark its log as completed.

    Args:
        logger: Logger instance to finalize
    """
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            continue
        if hasattr(handler, "_live_log_path") and hasattr(handler, "_final_log_path"):
            handler.close()
            live_path = Path(handler._live_log_path)
            final_path = Path(handler._final_log_path)

            if live_path.exists():
                shutil.move(str(live_path), str(final_path))
            logger.removeHandler(handler)


def auto_log_path(
    command: str,
    outdir: Path | str = "results",
    run_id: str | None = None,
) -> Path:
    """Build an automatic log file path based on command context.

    Log directory structure:
        logs/
          select/run_{ID}.log
          simulate/run_{ID}.log

    Args:
        command: CLI command name (select, simulate).
        outdir: Results output directory (used to resolve logs/ sibling).
        run_id: Run identifier (falls back to "unknown" if None).

    Returns:
        Absolute Path for the log file. Parent directories are created by
        ``setup_logger(log_file=...)``.
    """
    outdir = Path(outdir).resolve()
    logs_root = outdir.parent / "logs" if outdir.name != "logs" else outdir

    rid = run_id or "unknown"

    if command in ("select", "simulate"):
        return logs_root / command / f"run_{rid}.log"

    return logs_root / "misc" / f"{command}_{rid}.log"


def log_section(logger: logging.Logger, title: str, width: int = 80, char: str = "="):
    """Log a section header."""
    logger.info(char * width)
    logger.info(title)
    logger.info(char * width)
