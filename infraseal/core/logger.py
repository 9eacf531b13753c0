"""Unified logging for InfraSeal with console and file output."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

ROOT_LOGGER = "infraseal"

# Log file configuration
LOG_DIR = Path.home() / ".infraseal"
LOG_FILE = LOG_DIR / "infraseal.log"

# Track if file logging has been set up
_file_logging_configured = False


def setup_file_logging(log_file: str = None, verbose: bool = False):
    """Set up file logging for InfraSeal runs.

    Args:
        log_file: Path to log file (defaults to ~/.infraseal/infraseal.log)
        verbose: Enable debug-level logging

    Note:
        Creates log directory if it doesn't exist.
        Falls back to /tmp if the directory is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target_log_file = Path("/tmp/infraseal.log")
        target_log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger(ROOT_LOGGER)
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    file_formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    set_verbosity(verbose)

    _file_logging_configured = True

    root_logger.info(f"InfraSeal logging initialized: {target_log_file}")


def set_verbosity(verbose: bool = False) -> None:
    """Switch the package logger between INFO and DEBUG."""
    logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG if verbose else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the InfraSeal hierarchy.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger whose records reach the shared Rich console handler

    Note:
        The console handler lives on the package root logger so that
        set_verbosity() and setup_file_logging() govern every module.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)

    # Only add console handler if not already present
    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.INFO)

    return logging.getLogger(name)
