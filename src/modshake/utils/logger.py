"""Logging utilities for modshake."""

import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER = "modshake"


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    rich_output: bool = True
) -> logging.Logger:
    """Set up and configure logger.

    Component loggers live under the package logger ("modshake.<name>") and
    propagate to it; only the package logger gets handlers.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR); None leaves it unchanged
        log_file: Optional file path for log output
        rich_output: Use rich formatting for console output

    Returns:
        Configured logger instance
    """
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if name != ROOT_LOGGER:
        return logger

    # Clear existing handlers
    logger.handlers.clear()

    # Console handler with rich formatting
    if rich_output:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
        )

    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


# Default logger instance
logger = setup_logger(level="WARNING")
