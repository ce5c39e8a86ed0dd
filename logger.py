"""Logging configuration for Storefront.

Log records go to a dated file under the configured log directory and to the
console (stderr), so command output written to stdout stays clean.
"""

import logging
from datetime import date
from config import Config

LOGGER_NAME = "storefront"


def setup_logging(config: Config, verbose: bool = False) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        config: Application configuration containing log settings.
        verbose: If True, the console shows DEBUG records (statement timings)
                 regardless of the configured level.

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else config.log_level
    logger.setLevel(level)

    # Calling this twice (tests, scripts) must not duplicate output
    logger.handlers.clear()
    logger.propagate = False

    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter("%(levelname)s - %(message)s")

    log_file_path = config.log_dir / f"{LOGGER_NAME}-{date.today().isoformat()}.log"
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
