"""Logging configuration for Budgetbook.

The CLI reports its results through the logger, so the console shows
plain messages at INFO while the dated log file keeps the DEBUG trail of
every service mutation.
"""

import logging
from datetime import date
from pathlib import Path
from config import Config

LOGGER_NAME = "budgetbook"


class ConsoleFormatter(logging.Formatter):
    """Print INFO lines bare and prefix everything else with its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno == logging.INFO:
            return message
        return f"{record.levelname}: {message}"


def get_log_file_path(config: Config, day: date = None) -> Path:
    """Path of the log file for ``day`` (today by default)."""
    day = day or date.today()
    return config.log_dir / f"budgetbook-{day.isoformat()}.log"


def setup_logging(config: Config, verbose: bool = False) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        config: Application configuration containing log settings.
        verbose: Show the configured level on the console too. Otherwise
            the console stays at INFO or above so debug output only goes
            to the file.

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)

    # Calling this twice must not leave the previous day's file open
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(get_log_file_path(config), encoding="utf-8")
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    if verbose:
        console_handler.setLevel(config.log_level)
    else:
        console_handler.setLevel(max(logging.INFO, logger.level))
    console_handler.setFormatter(ConsoleFormatter("%(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.debug(f"Using database {config.db_path}")
    return logger


def get_logger() -> logging.Logger:
    """Get the application logger.

    Returns:
        The budgetbook logger instance.
    """
    return logging.getLogger(LOGGER_NAME)
