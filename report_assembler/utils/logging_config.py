"""
Logging configuration for the report assembler.

All loggers live under the ``report_assembler`` namespace so a single call to
``setup_logging`` controls the whole package.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "report_assembler"

CONSOLE_FORMAT = "%(message)s"
VERBOSE_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> logging.Logger:
    """
    Configure the package root logger.

    Args:
        log_file: Optional path of a file that receives a copy of every record
        verbose: Log at DEBUG level instead of INFO

    Returns:
        The configured root logger of the package
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Re-running setup (tests, repeated CLI calls) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(VERBOSE_CONSOLE_FORMAT if verbose else CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger() -> logging.Logger:
    """Return the package root logger."""
    return logging.getLogger(ROOT_LOGGER_NAME)


def get_module_logger(name: str) -> logging.Logger:
    """Return a logger for a module, nested under the package root."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_assembler_logger() -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.assembler")

