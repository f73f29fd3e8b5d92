"""
Logging setup for the spendpolicy command line.

Library modules only create loggers; handlers are installed here, on the
"spendpolicy" logger, and only by the CLI.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "spendpolicy"


def configure_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """
    Route spendpolicy log records to stderr through Rich.

    Args:
        verbose: Show INFO records
        debug: Show DEBUG records (wins over verbose)

    Returns:
        The configured package logger
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
