"""
Logging configuration for the stockwatch CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers; this
module attaches handlers and is called once by the CLI.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure the ``stockwatch`` logger.

    Args:
        level: Minimum level for console and file output.
        log_file: Optional file that receives plain-text log lines.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("stockwatch")

    # Drop handlers from a previous call
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    logger.setLevel(level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format="[%H:%M:%S]",
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
