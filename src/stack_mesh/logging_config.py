"""
Logging Configuration
Sets up the package logger for mesh assembly runs.
"""
import logging
import sys
from typing import Optional


def setup_logging(
    level: int = logging.INFO, log_file: Optional[str] = None, rank: int = 0
) -> None:
    """
    Configures the logger for the 'stack_mesh' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        rank: Rank of the calling process, added to every record so output
            from several ranks can be told apart.
    """
    logger = logging.getLogger("stack_mesh")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        f"%(asctime)s - [rank {rank}] %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
