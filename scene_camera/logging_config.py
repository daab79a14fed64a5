"""
Logging Configuration
Sets up the package logger for the viewer and the camera controller.
"""
import logging
import sys
from typing import Final, Optional

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)7s | %(name)s | %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'scene_camera' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
    """
    logger = logging.getLogger("scene_camera")
    logger.setLevel(level)

    # Avoid duplicate lines when main() runs more than once in a process
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # pygame is chatty; only let warnings through.
    logging.getLogger("pygame").setLevel(logging.WARNING)

    logger.debug("Logging initialized.")
    return logger
