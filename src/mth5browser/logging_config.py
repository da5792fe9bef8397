"""
Logging Configuration
Routes the browser's log records (file loading, skipped links, unreadable
attributes, export progress) to the console and, optionally, to a log file.
"""
import logging
import sys
from typing import Optional

APP_LOGGER = "mth5browser"

# Third-party loggers kept at WARNING unless the browser runs at DEBUG
LIBRARY_LOGGERS = ("h5py", "pyqtgraph")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the 'mth5browser' logger namespace.

    Args:
        level: Logging level for the browser modules (e.g. logging.DEBUG)
        log_file: Optional path; the log of this session is written there too.
    """
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)

    # Opening a second window in the same interpreter reconfigures from scratch
    if logger.hasHandlers():
        logger.handlers.clear()

    # Format: Time - Module - Level - Message
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # 1. Console
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. Session log file
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger.debug(f"Logging initialized (level={logging.getLevelName(level)}, file={log_file or '-'}).")
