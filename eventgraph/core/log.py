"""Application-wide logging setup.

Console gets `[LEVEL] message` at the configured level.  When a log directory
is given, ERROR and above also go to a rotating file there.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_NAME = "eventgraph"


def configure_logging(level="INFO", log_dir: Optional[str] = None,
                      max_bytes: int = 1_000_000, backup_count: int = 3) -> logging.Logger:
    """Configure the `eventgraph` logger and return it.

    Safe to call more than once; handlers from an earlier call are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOG_NAME)
    logger.setLevel(logging.DEBUG)   # handlers filter
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{LOG_NAME}.log"),
            maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    return logger
