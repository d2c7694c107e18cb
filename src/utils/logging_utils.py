"""
logging_utils.py
----------------

Colorized console logging for render runs, plus an optional rotating log
file per run.
"""

__all__ = ["configure_logging", "ColorFormatter"]

import os
import time
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from colorama import Fore, Style, init as colorama_init

PathLike = Union[str, os.PathLike]

DATEFMT = "%H:%M:%S"
FILE_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
MAX_LOG_BYTES = 5_000_000
LOG_BACKUPS = 5

LEVEL_COLORS = {
    logging.DEBUG:    Fore.CYAN,
    logging.INFO:     Fore.GREEN,
    logging.WARNING:  Fore.YELLOW,
    logging.ERROR:    Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """``[time] [LEVEL] [logger] message`` with the level name colored."""

    def format(self, record: logging.LogRecord) -> str:
        level = f"{LEVEL_COLORS.get(record.levelno, '')}{record.levelname:<8s}{Style.RESET_ALL}"
        line = (f"[{self.formatTime(record, self.datefmt)}] [{level}] "
                f"[{record.name}] {record.getMessage()}")
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _run_log_path(log_dir: PathLike, run_prefix: str) -> Path:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    stamp = time.strftime("%Y-%m-%d_%H%M%S")
    return directory / f"{run_prefix}_PID{os.getpid()}_{stamp}.log"


def configure_logging(level: int = logging.INFO,
                      log_dir: Optional[PathLike] = None,
                      name: Optional[str] = None,
                      run_prefix: str = "run") -> Optional[Path]:
    """
    Reset the handlers of logger ``name`` (root by default) to a colorized
    console handler and, when ``log_dir`` is given, a rotating file handler
    (5 MB x 5 backups).

    Returns:
        Path of the log file, or None for console-only logging.
    """
    colorama_init(strip=False)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    while logger.handlers:
        stale = logger.handlers[0]
        logger.removeHandler(stale)
        stale.close()

    console = logging.StreamHandler()
    console.setFormatter(ColorFormatter(datefmt=DATEFMT))
    logger.addHandler(console)

    log_path = None
    if log_dir is not None:
        log_path = _run_log_path(log_dir, run_prefix)
        file_handler = RotatingFileHandler(log_path, maxBytes=MAX_LOG_BYTES,
                                           backupCount=LOG_BACKUPS)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATEFMT))
        logger.addHandler(file_handler)

    logger.debug(f"Logging at {logging.getLevelName(level)}; file: {log_path or 'none'}")
    return log_path
