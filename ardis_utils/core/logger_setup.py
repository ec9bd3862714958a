# core/logger_setup.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "ardis_utils"
MAX_LOG_BYTES = 5 * 1024 * 1024


def setup_logger(level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the package logger: stderr always, plus a UTF-8 file when
    log_file is given. Command results go to stdout and never through here.
    """
    log_format = '%(asctime)s - %(levelname)s - %(module)s.%(funcName)s: %(message)s'
    formatter = logging.Formatter(log_format, '%Y-%m-%d %H:%M:%S')

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Rotate the log file if it's too large
        try:
            if log_path.exists() and log_path.stat().st_size > MAX_LOG_BYTES:
                log_path.replace(log_path.with_suffix('.log.old'))
        except OSError:
            pass

        file_handler = logging.FileHandler(str(log_path), encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logger initialized (level=%s).", logging.getLevelName(level))
    return logger
