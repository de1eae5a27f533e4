"""Logging setup for applications embedding dbstruct."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from dbstruct.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
LOG_FILE = "dbstruct.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def setup_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Route the ``dbstruct`` logger to stdout and to ``LOG_DIR/dbstruct.log``.

    Calling it again replaces the handlers installed by the previous call.
    """
    settings = settings or get_settings()
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("dbstruct")
    logger.setLevel(settings.LOG_LEVEL.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            log_dir / LOG_FILE,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        ),
    ):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Statement echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return logger
