"""Logging setup for pykill.

The terminal belongs to the UI, so log records go to a rotating file.
"""

import logging
from logging.handlers import RotatingFileHandler

from pykill.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: RotatingFileHandler | None = None


def setup_logging(
    settings: Settings,
    max_file_size: int = 5 * 1024 * 1024,
    backup_count: int = 2,
) -> RotatingFileHandler:
    """
    Attach a rotating file handler to the pykill logger, once per process.

    Args:
        settings: Supplies the log file and level.
        max_file_size: Bytes before the file is rotated.
        backup_count: Rotated files to keep.
    """
    global _handler

    logger = logging.getLogger("pykill")
    logger.setLevel(settings.log_level)
    if _handler is not None:
        return _handler

    log_path = settings.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    _handler = RotatingFileHandler(log_path, maxBytes=max_file_size, backupCount=backup_count)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.info(f"Logging to {log_path}")
    return _handler


def teardown_logging() -> None:
    """Detach and close the handler installed by setup_logging()."""
    global _handler

    if _handler is not None:
        logging.getLogger("pykill").removeHandler(_handler)
        _handler.close()
        _handler = None
