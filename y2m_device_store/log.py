"""
File logging for processes that host a ConfigStore.

The package itself only logs through ``logging.getLogger(__name__)``; a host
(CLI, web app) calls ``setup_logger()`` once at startup to send those records
to ``logs/store.log``.
"""
import logging
import os
from logging.handlers import RotatingFileHandler


def setup_logger(name="y2m_device_store", log_file="store.log", level=logging.INFO, logs_dir=None):
    """Attach a rotating file handler to ``name`` (10MB per file, 5 backups)."""
    if logs_dir is None:
        logs_dir = os.path.join(os.getcwd(), "logs")
    os.makedirs(logs_dir, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # avoid duplicate handlers when called twice
    for h in list(logger.handlers):
        if isinstance(h, RotatingFileHandler):
            logger.removeHandler(h)
            h.close()

    handler = RotatingFileHandler(
        os.path.join(logs_dir, log_file),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    return logger
