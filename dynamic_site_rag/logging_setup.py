"""Logging configuration for the command line and embedding applications."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(config, level: str | None = None) -> logging.Logger:
    """Attach console (and optional rotating file) handlers to the package logger.

    Args:
        config: ServerConfig with LOG_LEVEL, LOG_FILE and rotation settings
        level: Optional level overriding config.LOG_LEVEL

    Returns:
        The ``dynamic_site_rag`` logger
    """
    logger = logging.getLogger("dynamic_site_rag")
    logger.setLevel((level or config.LOG_LEVEL).upper())
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Reconfiguring replaces earlier handlers instead of duplicating output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.LOG_FILE:
        log_file = Path(config.LOG_FILE)
        # Use RotatingFileHandler for automatic log rotation
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.DEBUG_LOG_MAX_BYTES,
            backupCount=config.DEBUG_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Keep event-loop debug noise out of crawl logs
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return logger
