"""
Application logging configuration.

Every module gets the shared "file_store" logger through setup_logging().
Storage and database failures are logged here with full detail (paths,
stack traces); clients only ever receive static messages.
"""
import logging
import sys

from app.config import settings

LOGGER_NAME = "file_store"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> logging.Logger:
    """
    Return the application logger, attaching a stdout handler on first use.

    The level comes from the LOG_LEVEL setting (INFO by default). Records
    are not propagated to the root logger, so uvicorn's own configuration
    does not print them twice.

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Handlers are attached once, no matter how many modules call this
    if not logger.handlers:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        logger.setLevel(level if isinstance(level, int) else logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)
        logger.propagate = False

    return logger
