# shared service logger, import `logger` from here instead of calling logging.getLogger per module
import logging
import os
import sys

LOGGER_NAME = "mini_assistant"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(module)s | %(message)s"

def _build_logger() -> logging.Logger:
    """
    Configure the service logger once.
    - Level is read from LOG_LEVEL (defaults to INFO).
    - Guarded against duplicate handlers when the module is re-imported (e.g. uvicorn reload).
    """
    _logger = logging.getLogger(LOGGER_NAME)
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
    _logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    # let pytest's caplog still see records through the root logger
    _logger.propagate = True
    return _logger

logger = _build_logger()
