import logging
import sys

from health_assistant.utils.config import LOG_LEVEL

LOGGER_NAME = "chatbot"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the application logger once and return it.

    Module loggers under ``health_assistant.*`` share the same handler so the
    pipeline stages and the routes end up in one stream.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_configured", False):
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    for name in (LOGGER_NAME, "health_assistant"):
        named = logging.getLogger(name)
        named.setLevel(level)
        named.addHandler(handler)
        named.propagate = False

    logger._configured = True
    return logger


def shorten(text: str, limit: int = 80) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
