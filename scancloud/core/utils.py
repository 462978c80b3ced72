from __future__ import annotations
import logging

LOGGER_NAME = "scancloud"
LOG_FORMAT = "[%(levelname)s] %(message)s"


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def configure_logging(level: str) -> int:
    """Apply a textual level (``"DEBUG"``, ``"info"``...) to the package logger."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    get_logger().setLevel(numeric)
    return numeric
