"""
Logging setup for the Lambda handlers and pipeline services.

Lambda ships stdout to CloudWatch, so every pipeline logger writes there and
does not propagate to the root logger the runtime installs.
"""

import os
import sys
import logging
from typing import Optional

ROOT_LOGGER_NAME = "media-pipeline"

LOG_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    ),
    "simple": ("%(asctime)s - %(name)s - %(levelname)s - %(message)s", None),
}


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _build_formatter(format_type: str) -> logging.Formatter:
    # Unknown LOG_FORMAT values fall back to the plain layout
    selected = os.getenv("LOG_FORMAT", format_type).lower()
    fmt, datefmt = LOG_FORMATS.get(selected, LOG_FORMATS["simple"])
    return logging.Formatter(fmt, datefmt=datefmt)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a stdout logger for a pipeline component.

    Args:
        name: Logger name, usually a dotted child of ``media-pipeline``
        level: Level name; ``LOG_LEVEL`` is used when omitted, then INFO
        format_type: "structured" or "simple"; ``LOG_FORMAT`` overrides it

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # Warm containers re-run module imports and handler setup
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a pipeline logger configured from the environment."""
    return setup_logger(name)
