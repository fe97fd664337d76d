"""
HyperClass Logging Configuration
================================
Centralized logging configuration using loguru.

Usage:
    from hyperclass.core.logging_config import configure_logging

    # At application startup:
    configure_logging(level="INFO")

    # In modules:
    from loguru import logger
    logger.info("Message")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from loguru import logger

_CONFIGURED = False

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            log_level = logger.level(record.levelname).name
        except ValueError:
            log_level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(log_level, record.getMessage())


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    *,
    sink=None,
) -> int:
    """
    Configure loguru logging for HyperClass.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). If None,
            LOG_LEVEL is checked, then INFO.
        json_format: If True, emit one JSON object per record. If None,
            check the LOG_FORMAT env var.
        sink: Optional file path or stream. If None, logs to stderr.

    Returns:
        The loguru handler id.
    """
    global _CONFIGURED

    if json_format is None:
        json_format = os.environ.get("LOG_FORMAT", "").lower() == "json"
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")

    logger.remove()

    log_sink = sink if sink is not None else sys.stderr
    if json_format:
        handler_id = logger.add(log_sink, level=level.upper(), serialize=True, backtrace=True)
    else:
        handler_id = logger.add(
            log_sink,
            level=level.upper(),
            format=HUMAN_FORMAT,
            colorize=None if sink is None else False,
            backtrace=True,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    _CONFIGURED = True
    logger.debug(f"Logging configured: level={level}, json_format={json_format}")
    return handler_id


def is_configured() -> bool:
    return _CONFIGURED


__all__ = ["configure_logging", "is_configured", "InterceptHandler", "HUMAN_FORMAT"]
