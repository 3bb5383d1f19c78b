"""Logging setup."""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_LEVEL_ENV = "LLM_CLI_LOG_LEVEL"
_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | {level:<7} | {name}:{function}:{line} | {message}"
_CONFIGURED = False


def configure_logging(level: str = "") -> None:
    """Configure process-level logging once.

    Diagnostics go to stderr so they never mix with a provider's
    output.  ``LLM_CLI_LOG_LEVEL=DEBUG`` shows resolution and spawn
    details.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    level = (level or os.getenv(LOG_LEVEL_ENV, "WARNING")).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT, backtrace=False, diagnose=False)
    _CONFIGURED = True
