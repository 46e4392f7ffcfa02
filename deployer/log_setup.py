"""
Logging Setup
Configures loguru sinks for the deployment scripts
"""

import os
import sys
from typing import Optional
from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Replace loguru's default sink with the toolkit's console (and file) sinks

    Args:
        level: Console level (defaults to LOG_LEVEL env var, then INFO)
        log_file: Optional path of a rotating DEBUG log file
    """
    level = level or os.getenv('LOG_LEVEL', 'INFO')

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format=FILE_FORMAT,
            level="DEBUG"
        )
