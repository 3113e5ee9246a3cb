"""
Log sink setup for scripts and host applications.

Library modules import `from loguru import logger` and only emit. Sinks are
configured once, by whoever owns the process (the CLI action, a test, a host
service), through `configure_logging`.
"""

import sys
from typing import Optional

from loguru import logger

from financify.config.settings import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    Replace loguru's default sink with a single stderr sink.

    Args:
        level: Minimum level to emit. Defaults to FINANCIFY_LOG_LEVEL
               (WARNING when unset).
    """
    if level is None:
        level = get_settings().logging.level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
