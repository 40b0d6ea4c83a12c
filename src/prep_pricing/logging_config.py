"""
Logging setup - loguru sink configuration for the engine, API and UI.
"""
import sys
from typing import Optional

from loguru import logger

from .config.settings import get_settings

_configured = False


def setup_logging(level: Optional[str] = None, force: bool = False):
    """Configure loguru with a single stderr sink. Safe to call repeatedly."""
    global _configured
    if _configured and not force:
        return

    level = (level or get_settings().log_level).upper()

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        level=level,
        colorize=True,
    )
    _configured = True
    logger.debug("Logging configured at {}", level)
