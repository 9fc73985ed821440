"""
Centralized logging configuration for the API and CLI.
"""

import logging
import sys
from typing import Optional

from sociate.config import LOG_LEVEL


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once for the process.

    Args:
        level: Log level name, falls back to LOG_LEVEL from the environment
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (usually called with __name__)."""
    return logging.getLogger(name)
