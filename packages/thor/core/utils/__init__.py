"""Shared utilities for thor."""

from thor.core.utils.formatting import clean_filename
from thor.core.utils.logging import configure_logging, get_logger

__all__ = [
    "clean_filename",
    "configure_logging",
    "get_logger",
]
