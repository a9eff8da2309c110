"""
Shared utility functions.

This package contains utility code used across multiple
pipeline stages.
"""

from .logging import (
    JsonlFormatter,
    log_event,
    log_warning,
    setup_logging,
)
from .text import slugify, unique_slugs

__all__ = [
    "setup_logging",
    "log_event",
    "log_warning",
    "JsonlFormatter",
    "slugify",
    "unique_slugs",
]
