"""Utility functions for text normalisation and time handling."""

from .text import normalize_for_matching, truncate_text
from .timestamps import elapsed_ms, ensure_utc, utc_now

__all__ = [
    # Text
    "normalize_for_matching",
    "truncate_text",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "elapsed_ms",
]
