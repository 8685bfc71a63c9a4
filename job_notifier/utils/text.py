"""Text helpers shared by the matcher and the notification templates."""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def normalize_for_matching(text: Optional[str]) -> str:
    """Normalize text for preference matching.

    Case-folds and collapses runs of whitespace. Ethiopic script has no case,
    so Amharic values pass through unchanged apart from whitespace.

    Example:
        >>> normalize_for_matching("  Addis   Ababa ")
        'addis ababa'
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip().casefold()


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """Cut text at max_length characters and append suffix if anything was cut.

    Unlike a word-boundary truncation the first max_length characters are
    always kept verbatim.

    Example:
        >>> truncate_text("abcdef", max_length=3)
        'abc...'
    """
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + suffix

