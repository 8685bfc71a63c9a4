"""Data models for the preference matching engine."""

from dataclasses import dataclass, field
from typing import List

# Preference dimensions in evaluation order
CATEGORY = "category"
LOCATION = "location"
KEYWORD = "keyword"
JOB_TYPE = "job_type"
EXPERIENCE_LEVEL = "experience_level"

DIMENSIONS = (CATEGORY, LOCATION, KEYWORD, JOB_TYPE, EXPERIENCE_LEVEL)


class MatchEvaluationError(Exception):
    """Raised when a subscriber's preference data cannot be evaluated.

    The pipeline skips the subscriber and carries on with the others.
    """

    pass


@dataclass
class MatchResult:
    """Result of evaluating one job against one subscriber's preferences.

    Attributes:
        is_match: True when every restricted dimension matched
        matched_dimensions: Restricted dimensions with at least one hit
        failed_dimensions: Restricted dimensions with no hit
        wildcard_dimensions: Dimensions whose preference list was empty
        matched_keywords: Keywords found in the title or description
    """

    is_match: bool
    matched_dimensions: List[str] = field(default_factory=list)
    failed_dimensions: List[str] = field(default_factory=list)
    wildcard_dimensions: List[str] = field(default_factory=list)
    matched_keywords: List[str] = field(default_factory=list)

    @property
    def is_unrestricted(self) -> bool:
        """True when the subscriber set no preferences at all."""
        return len(self.wildcard_dimensions) == len(DIMENSIONS)

    @property
    def reason(self) -> str:
        """Short description of the decision, used in logs."""
        if self.is_match:
            if self.is_unrestricted:
                return "no_preferences"
            return "matched: " + ", ".join(self.matched_dimensions)
        return "failed: " + ", ".join(self.failed_dimensions)
