"""Preference matching between new jobs and subscriber profiles.

This module provides:
- job_matches_preferences: the pure boolean match predicate
- PreferenceMatcher: service object used by the pipeline
- MatchResult: per-dimension outcome of an evaluation
- MatchEvaluationError: raised for malformed preference data
"""

from .engine import PreferenceMatcher, evaluate_preferences, job_matches_preferences
from .models import DIMENSIONS, MatchEvaluationError, MatchResult

__all__ = [
    "PreferenceMatcher",
    "job_matches_preferences",
    "evaluate_preferences",
    "MatchResult",
    "MatchEvaluationError",
    "DIMENSIONS",
]
