"""Preference matching for new job postings.

A job matches a subscriber when every non-empty preference dimension has at
least one matching value (AND across dimensions, OR within a list). An empty
list places no restriction on its dimension.

Per-dimension rules (all case-insensitive on trimmed values):
- category, job type, experience level: equality
- location: the preference contains the job city or vice versa
- keyword: substring of the job title plus description
"""

import logging
from typing import Iterable, List, Optional, Sequence

from job_notifier.domain.models import JobPosting, SubscriberProfile
from job_notifier.utils.text import normalize_for_matching

from .models import (
    CATEGORY,
    EXPERIENCE_LEVEL,
    JOB_TYPE,
    KEYWORD,
    LOCATION,
    MatchEvaluationError,
    MatchResult,
)

logger = logging.getLogger(__name__)


def job_matches_preferences(
    category: Optional[str],
    city: Optional[str],
    title: Optional[str],
    description: Optional[str],
    job_type: Optional[str],
    experience_level: Optional[str],
    categories: Optional[Sequence[str]],
    locations: Optional[Sequence[str]],
    keywords: Optional[Sequence[str]],
    job_types: Optional[Sequence[str]],
    experience_levels: Optional[Sequence[str]],
) -> bool:
    """Decide whether a job satisfies a subscriber's preference lists.

    Args:
        category, city, title, description, job_type, experience_level:
            Job attributes (None or "" means not specified)
        categories, locations, keywords, job_types, experience_levels:
            Subscriber preference lists (None or [] means no restriction)

    Returns:
        True if every non-empty dimension matched

    Raises:
        MatchEvaluationError: If a preference list or entry is not text
    """
    return evaluate_preferences(
        category=category,
        city=city,
        title=title,
        description=description,
        job_type=job_type,
        experience_level=experience_level,
        categories=categories,
        locations=locations,
        keywords=keywords,
        job_types=job_types,
        experience_levels=experience_levels,
    ).is_match


def evaluate_preferences(
    *,
    category: Optional[str],
    city: Optional[str],
    title: Optional[str],
    description: Optional[str],
    job_type: Optional[str],
    experience_level: Optional[str],
    categories: Optional[Sequence[str]],
    locations: Optional[Sequence[str]],
    keywords: Optional[Sequence[str]],
    job_types: Optional[Sequence[str]],
    experience_levels: Optional[Sequence[str]],
) -> MatchResult:
    """Evaluate every dimension and return the detailed MatchResult."""
    result = MatchResult(is_match=False)

    job_category = normalize_for_matching(category)
    job_city = normalize_for_matching(city)
    job_text = normalize_for_matching(f"{title or ''} {description or ''}")
    job_kind = normalize_for_matching(job_type)
    job_level = normalize_for_matching(experience_level)

    checks = (
        (CATEGORY, categories, lambda pref: pref == job_category),
        (LOCATION, locations, lambda pref: _location_matches(pref, job_city)),
        (KEYWORD, keywords, lambda pref: pref in job_text),
        (JOB_TYPE, job_types, lambda pref: pref == job_kind),
        (EXPERIENCE_LEVEL, experience_levels, lambda pref: pref == job_level),
    )

    for dimension, raw_preferences, predicate in checks:
        preferences = _normalize_preferences(dimension, raw_preferences)
        if not preferences:
            result.wildcard_dimensions.append(dimension)
            continue

        hits = [pref for pref in preferences if predicate(pref)]
        if hits:
            result.matched_dimensions.append(dimension)
            if dimension == KEYWORD:
                result.matched_keywords = hits
        else:
            result.failed_dimensions.append(dimension)

    result.is_match = not result.failed_dimensions
    return result


def _location_matches(preference: str, job_city: str) -> bool:
    if not job_city:
        return False
    return preference in job_city or job_city in preference


def _normalize_preferences(dimension: str, values: Optional[Iterable]) -> List[str]:
    """Normalize a preference list, dropping blank and null entries.

    Raises:
        MatchEvaluationError: If values is not a list of strings
    """
    if values is None:
        return []
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple, set, frozenset)):
        raise MatchEvaluationError(
            f"Preference list for {dimension} must be a list, got {type(values).__name__}"
        )

    normalized = []
    for value in values:
        if value is None:
            continue
        if not isinstance(value, str):
            raise MatchEvaluationError(
                f"Preference values for {dimension} must be strings, got {type(value).__name__}"
            )
        cleaned = normalize_for_matching(value)
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class PreferenceMatcher:
    """Evaluates a job posting against subscriber profiles.

    Thin object wrapper around evaluate_preferences() so the pipeline can
    take the matcher as a dependency and tests can substitute it.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def evaluate(self, job: JobPosting, profile: SubscriberProfile) -> MatchResult:
        """Evaluate one subscriber's preferences against the job.

        Raises:
            MatchEvaluationError: If the profile's preference data is malformed
        """
        result = evaluate_preferences(
            category=job.category,
            city=job.city,
            title=job.job_title,
            description=job.description,
            job_type=job.job_type,
            experience_level=job.experience_level,
            categories=profile.notification_categories,
            locations=profile.notification_locations,
            keywords=profile.notification_keywords,
            job_types=profile.notification_job_types,
            experience_levels=profile.notification_experience_levels,
        )

        self.logger.debug(
            f"Preference match for {profile.user_id}: {result.is_match}",
            extra={
                "event": "match.evaluated",
                "user_id": profile.user_id,
                "is_match": result.is_match,
                "reason": result.reason,
            },
        )
        return result

    def matches(self, job: JobPosting, profile: SubscriberProfile) -> bool:
        return self.evaluate(job, profile).is_match
