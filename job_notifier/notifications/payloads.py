"""Context builders for notification templates."""

from typing import Dict

from job_notifier.domain.models import JobPosting, SubscriberProfile
from job_notifier.utils.text import truncate_text

from . import messages


def build_job_url(public_site_url: str, job_id: str) -> str:
    """Deep link to the job detail page (hash-routed single page app)."""
    return f"{public_site_url.rstrip('/')}/#/jobs/{job_id}"


def build_telegram_context(job: JobPosting) -> Dict:
    """Build the Telegram template context for a job.

    The message is identical for every subscriber, so the context only
    depends on the job.
    """
    return {
        "heading": messages.NEW_JOB_TITLE,
        "labels": messages.LABELS,
        "not_specified": messages.NOT_SPECIFIED,
        "matches_preferences": messages.MATCHES_PREFERENCES,
        "call_to_action": messages.TELEGRAM_CALL_TO_ACTION,
        "job_title": job.job_title,
        "company_name": job.company_name,
        "city": job.city,
        "category": job.category,
        "job_type": job.job_type,
        "experience_level": job.experience_level,
    }


def build_email_context(
    job: JobPosting,
    profile: SubscriberProfile,
    public_site_url: str,
    description_preview_chars: int = 200,
) -> Dict:
    """Build the email template context for one subscriber.

    Args:
        job: Job that matched
        profile: Subscriber receiving the email (for the greeting)
        public_site_url: Base URL for the job deep link
        description_preview_chars: Description characters kept before "..."

    Returns:
        Dictionary with all variables used by the subject and body templates
    """
    description_preview = ""
    if job.description and description_preview_chars > 0:
        description_preview = truncate_text(job.description, max_length=description_preview_chars)

    return {
        "heading": messages.NEW_JOB_TITLE,
        "labels": messages.LABELS,
        "intro": messages.EMAIL_INTRO,
        "button_text": messages.EMAIL_BUTTON,
        "footer_reason": messages.EMAIL_FOOTER_REASON,
        "footer_settings": messages.EMAIL_FOOTER_SETTINGS,
        "greeting_name": profile.full_name or messages.DEFAULT_GREETING_NAME,
        "job_id": job.job_id,
        "job_title": job.job_title,
        "company_name": job.company_name,
        "city": job.city,
        "category": job.category,
        "job_type": job.job_type,
        "experience_level": job.experience_level,
        "description_preview": description_preview,
        "job_url": build_job_url(public_site_url, job.job_id),
    }
