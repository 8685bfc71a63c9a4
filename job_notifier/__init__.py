"""Job notifier: matches new job postings to subscribers and sends alerts."""

__version__ = "1.0.0"
