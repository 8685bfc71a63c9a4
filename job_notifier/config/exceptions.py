"""Exceptions raised while loading notifier configuration."""

from typing import List, Optional


class ConfigurationError(Exception):
    """
    Raised when the YAML file or the environment fails validation.

    Collects every validation problem so they can be reported in one go,
    together with hints on how to fix them.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]

        if self.errors:
            parts.append("\nValidation Errors:")
            for i, error in enumerate(self.errors, 1):
                parts.append(f"  {i}. {error}")

        if self.suggestions:
            parts.append("\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"  - {suggestion}")

        return "\n".join(parts)

    def add_error(self, error: str) -> None:
        """Record another validation error and refresh the message."""
        self.errors.append(error)
        self.args = (self._format_message(),)
