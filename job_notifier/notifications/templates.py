"""Template rendering for Telegram and email notifications using Jinja2.

Templates live in the job_notifier.notifications/templates package
directory. Names ending in ``.html.j2`` are autoescaped: the email body is
HTML, and Telegram messages are sent with parse_mode=HTML so job fields
must not be able to inject markup there either.
"""

import logging
from typing import Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """Renders notification templates.

    Templates are cached by the Jinja2 environment for reuse across
    subscribers within a run and across runs.
    """

    def __init__(
        self,
        template_dir: str = "templates",
        telegram_template: str = "telegram_message.html.j2",
        subject_template: str = "email_subject.txt.j2",
        html_template: str = "job_alert_body.html.j2",
    ):
        """Initialize template renderer with Jinja2 environment.

        Args:
            template_dir: Directory name within the job_notifier.notifications package
            telegram_template: Filename of the Telegram message template
            subject_template: Filename of the email subject template
            html_template: Filename of the email HTML body template
        """
        self.telegram_template_name = telegram_template
        self.subject_template_name = subject_template
        self.html_template_name = html_template

        self.env = Environment(
            loader=PackageLoader("job_notifier.notifications", template_dir),
            autoescape=select_autoescape(
                enabled_extensions=("html.j2",), default_for_string=False
            ),
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render_telegram(self, context: Dict) -> str:
        """Render the Telegram message text.

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        return self._render(self.telegram_template_name, context).strip()

    def render_email(self, context: Dict) -> Dict[str, str]:
        """Render the email subject and HTML body.

        Returns:
            Dictionary containing ``subject`` (single line) and ``html_body``

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        subject = self._render(self.subject_template_name, context)
        html_body = self._render(self.html_template_name, context)

        return {
            "subject": " ".join(subject.split()),
            "html_body": html_body,
        }

    def _render(self, template_name: str, context: Dict) -> str:
        try:
            template = self.env.get_template(template_name)
            return template.render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {template_name}: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
