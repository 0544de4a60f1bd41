"""SMTP implementation of the MailTransport interface."""

import logging
import smtplib
from collections.abc import Sequence
from email.message import EmailMessage

from longform_transcriber.config import EmailConfig
from longform_transcriber.exceptions import NotificationError

from .interfaces import MailTransport

logger = logging.getLogger(__name__)


class SmtpMailTransport(MailTransport):
    """Sends plain-text mail from the configured account."""

    def __init__(self, config: EmailConfig):
        self._config = config

    def send(self, recipients: Sequence[str], subject: str, body: str) -> None:
        try:
            message = self._build_message(recipients, subject, body)
            with smtplib.SMTP(
                self._config.smtp_server,
                self._config.port,
                timeout=self._config.timeout_seconds,
            ) as server:
                if self._config.use_starttls:
                    server.starttls()
                server.login(self._config.username, self._config.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.exception(
                "Email delivery failed",
                extra={"server": self._config.smtp_server, "subject": subject},
            )
            raise NotificationError(list(recipients), e) from e

        logger.info(
            "Email sent",
            extra={"recipient_count": len(recipients), "subject": subject},
        )

    def _build_message(
        self, recipients: Sequence[str], subject: str, body: str
    ) -> EmailMessage:
        """Raises ValueError when a header value contains CR or LF."""
        message = EmailMessage()
        message["From"] = self._config.username
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.set_content(body)
        return message
