"""Outgoing email via SMTP."""

import logging
from email.message import EmailMessage

import aiosmtplib

from chirper.config import Settings, get_settings

logger = logging.getLogger(__name__)


class MailerError(Exception):
    """Raised when an email could not be handed to the SMTP server."""


class Mailer:
    """Async SMTP mailer.

    Each call to ``send`` makes exactly one delivery attempt. When no SMTP
    host is configured the message is logged instead of sent, which keeps
    local development usable without a mail server.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        """Whether an SMTP host is set."""
        return bool(self.settings.smtp_host)

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        """Build an HTML message from the configured sender."""
        message = EmailMessage()
        message["From"] = self.settings.mail_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        return message

    async def send(self, to: str, subject: str, html: str) -> None:
        """Send one HTML email.

        Raises:
            MailerError: If the SMTP server rejects or cannot take the message
        """
        message = self.build_message(to, subject, html)

        if not self.configured:
            logger.warning("SMTP not configured, email to %s not sent: %s", to, subject)
            logger.info("Email body: %s", html)
            return

        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.smtp_host,
                port=self.settings.smtp_port,
                username=self.settings.smtp_username or None,
                password=self.settings.smtp_password or None,
                use_tls=self.settings.smtp_use_tls,
                start_tls=self.settings.smtp_start_tls and not self.settings.smtp_use_tls,
                timeout=self.settings.smtp_timeout,
            )
        except aiosmtplib.SMTPException as e:
            raise MailerError(f"Failed to send email to {to}: {e}") from e

        logger.info("Email sent to %s: %s", to, subject)

    async def send_verification(self, to: str, confirm_hash: str) -> None:
        """Send the email-confirmation link for a new account."""
        link = f"{self.settings.base_url}/auth/verify?hash={confirm_hash}"
        html = (
            "<p>Welcome to Chirper!</p>"
            f'<p>To confirm your email address, <a href="{link}">follow this link</a>.</p>'
        )
        await self.send(to, "Confirm your Chirper email", html)


async def get_mailer() -> Mailer:
    """Factory function to create a mailer.

    Can be used as a FastAPI dependency.
    """
    return Mailer(get_settings())
