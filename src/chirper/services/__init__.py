"""External services used by the API."""

from chirper.services.mailer import Mailer, MailerError, get_mailer

__all__ = [
    "Mailer",
    "MailerError",
    "get_mailer",
]
