# teamboard/services/email_sender.py
"""
Outbound email delivery.

``send(from, to, subject, html)`` returns the provider's message id or
raises :class:`EmailDeliveryError`. ``ResendEmailSender`` uses the Resend
SDK; ``LoggingEmailSender`` only logs and is used when no API key is
configured (local development).
"""

import logging
import uuid

import requests
import resend
from resend.exceptions import ResendError

from teamboard.config import settings
from teamboard.errors import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailSender:
    """Interface implemented by every delivery backend"""

    def send(self, sender: str, to: str, subject: str, html: str) -> str:
        raise NotImplementedError


class ResendEmailSender(EmailSender):
    """Delivers through the Resend SDK (``resend.Emails.send``)"""

    def __init__(self, api_key: str, emails_api=None):
        resend.api_key = api_key
        self.emails_api = emails_api or resend.Emails

    def send(self, sender: str, to: str, subject: str, html: str) -> str:
        params = {"from": sender, "to": [to], "subject": subject, "html": html}
        try:
            response = self.emails_api.send(params)
        except ResendError as e:
            raise EmailDeliveryError(
                f"Email provider rejected message: {e}",
                {"code": getattr(e, "code", None), "error_type": getattr(e, "error_type", None)},
            ) from e
        except requests.RequestException as e:
            raise EmailDeliveryError(f"Email provider unreachable: {e}") from e

        if not isinstance(response, dict):
            raise EmailDeliveryError(
                "Email provider returned an unexpected response",
                {"response_type": type(response).__name__},
            )
        message_id = response.get("id")
        if not message_id:
            raise EmailDeliveryError("Email provider response is missing a message id")
        return message_id


class LoggingEmailSender(EmailSender):
    def send(self, sender: str, to: str, subject: str, html: str) -> str:
        message_id = f"local-{uuid.uuid4()}"
        logger.info(f"Email not delivered (no RESEND_API_KEY): to={to} subject={subject!r} id={message_id}")
        return message_id


_default_sender = None


def get_email_sender() -> EmailSender:
    """FastAPI dependency returning the process-wide sender"""
    global _default_sender
    if _default_sender is None:
        if settings.RESEND_API_KEY:
            _default_sender = ResendEmailSender(settings.RESEND_API_KEY)
        else:
            logger.warning("RESEND_API_KEY is not set, emails will only be logged")
            _default_sender = LoggingEmailSender()
    return _default_sender
