"""Resend email adapter.

Implements NotificationPort on top of the Resend API.
"""

import logging
import os
from html import escape

import resend

from domain.model.errors import NotificationError

logger = logging.getLogger(__name__)

EMAIL_FROM = os.getenv("EMAIL_FROM", "Recipe Portal <noreply@recipeportal.app>")


def init_resend() -> None:
    """Initialize Resend with API key if available."""
    api_key = os.getenv("RESEND_API_KEY")
    if not api_key:
        logger.warning("RESEND_API_KEY not configured, outgoing email will fail")
        return
    resend.api_key = api_key


class ResendEmailAdapter:
    def __init__(self, sender: str = EMAIL_FROM):
        self.sender = sender

    def send(self, to: str, subject: str, body: str) -> None:
        html = "".join(f"<p>{escape(line)}</p>" for line in body.splitlines() if line.strip())
        try:
            resend.Emails.send({
                "from": self.sender,
                "to": to,
                "subject": subject,
                "text": body,
                "html": html,
            })
        except Exception as e:
            # Resend raises its own error hierarchy plus transport errors
            logger.error("Failed to send email", extra={"to": to, "subject": subject, "error": str(e)})
            raise NotificationError("Failed to send email") from e
        logger.info("Email sent", extra={"to": to, "subject": subject})
