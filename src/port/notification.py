"""Notification port: outbound interface for transactional email."""

from typing import Protocol


class NotificationPort(Protocol):
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver a message. Raise NotificationError if delivery fails."""
        ...
