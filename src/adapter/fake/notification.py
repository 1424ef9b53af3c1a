"""In-memory implementation of NotificationPort for testing."""

from dataclasses import dataclass

from domain.model.errors import NotificationError


@dataclass
class SentMessage:
    to: str
    subject: str
    body: str


class FakeNotificationAdapter:
    """Records outgoing messages instead of sending them."""

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.sent: list[SentMessage] = []

    def send(self, to: str, subject: str, body: str) -> None:
        if self.should_fail:
            raise NotificationError("Fake delivery failure")
        self.sent.append(SentMessage(to=to, subject=subject, body=body))

    @property
    def last(self) -> SentMessage | None:
        return self.sent[-1] if self.sent else None
