"""Abstract interface for sending email."""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class MailTransport(ABC):
    """Abstract base class for outgoing mail."""

    @abstractmethod
    def send(self, recipients: Sequence[str], subject: str, body: str) -> None:
        """
        Sends one plain-text message to every recipient.

        Raises:
            NotificationError: If the message cannot be delivered to the server.
        """
