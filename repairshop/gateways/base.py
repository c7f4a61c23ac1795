"""Base SMS gateway interface.

All gateway adapters must implement this interface.
Business logic should NOT live in adapters - only provider communication.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class SmsProvider(str, Enum):
    """Supported SMS providers."""

    TWILIO = "twilio"
    CONSOLE = "console"


@dataclass
class SmsResult:
    """Result of a delivered (accepted) SMS."""

    message_id: str
    to: str
    status: str = "queued"
    raw_response: dict | None = None


class SmsGateway(ABC):
    """Abstract base class for SMS gateways."""

    @property
    @abstractmethod
    def provider(self) -> SmsProvider:
        """Return the provider type."""
        pass

    @abstractmethod
    async def send(self, to: str, body: str) -> SmsResult:
        """Send an SMS.

        Args:
            to: Recipient phone number
            body: Message text

        Returns:
            SmsResult with the provider message id

        Raises:
            DependencyError: If the provider rejects or cannot be reached
        """
        pass

    async def close(self) -> None:
        """Release provider resources."""
        return None
