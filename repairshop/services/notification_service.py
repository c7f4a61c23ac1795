"""Notification Service for customer SMS.

Formats booking status messages and hands them to the configured SMS
gateway. Delivery is fire-and-forget: failures are logged and reported back
as a soft failure, never raised to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import UTC
from zoneinfo import ZoneInfo

from repairshop.config import settings
from repairshop.core.exceptions import DependencyError
from repairshop.domain.booking_state import BookingStatus
from repairshop.gateways.base import SmsGateway
from repairshop.gateways.console import ConsoleGateway
from repairshop.gateways.twilio import TwilioGateway
from repairshop.models.booking import Booking

logger = logging.getLogger(__name__)


STATUS_MESSAGES: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "Your booking is pending.",
    BookingStatus.CONFIRMED: "Your booking has been confirmed.",
    BookingStatus.IN_PROGRESS: "Your vehicle repair is now in progress.",
    BookingStatus.COMPLETED: "Your vehicle repair has been completed and is ready for pickup.",
    BookingStatus.CANCELLED: "Your booking has been cancelled.",
}


@dataclass
class DispatchResult:
    """Outcome of one SMS dispatch."""

    sent: bool
    message_id: str | None = None
    error: str | None = None


def build_status_message(status: str, reason: str | None = None) -> str:
    """Templated SMS text for a new booking status.

    Args:
        status: New booking status
        reason: Optional admin note appended to the template

    Returns:
        str: Message body
    """
    message = STATUS_MESSAGES[BookingStatus(status)]
    if reason and reason.strip():
        message = f"{message} Note: {reason.strip()}"
    return message


def build_reminder_message(booking: Booking) -> str:
    """Appointment reminder sent the day of the visit, in shop-local time."""
    preferred = booking.preferred_date
    if preferred.tzinfo is None:
        preferred = preferred.replace(tzinfo=UTC)
    when = preferred.astimezone(ZoneInfo(settings.timezone)).strftime("%a, %b %d at %I:%M %p")
    return (
        f"Reminder: your repair appointment ({booking.reference_number}) "
        f"is scheduled for {when}."
    )


class NotificationService:
    """Service for sending customer SMS notifications."""

    def __init__(self, gateway: SmsGateway | None = None) -> None:
        """Initialize notification service.

        Args:
            gateway: SMS gateway; chosen from settings when omitted
        """
        self._gateway = gateway

    @property
    def gateway(self) -> SmsGateway:
        """Lazy-load the SMS gateway.

        Twilio is used when credentials are configured, otherwise messages
        are only logged.
        """
        if self._gateway is None:
            if settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number:
                self._gateway = TwilioGateway()
            else:
                logger.warning("Twilio credentials not provided. SMS functionality will be mocked.")
                self._gateway = ConsoleGateway()
        return self._gateway

    async def close(self) -> None:
        """Close gateway resources."""
        if self._gateway:
            await self._gateway.close()

    async def send_sms(self, phone_number: str, message: str) -> DispatchResult:
        """Send an SMS, reporting failure instead of raising.

        Args:
            phone_number: Recipient phone number
            message: SMS text

        Returns:
            DispatchResult: sent flag plus provider id or error text
        """
        try:
            result = await self.gateway.send(phone_number, message)
        except DependencyError as e:
            logger.warning(f"SMS to {phone_number} failed: {e.detail}")
            return DispatchResult(sent=False, error=e.detail)
        except Exception as e:
            logger.exception(f"Unexpected SMS gateway error for {phone_number}")
            return DispatchResult(sent=False, error=str(e))

        logger.info(f"SMS sent to {phone_number} (id={result.message_id})")
        return DispatchResult(sent=True, message_id=result.message_id)

    async def notify_status_change(
        self,
        booking: Booking,
        reason: str | None = None,
    ) -> DispatchResult | None:
        """Send the status template if the customer opted in.

        Returns:
            DispatchResult, or None when no SMS was due
        """
        if not booking.sms_opt_in or not booking.phone_number:
            return None
        message = build_status_message(booking.status, reason)
        return await self.send_sms(booking.phone_number, message)


# Singleton instance
notification_service = NotificationService()
