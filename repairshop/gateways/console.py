"""Console SMS gateway for development without provider credentials."""

import logging
import time

from repairshop.gateways.base import SmsGateway, SmsProvider, SmsResult

logger = logging.getLogger(__name__)


class ConsoleGateway(SmsGateway):
    """Log messages instead of sending them.

    All sends succeed with a mock message id.
    """

    @property
    def provider(self) -> SmsProvider:
        return SmsProvider.CONSOLE

    async def send(self, to: str, body: str) -> SmsResult:
        logger.info(f"[MOCK SMS] To: {to}, Message: {body}")
        return SmsResult(
            message_id=f"mock-{time.time_ns()}",
            to=to,
            status="sent",
        )
