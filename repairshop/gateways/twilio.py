"""Twilio SMS gateway adapter."""

import httpx

from repairshop.config import settings
from repairshop.core.exceptions import DependencyError
from repairshop.gateways.base import SmsGateway, SmsProvider, SmsResult

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class TwilioGateway(SmsGateway):
    """Send SMS through the Twilio Messages REST API."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.account_sid = account_sid or settings.twilio_account_sid
        self.auth_token = auth_token or settings.twilio_auth_token
        self.from_number = from_number or settings.twilio_phone_number
        self._http_client = http_client

    @property
    def provider(self) -> SmsProvider:
        return SmsProvider.TWILIO

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=settings.sms_timeout_seconds)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send(self, to: str, body: str) -> SmsResult:
        """Create a Twilio message."""
        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        data = {"To": to, "From": self.from_number, "Body": body}

        try:
            response = await self.http_client.post(
                url, auth=(self.account_sid, self.auth_token), data=data
            )
        except httpx.HTTPError as e:
            raise DependencyError("twilio", str(e)) from e

        if response.status_code != 201:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            raise DependencyError("twilio", message or f"HTTP {response.status_code}")

        payload = response.json()
        return SmsResult(
            message_id=payload["sid"],
            to=to,
            status=payload.get("status", "queued"),
            raw_response=payload,
        )
