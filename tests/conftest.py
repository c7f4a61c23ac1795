"""Shared fixtures: in-memory store, recording SMS gateway, fake identity provider."""

import os

# Settings are read at import time
os.environ["ENVIRONMENT"] = "development"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["NOTIFY_ON_CREATE"] = "false"
os.environ["STRICT_STATUS_TRANSITIONS"] = "true"
for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER", "FIREBASE_PROJECT_ID"):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient

from repairshop.api.deps import get_identity_provider, get_notification_service, get_store
from repairshop.core.exceptions import DependencyError, UnauthenticatedError
from repairshop.core.identity import IdentityClaims, IdentityProvider
from repairshop.core.middleware import status_lookup_limiter
from repairshop.gateways.base import SmsGateway, SmsProvider, SmsResult
from repairshop.main import app
from repairshop.models.car import Car
from repairshop.models.user import User, utcnow
from repairshop.repositories.memory import InMemoryStore
from repairshop.services.booking_service import BookingService
from repairshop.services.notification_service import NotificationService


class RecordingGateway(SmsGateway):
    """SMS gateway that keeps sent messages in memory."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    @property
    def provider(self) -> SmsProvider:
        return SmsProvider.CONSOLE

    async def send(self, to: str, body: str) -> SmsResult:
        if self.fail:
            raise DependencyError("twilio", "carrier rejected the message")
        self.sent.append((to, body))
        return SmsResult(message_id=f"SM{len(self.sent):04d}", to=to)


class FakeIdentityProvider(IdentityProvider):
    """Maps fixed tokens to identities."""

    def __init__(self, identities: dict[str, IdentityClaims]) -> None:
        self.identities = identities

    async def verify(self, id_token: str) -> IdentityClaims:
        identity = self.identities.get(id_token)
        if identity is None:
            raise UnauthenticatedError("Invalid identity token")
        return identity


CUSTOMER = IdentityClaims(uid="customer-1", email="jane@example.com", name="Jane Doe")
OTHER_CUSTOMER = IdentityClaims(uid="customer-2", email="sam@example.com", name="Sam Roe")
ADMIN = IdentityClaims(uid="admin-1", email="shop@example.com", name="Shop Admin")

TOKENS = {
    "customer-token": CUSTOMER,
    "other-token": OTHER_CUSTOMER,
    "admin-token": ADMIN,
}


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def notifier(gateway) -> NotificationService:
    return NotificationService(gateway=gateway)


@pytest.fixture
def service(store, notifier) -> BookingService:
    return BookingService(store, notifier)


@pytest.fixture
async def customer(store) -> User:
    return await store.add_user(User(id=CUSTOMER.uid, email=CUSTOMER.email, name=CUSTOMER.name, is_admin=False))


@pytest.fixture
async def other_customer(store) -> User:
    return await store.add_user(
        User(id=OTHER_CUSTOMER.uid, email=OTHER_CUSTOMER.email, name=OTHER_CUSTOMER.name, is_admin=False)
    )


@pytest.fixture
async def admin(store) -> User:
    return await store.add_user(User(id=ADMIN.uid, email=ADMIN.email, name=ADMIN.name, is_admin=True))


@pytest.fixture
async def car(store, customer) -> Car:
    return await store.add_car(
        Car(
            user_id=customer.id,
            make="Toyota",
            model="Camry",
            year=2020,
            license_plate="ABC123",
            mileage=15000,
        )
    )


@pytest.fixture
def booking_payload():
    """Build a valid camelCase booking request for a car."""

    def build(car_id, **overrides) -> dict:
        payload = {
            "carId": str(car_id),
            "issueDesc": "Oil change",
            "preferredDate": "2030-05-01T09:00:00Z",
            "phoneNumber": "555-0100",
            "email": "jane@example.com",
            "firstName": "Jane",
            "lastName": "Doe",
            "smsOptIn": True,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def client(store, notifier):
    """API client wired to the in-memory store and recording gateway.

    The admin is stored up front; customers are created on first request
    through the fake identity provider.
    """
    store.users[ADMIN.uid] = User(
        id=ADMIN.uid,
        email=ADMIN.email,
        name=ADMIN.name,
        is_admin=True,
        created_at=utcnow(),
        updated_at=utcnow(),
    )

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_notification_service] = lambda: notifier
    app.dependency_overrides[get_identity_provider] = lambda: FakeIdentityProvider(TOKENS)
    app.dependency_overrides[status_lookup_limiter] = lambda: None

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def customer_headers() -> dict[str, str]:
    return auth("customer-token")


@pytest.fixture
def other_headers() -> dict[str, str]:
    return auth("other-token")


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return auth("admin-token")
