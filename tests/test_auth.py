"""Identity exchange, service tokens and user registry tests."""

from datetime import timedelta

import httpx
import pytest

from repairshop.core.exceptions import DependencyError, UnauthenticatedError
from repairshop.core.identity import (
    DEV_ADMIN_IDENTITY,
    DEV_TEST_IDENTITY,
    FirebaseIdentityProvider,
    IdentityClaims,
)
from repairshop.core.security import create_access_token, create_user_token, verify_token
from repairshop.services.user_service import UserService


def test_service_token_round_trip():
    payload = verify_token(create_user_token("customer-1", "jane@example.com"))

    assert payload["sub"] == "customer-1"
    assert payload["email"] == "jane@example.com"


def test_expired_service_token_is_rejected():
    token = create_access_token({"sub": "customer-1"}, expires_delta=timedelta(seconds=-1))

    with pytest.raises(UnauthenticatedError):
        verify_token(token)


def test_garbage_token_is_rejected():
    with pytest.raises(UnauthenticatedError):
        verify_token("customer-token")


async def test_get_or_create_creates_non_admin_user(store):
    users = UserService(store)

    user = await users.get_or_create(IdentityClaims(uid="u-1", email="admin@shop.com", name="Admin Lookalike"))

    assert user.is_admin is False
    assert (await store.get_user("u-1")) is user


async def test_get_or_create_refreshes_profile_but_keeps_admin_flag(store, admin):
    users = UserService(store)

    user = await users.get_or_create(IdentityClaims(uid=admin.id, email="new@shop.com", name="Renamed"))

    assert user is admin
    assert user.email == "new@shop.com"
    assert user.name == "Renamed"
    assert user.is_admin is True


async def test_set_admin(store, customer):
    users = UserService(store)

    assert (await users.set_admin(customer.id)).is_admin is True
    assert (await users.set_admin(customer.id, is_admin=False)).is_admin is False
    assert await users.set_admin("unknown") is None


async def test_dev_tokens_map_to_fixed_identities():
    provider = FirebaseIdentityProvider(project_id=None)

    assert await provider.verify("test-token") == DEV_TEST_IDENTITY
    assert await provider.verify("admin-test-token") == DEV_ADMIN_IDENTITY


async def test_unconfigured_provider_rejects_tokens():
    provider = FirebaseIdentityProvider(project_id=None)

    with pytest.raises(UnauthenticatedError):
        await provider.verify("eyJhbGciOiJSUzI1NiJ9.e30.sig")


async def test_unknown_signing_key_is_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"other-kid": "-----BEGIN CERTIFICATE-----"})

    token = create_access_token({"sub": "u-1"})  # HS256, no kid header
    provider = FirebaseIdentityProvider(
        project_id="repair-shop",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(UnauthenticatedError):
        await provider.verify(token)
    await provider.close()


async def test_certificate_fetch_failure_is_a_dependency_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    provider = FirebaseIdentityProvider(
        project_id="repair-shop",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(DependencyError):
        await provider.verify(create_access_token({"sub": "u-1"}))
    await provider.close()
