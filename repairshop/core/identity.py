"""Identity provider verification (Firebase ID tokens).

Firebase signs ID tokens with rotating Google keys published as x509
certificates. The certificates are fetched over HTTP and cached for
``firebase_certs_cache_seconds``.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
from jose import JWTError, jwt

from repairshop.config import settings
from repairshop.core.exceptions import DependencyError, UnauthenticatedError

logger = logging.getLogger(__name__)

FIREBASE_ISSUER = "https://securetoken.google.com/{project_id}"


@dataclass
class IdentityClaims:
    """Verified identity of the token holder."""

    uid: str
    email: str
    name: str | None = None


# Identities behind the development test tokens
DEV_TEST_IDENTITY = IdentityClaims(
    uid="dev-test-user",
    email="test@example.com",
    name="Test User",
)
DEV_ADMIN_IDENTITY = IdentityClaims(
    uid="dev-admin-user",
    email="admin@example.com",
    name="Admin User",
)


class IdentityProvider(ABC):
    """Verifies third-party identity tokens."""

    @abstractmethod
    async def verify(self, id_token: str) -> IdentityClaims:
        """Verify a token and return its claims.

        Raises:
            UnauthenticatedError: If the token is invalid or expired
        """
        pass

    async def close(self) -> None:
        return None


class FirebaseIdentityProvider(IdentityProvider):
    """Verify Firebase ID tokens against Google's published certificates."""

    def __init__(
        self,
        project_id: str | None = None,
        certs_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.project_id = project_id or settings.firebase_project_id
        self.certs_url = certs_url or settings.firebase_certs_url
        self._http_client = http_client
        self._certs: dict[str, str] = {}
        self._certs_expire_at = 0.0

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=10.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_certs(self) -> dict[str, str]:
        if self._certs and time.monotonic() < self._certs_expire_at:
            return self._certs

        try:
            response = await self.http_client.get(self.certs_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DependencyError("firebase", str(e)) from e

        self._certs = response.json()
        self._certs_expire_at = time.monotonic() + settings.firebase_certs_cache_seconds
        logger.debug(f"Loaded {len(self._certs)} Firebase signing certificates")
        return self._certs

    async def verify(self, id_token: str) -> IdentityClaims:
        if settings.environment == "development":
            if id_token == settings.dev_test_token:
                return DEV_TEST_IDENTITY
            if id_token == settings.dev_admin_token:
                return DEV_ADMIN_IDENTITY

        if not self.project_id:
            raise UnauthenticatedError("Identity provider is not configured")

        try:
            header = jwt.get_unverified_header(id_token)
        except JWTError:
            raise UnauthenticatedError("Malformed identity token")

        certs = await self._get_certs()
        cert = certs.get(header.get("kid", ""))
        if not cert:
            raise UnauthenticatedError("Unknown identity token signing key")

        try:
            claims = jwt.decode(
                id_token,
                cert,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=FIREBASE_ISSUER.format(project_id=self.project_id),
                options={"verify_at_hash": False},
            )
        except JWTError as e:
            raise UnauthenticatedError(f"Invalid identity token: {str(e)}")

        uid = claims.get("sub")
        if not uid:
            raise UnauthenticatedError("Identity token has no subject")

        return IdentityClaims(
            uid=uid,
            email=claims.get("email") or "",
            name=claims.get("name"),
        )


# Singleton instance
identity_provider = FirebaseIdentityProvider()
