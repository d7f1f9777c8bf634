"""
Identity provider boundary and its Auth0 implementation.

The application never verifies credentials itself. It asks an
``IdentityProvider`` to resolve a bearer token into an ``Identity`` and, for
admin user management, to create, look up and delete identities.

``Auth0IdentityProvider`` is built from settings at startup and kept on
``app.state``; routes receive it through ``get_identity_provider`` so tests can
swap in a fake.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Protocol

import requests
from fastapi import Request
from jose import jwt, JWTError, ExpiredSignatureError

from ..config import Settings
from ..exceptions import ConflictError, IdentityProviderError, UnauthenticatedError

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    """Subject and profile claims for a verified credential."""
    subject_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    picture_url: Optional[str] = None


class IdentityProvider(Protocol):
    def resolve(self, credential: str) -> Identity: ...

    def create_identity(self, email: str, password: str, display_name: Optional[str] = None) -> str: ...

    def find_by_email(self, email: str) -> Optional[Identity]: ...

    def delete_identity(self, subject_id: str) -> None: ...


class Auth0IdentityProvider:
    """Verifies Auth0-issued JWTs and manages users via the Management API."""

    def __init__(
        self,
        domain: Optional[str],
        audience: Optional[str] = None,
        algorithms: Optional[List[str]] = None,
        management_client_id: Optional[str] = None,
        management_client_secret: Optional[str] = None,
        management_audience: Optional[str] = None,
        connection: str = "Username-Password-Authentication",
        timeout: float = 10.0,
    ):
        self.domain = domain
        self.audience = audience
        self.algorithms = algorithms or ["RS256"]
        self.management_client_id = management_client_id
        self.management_client_secret = management_client_secret
        self.management_audience = management_audience or (f"https://{domain}/api/v2/" if domain else None)
        self.connection = connection
        self.timeout = timeout

        self._jwks: Dict[str, dict] = {}
        self._access_token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Auth0IdentityProvider":
        return cls(
            domain=settings.AUTH0_DOMAIN,
            audience=settings.AUTH0_AUDIENCE,
            algorithms=[a.strip() for a in settings.AUTH0_ALGORITHMS.split(",") if a.strip()],
            management_client_id=settings.AUTH0_MANAGEMENT_CLIENT_ID,
            management_client_secret=settings.AUTH0_MANAGEMENT_CLIENT_SECRET,
            management_audience=settings.AUTH0_MANAGEMENT_API_AUDIENCE,
            connection=settings.AUTH0_CONNECTION,
            timeout=settings.AUTH0_TIMEOUT,
        )

    @property
    def issuer(self) -> str:
        return f"https://{self.domain}/"

    def _require_domain(self) -> None:
        if not self.domain:
            raise IdentityProviderError("Auth0 is not configured (AUTH0_DOMAIN is missing).")

    # ------------------------------------------------------------------
    # Token verification
    # ------------------------------------------------------------------

    def _fetch_jwks(self) -> None:
        url = f"https://{self.domain}/.well-known/jwks.json"
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Failed to fetch Auth0 signing keys: {e}")
            raise IdentityProviderError(f"Failed to fetch Auth0 signing keys: {e}")

        self._jwks = {key["kid"]: key for key in response.json().get("keys", []) if "kid" in key}

    def _signing_key(self, kid: Optional[str]) -> Optional[dict]:
        if kid not in self._jwks:
            # Keys rotate; refetch once before giving up on an unknown kid
            self._fetch_jwks()
        return self._jwks.get(kid)

    def resolve(self, credential: str) -> Identity:
        """
        Verify a bearer token and return the identity it carries.

        Raises:
            UnauthenticatedError: token malformed, expired, or not signed by the tenant
            IdentityProviderError: signing keys could not be fetched
        """
        self._require_domain()

        try:
            header = jwt.get_unverified_header(credential)
        except JWTError:
            raise UnauthenticatedError("Invalid token.")

        key = self._signing_key(header.get("kid"))
        if key is None:
            raise UnauthenticatedError("Invalid token: unknown signing key.")

        try:
            claims = jwt.decode(
                credential,
                key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None, "verify_at_hash": False},
            )
        except ExpiredSignatureError:
            raise UnauthenticatedError("Token has expired.")
        except JWTError as e:
            raise UnauthenticatedError(f"Token validation failed: {e}")

        subject_id = claims.get("sub")
        if not subject_id:
            raise UnauthenticatedError("Invalid token. Missing 'sub' claim.")

        return Identity(
            subject_id=subject_id,
            email=claims.get("email"),
            display_name=claims.get("name"),
            picture_url=claims.get("picture"),
        )

    # ------------------------------------------------------------------
    # Management API
    # ------------------------------------------------------------------

    def get_management_token(self) -> str:
        """
        Get Auth0 Management API access token.
        Caches token and refreshes when expired.
        """
        self._require_domain()

        if self._access_token and self._token_expiry and datetime.utcnow() < self._token_expiry:
            return self._access_token

        token_url = f"https://{self.domain}/oauth/token"
        payload = {
            "client_id": self.management_client_id,
            "client_secret": self.management_client_secret,
            "audience": self.management_audience,
            "grant_type": "client_credentials",
        }

        try:
            response = requests.post(token_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Failed to get Management API token: {e}")
            raise IdentityProviderError(f"Failed to authenticate with Auth0 Management API: {e}")

        data = response.json()
        self._access_token = data["access_token"]

        # Refresh 5 minutes before the real expiry
        expires_in = data.get("expires_in", 86400)
        self._token_expiry = datetime.utcnow() + timedelta(seconds=max(expires_in - 300, 0))

        logger.info("✅ Auth0 Management API token obtained successfully")
        return self._access_token

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_management_token()}",
            "Content-Type": "application/json",
        }

    def _users_url(self, subject_id: Optional[str] = None) -> str:
        url = f"https://{self.domain}/api/v2/users"
        if subject_id:
            url = f"{url}/{requests.utils.quote(subject_id, safe='')}"
        return url

    def create_identity(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        """Create a database-connection user in Auth0 and return its user_id."""
        user_data = {
            "email": email,
            "password": password,
            "connection": self.connection,
            "name": display_name or email.split("@")[0],
            "email_verified": False,
        }

        try:
            response = requests.post(self._users_url(), json=user_data, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 409:
                raise ConflictError(f"User with email {email} already exists in Auth0")
            logger.error(f"❌ Failed to create user in Auth0: {e}")
            raise IdentityProviderError(f"Failed to create user in Auth0: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Failed to create user in Auth0: {e}")
            raise IdentityProviderError(f"Failed to create user in Auth0: {e}")

        subject_id = response.json()["user_id"]
        logger.info(f"✅ Created Auth0 identity {subject_id} for {email}")
        return subject_id

    def find_by_email(self, email: str) -> Optional[Identity]:
        """Return the first Auth0 identity registered with this email, if any."""
        url = f"https://{self.domain}/api/v2/users-by-email"
        try:
            response = requests.get(url, params={"email": email}, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Failed to look up Auth0 user by email: {e}")
            raise IdentityProviderError(f"Failed to look up user in Auth0: {e}")

        users = response.json()
        if not users:
            return None

        user = users[0]
        return Identity(
            subject_id=user["user_id"],
            email=user.get("email"),
            display_name=user.get("name"),
            picture_url=user.get("picture"),
        )

    def delete_identity(self, subject_id: str) -> None:
        """Delete (revoke) an identity in Auth0."""
        try:
            response = requests.delete(self._users_url(subject_id), headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ Failed to delete Auth0 user {subject_id}: {e}")
            raise IdentityProviderError(f"Failed to delete user in Auth0: {e}")

        logger.info(f"🗑️ Deleted Auth0 identity {subject_id}")


def get_identity_provider(request: Request) -> IdentityProvider:
    """Dependency returning the identity provider configured for this app."""
    return request.app.state.identity_provider
