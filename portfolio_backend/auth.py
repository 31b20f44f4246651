"""
Bearer-token verification against the hosted identity service.

Token issuance is delegated entirely to the identity provider; this module
only checks tokens and proxies the password sign-in.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from portfolio_backend.errors import InternalError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "metadata": self.metadata}


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser


class AuthVerifier(Protocol):
    """Resolves an Authorization header to a user, or None."""

    def verify(self, authorization: Optional[str]) -> Optional[AuthUser]:
        ...

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        ...


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


@dataclass
class StaticTokenAuthVerifier:
    """Accepts a single configured admin token. For local development and tests."""

    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def verify(self, authorization: Optional[str]) -> Optional[AuthUser]:
        candidate = extract_bearer_token(authorization)
        if not candidate or not self.token:
            return None
        if not hmac.compare_digest(candidate.encode(), self.token.encode()):
            return None
        return AuthUser(id="admin", email=self.email)

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        if not (self.token and self.email and self.password):
            return None
        if email.lower() != self.email.lower() or not hmac.compare_digest(
            password.encode(), self.password.encode()
        ):
            return None
        return AuthSession(
            access_token=self.token, user=AuthUser(id="admin", email=self.email)
        )


@dataclass
class SupabaseAuthVerifier:
    """
    Verifies tokens with the Supabase GoTrue REST API.
    """

    url: str
    anon_key: str
    service_role_key: Optional[str] = None

    def _api_key(self) -> str:
        return self.service_role_key or self.anon_key

    def verify(self, authorization: Optional[str]) -> Optional[AuthUser]:
        token = extract_bearer_token(authorization)
        if not token:
            return None
        try:
            response = requests.get(
                f"{self.url.rstrip('/')}/auth/v1/user",
                headers={
                    "apikey": self._api_key(),
                    "Authorization": f"Bearer {token}",
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException:
            logger.exception("Token verification request failed")
            return None
        if response.status_code != 200:
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.warning("Token verification returned a non-JSON body")
            return None
        if not isinstance(payload, dict):
            return None
        return _to_user(payload)

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        try:
            response = requests.post(
                f"{self.url.rstrip('/')}/auth/v1/token",
                params={"grant_type": "password"},
                headers={"apikey": self.anon_key, "Content-Type": "application/json"},
                json={"email": email, "password": password},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise InternalError() from exc
        if response.status_code != 200:
            logger.info("Sign-in rejected for %s (%s)", email, response.status_code)
            return None
        payload = response.json()
        access_token = payload.get("access_token")
        if not access_token:
            return None
        return AuthSession(
            access_token=access_token, user=_to_user(payload.get("user") or {})
        )


def _to_user(payload: dict) -> AuthUser:
    return AuthUser(
        id=str(payload.get("id", "")),
        email=payload.get("email"),
        metadata=payload.get("user_metadata") or {},
    )
