"""Google Sign-In access gate restricted to one organisational domain.

Per request the gate moves through
``Unauthenticated -> TokenPresented -> TokenVerified -> DomainChecked -> Authorized``
and stops with an ``AuthError`` at the first failed step.
"""

import logging
import time
from typing import Optional, Protocol

import google.auth.exceptions
import google.auth.transport.requests
from google.oauth2 import id_token

from vin_offers.core.errors import AuthError, InvalidTokenError, UpstreamError
from vin_offers.core.logging import get_logger, log_error, log_external_call
from vin_offers.models.identity import Identity, TokenClaims


class TokenVerifier(Protocol):
    def verify(self, token: str, audience: Optional[str]) -> TokenClaims: ...


class GoogleTokenVerifier:
    """Verifies Google ID tokens (signature, expiry, issuer, audience)."""

    def __init__(self) -> None:
        self._request = google.auth.transport.requests.Request()

    def verify(self, token: str, audience: Optional[str]) -> TokenClaims:
        start = time.time()
        try:
            info = id_token.verify_oauth2_token(token, self._request, audience)
        except google.auth.exceptions.TransportError as e:
            log_external_call("google", "verify_token", False, (time.time() - start) * 1000)
            raise UpstreamError("No se pudo verificar la sesión") from e
        except (ValueError, google.auth.exceptions.GoogleAuthError) as e:
            raise InvalidTokenError(str(e)) from e
        log_external_call("google", "verify_token", True, (time.time() - start) * 1000)

        return TokenClaims(
            email=info.get("email") or "",
            email_verified=bool(info.get("email_verified")),
            hosted_domain=info.get("hd"),
            name=info.get("name"),
            picture=info.get("picture"),
        )


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def email_domain(email: str) -> str:
    """Domain part of an address; ``""`` when there is no ``@``."""
    _, at, domain = email.rpartition("@")
    if not at:
        return ""
    return domain.strip().lower()


class AccessGate:
    """Authorises a caller from the request's Authorization header."""

    def __init__(
        self,
        verifier: TokenVerifier,
        allowed_domain: str,
        audience: Optional[str] = None,
        logger: logging.Logger | None = None,
    ):
        self._verifier = verifier
        self._allowed_domain = allowed_domain.strip().lower().lstrip("@")
        self._audience = audience or None
        self._log = logger or get_logger("auth")

    def domain_allowed(self, claims: TokenClaims) -> bool:
        """Either the e-mail's domain or the ``hd`` claim must match."""
        if not self._allowed_domain:
            return False
        if email_domain(claims.email) == self._allowed_domain:
            return True
        return (claims.hosted_domain or "").strip().lower() == self._allowed_domain

    def authorize(self, authorization: Optional[str]) -> Identity:
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthError(401, "not authenticated")

        try:
            claims = self._verifier.verify(token, self._audience)
        except InvalidTokenError as e:
            log_error("Token verification failed", e, log=self._log)
            raise AuthError(401, "invalid token") from e

        if not claims.email or not claims.email_verified:
            self._log.warning(f"Unverified email rejected email={claims.email!r}")
            raise AuthError(401, "email not verified")

        if not self.domain_allowed(claims):
            self._log.warning(
                f"Domain rejected email={claims.email} hd={claims.hosted_domain}"
            )
            raise AuthError(403, "domain not allowed")

        return Identity(email=claims.email, name=claims.name, picture=claims.picture)
