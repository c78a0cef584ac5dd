"""
Per-request session check for protected endpoints.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import jwt

from .issuer import SESSION_SCOPE

logger = logging.getLogger(__name__)

ALLOWED_JWT_ALGORITHMS = ("HS256",)


class AuthorizationReason(str, Enum):
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"


@dataclass(frozen=True)
class AuthorizationDecision:
    ok: bool
    reason: Optional[AuthorizationReason] = None
    message: Optional[str] = None
    claims: Optional[Dict[str, Any]] = None


class AuthorizationGate:
    """
    Stateless session credential check.

    When enforcement is disabled every request is allowed; that flag is the
    only bypass and is set once from configuration.
    """

    def __init__(self, secret_key: str, enforce: bool = True,
                 clock: Callable[[], float] = time.time):
        self.secret_key = secret_key
        self.enforce = enforce
        self._clock = clock

    def authorize(self, token: Optional[str]) -> AuthorizationDecision:
        """
        Check a presented bearer credential.

        Args:
            token: The bearer token, or None when no credential was sent

        Returns:
            AuthorizationDecision with ok=True or the rejection reason
        """
        if not self.enforce:
            return AuthorizationDecision(ok=True)

        if not token:
            return AuthorizationDecision(
                ok=False,
                reason=AuthorizationReason.MISSING_TOKEN,
                message="Missing or invalid session token. Please perform handshake again.",
            )

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=list(ALLOWED_JWT_ALGORITHMS),
                options={
                    "verify_signature": True,
                    # Expiry is compared against the gate clock below
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "sub", "scope"],
                },
            )
        except jwt.InvalidTokenError as e:
            logger.info(f"Session token verification failed: {e}")
            return self._invalid(str(e))

        if claims.get("scope") != SESSION_SCOPE:
            logger.info(f"Session token has unexpected scope: {claims.get('scope')}")
            return self._invalid("Token scope does not grant API access")

        try:
            expires_at = float(claims["exp"])
        except (TypeError, ValueError):
            return self._invalid("Token expiry is not a timestamp")

        if self._clock() > expires_at:
            logger.info(f"Session token expired for subject: {claims.get('sub')}")
            return self._invalid("Signature has expired")

        return AuthorizationDecision(ok=True, claims=claims)

    def _invalid(self, message: str) -> AuthorizationDecision:
        return AuthorizationDecision(
            ok=False,
            reason=AuthorizationReason.INVALID_TOKEN,
            message=message,
        )
