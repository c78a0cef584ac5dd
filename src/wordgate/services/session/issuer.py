"""
Session credential issuance after a successful attestation handshake.

Sessions are stateless HS256 JWTs: validity is fully determined by the
signature and the `exp` claim, so nothing is stored server-side.
"""

import logging
import time
import uuid
from typing import Callable

import jwt
from pydantic import BaseModel

from ..attestation.base import AssuranceLevel

logger = logging.getLogger(__name__)

SESSION_SCOPE = "api:access"


class SessionCredential(BaseModel):
    """A signed session token and its expiry."""
    token: str
    subject: str
    expires_at: int
    expires_in: int
    assurance: AssuranceLevel


class SessionIssuer:
    """Mints signed, time-limited session credentials for attested devices."""

    def __init__(self, secret_key: str, expire_seconds: int = 3600,
                 algorithm: str = "HS256", clock: Callable[[], float] = time.time):
        if not secret_key:
            raise ValueError("A session signing secret is required")

        self.secret_key = secret_key
        self.expire_seconds = expire_seconds
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, device_credential_id: str,
              assurance: AssuranceLevel = AssuranceLevel.FORMAT) -> SessionCredential:
        """
        Issue a session credential for a verified device.

        Args:
            device_credential_id: Session subject (device credential or sentinel id)
            assurance: Attestation assurance behind this session

        Returns:
            SessionCredential with the signed token
        """
        now = int(self._clock())
        expires_at = now + self.expire_seconds

        payload = {
            "sub": device_credential_id,
            "scope": SESSION_SCOPE,
            "verified": True,
            "assurance": assurance.value,
            "iat": now,
            "exp": expires_at,
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

        logger.info(f"Session issued - Subject: {device_credential_id}, "
                    f"Assurance: {assurance.value}, Expires in: {self.expire_seconds}s")

        return SessionCredential(
            token=token,
            subject=device_credential_id,
            expires_at=expires_at,
            expires_in=self.expire_seconds,
            assurance=assurance,
        )
