"""
Base classes and common functionality for device attestation verifiers.
"""

import base64
import binascii
import hashlib
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE_ID = "unknown-device"

_WHITESPACE = re.compile(r"\s+")


class VerificationReason(str, Enum):
    """Machine-readable reason a token was rejected."""
    MISSING_TOKEN = "MISSING_TOKEN"
    TOKEN_TOO_SHORT = "TOKEN_TOO_SHORT"
    INVALID_ENCODING = "INVALID_ENCODING"
    DECODED_TOO_SHORT = "DECODED_TOO_SHORT"
    MISSING_CHALLENGE = "MISSING_CHALLENGE"
    MALFORMED_ATTESTATION = "MALFORMED_ATTESTATION"
    UNTRUSTED_CHAIN = "UNTRUSTED_CHAIN"
    NONCE_MISMATCH = "NONCE_MISMATCH"
    APP_ID_MISMATCH = "APP_ID_MISMATCH"


class AssuranceLevel(str, Enum):
    """How much a successful verification actually proves."""
    FORMAT = "format"
    CHAIN = "chain"


@dataclass(frozen=True)
class VerificationResult:
    """Result of device attestation verification."""

    valid: bool
    assurance: AssuranceLevel
    reason: Optional[VerificationReason] = None
    error_message: Optional[str] = None
    decoded_length: Optional[int] = None
    device_credential_id: Optional[str] = None
    note: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        """Session subject for this device, falling back to the sentinel id."""
        return self.device_credential_id or UNKNOWN_DEVICE_ID

    def details(self) -> Dict[str, Any]:
        """Client-facing details payload."""
        details: Dict[str, Any] = {"assurance": self.assurance.value}
        if self.reason is not None:
            details["reason"] = self.reason.value
        if self.decoded_length is not None:
            details["decodedLength"] = self.decoded_length
        if self.note:
            details["note"] = self.note
        details.update(self.metadata)
        return details


class AttestationVerifier(ABC):
    """
    Abstract base class for attestation token verifiers.

    Every implementation runs the shared format checks first; stronger
    variants layer cryptographic checks on top without changing the
    verify() signature.
    """

    def __init__(self, min_token_length: int = 100, min_decoded_length: int = 50):
        self.min_token_length = min_token_length
        self.min_decoded_length = min_decoded_length
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def verify(self, token: Any, challenge: Optional[str] = None) -> VerificationResult:
        """
        Verify an attestation token.

        Args:
            token: The client-submitted attestation token
            challenge: The redeemed challenge this attestation should be bound to

        Returns:
            VerificationResult describing the outcome
        """

    @abstractmethod
    def get_verifier_type(self) -> str:
        """Get the verifier type identifier."""

    @property
    @abstractmethod
    def assurance(self) -> AssuranceLevel:
        """Assurance level granted by a successful verification."""

    def _check_format(self, token: Any):
        """
        Run the structural checks shared by every verifier.

        Returns:
            (decoded bytes, None) on success or (None, failing result)
        """
        if not token or not isinstance(token, str):
            return None, self._create_invalid_result(
                VerificationReason.MISSING_TOKEN, "Missing attestation token"
            )

        if len(token) < self.min_token_length:
            return None, self._create_invalid_result(
                VerificationReason.TOKEN_TOO_SHORT,
                "Attestation token too short",
                metadata={"length": len(token)},
            )

        try:
            decoded = decode_token(token)
        except ValueError as e:
            return None, self._create_invalid_result(
                VerificationReason.INVALID_ENCODING,
                "Invalid base64 encoding",
                metadata={"message": str(e)},
            )

        if len(decoded) < self.min_decoded_length:
            return None, self._create_invalid_result(
                VerificationReason.DECODED_TOO_SHORT,
                "Decoded attestation too short",
                metadata={"length": len(decoded)},
            )

        return decoded, None

    def _calculate_token_hash(self, token: Any) -> str:
        """Calculate SHA-256 hash of token for logging."""
        if not isinstance(token, str):
            return "none"
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def _create_invalid_result(self, reason: VerificationReason, error_message: str,
                               decoded_length: Optional[int] = None,
                               metadata: Optional[Dict[str, Any]] = None) -> VerificationResult:
        """Create an invalid result with consistent formatting."""
        return VerificationResult(
            valid=False,
            assurance=self.assurance,
            reason=reason,
            error_message=error_message,
            decoded_length=decoded_length,
            metadata=metadata or {},
        )

    def _log_validation_attempt(self, token_hash: str):
        """Log verification attempt for audit purposes."""
        self.logger.info(
            f"Verification attempt - Verifier: {self.get_verifier_type()}, "
            f"Token hash: {token_hash[:8]}..."
        )

    def _log_validation_result(self, result: VerificationResult, token_hash: str):
        """Log verification result for audit purposes."""
        self.logger.info(
            f"Verification result - Valid: {result.valid}, "
            f"Verifier: {self.get_verifier_type()}, "
            f"Assurance: {result.assurance.value}, "
            f"Token hash: {token_hash[:8]}..., "
            f"Decoded length: {result.decoded_length if result.decoded_length is not None else 'n/a'}, "
            f"Reason: {result.reason.value if result.reason else 'none'}"
        )


def decode_token(token: str) -> bytes:
    """
    Decode a base64 transport encoding.

    Accepts the standard and URL-safe alphabets, with or without padding, and
    ignores embedded whitespace such as line breaks.

    Raises:
        ValueError: If the text is not valid base64
    """
    compact = _WHITESPACE.sub("", token).replace("-", "+").replace("_", "/")
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(str(e)) from e
