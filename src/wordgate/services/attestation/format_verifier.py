"""
Format-only attestation verifier.

Checks that a token looks like an attestation object (present, long enough,
valid base64, plausible decoded size). It makes no cryptographic claim about
the device, and every result it produces says so.
"""

import logging
from typing import Any, Optional

from .base import AssuranceLevel, AttestationVerifier, VerificationResult

logger = logging.getLogger(__name__)

FORMAT_ONLY_NOTE = "Basic format validation only. Certificate chain was not verified."


class FormatAttestationVerifier(AttestationVerifier):
    """Verifier that accepts any structurally well-formed token."""

    def get_verifier_type(self) -> str:
        return "format"

    @property
    def assurance(self) -> AssuranceLevel:
        return AssuranceLevel.FORMAT

    def verify(self, token: Any, challenge: Optional[str] = None) -> VerificationResult:
        token_hash = self._calculate_token_hash(token)
        self._log_validation_attempt(token_hash)

        decoded, failure = self._check_format(token)
        if failure is not None:
            self._log_validation_result(failure, token_hash)
            return failure

        result = VerificationResult(
            valid=True,
            assurance=self.assurance,
            decoded_length=len(decoded),
            note=FORMAT_ONLY_NOTE,
        )
        self._log_validation_result(result, token_hash)
        return result
