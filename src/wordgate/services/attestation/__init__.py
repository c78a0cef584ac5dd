"""
Device Attestation Service Package

Verifies client-submitted App Attest tokens before a session is issued.

Verifiers:
- format: structural checks only (length, base64, decoded size)
- appattest: full certificate-chain and nonce verification

Both share one verify() interface, so moving from the format-only verifier
to chain verification is a configuration change.
"""

from .base import (
    UNKNOWN_DEVICE_ID,
    AssuranceLevel,
    AttestationVerifier,
    VerificationReason,
    VerificationResult,
)
from .factory import build_verifier
from .format_verifier import FormatAttestationVerifier
from .ios_appattest import AppAttestChainVerifier

__all__ = [
    # Core interfaces
    "AttestationVerifier",
    "VerificationResult",
    "VerificationReason",
    "AssuranceLevel",
    "UNKNOWN_DEVICE_ID",
    "build_verifier",

    # Verifiers
    "FormatAttestationVerifier",
    "AppAttestChainVerifier",
]
