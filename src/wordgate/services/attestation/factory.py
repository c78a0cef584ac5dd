"""
Verifier selection from process configuration.
"""

import logging

from ...config import VERIFIER_CHAIN, Settings
from .base import AttestationVerifier
from .format_verifier import FormatAttestationVerifier
from .ios_appattest import AppAttestChainVerifier

logger = logging.getLogger(__name__)


def build_verifier(settings: Settings) -> AttestationVerifier:
    """
    Create the attestation verifier named by ATTESTATION_VERIFIER.

    Args:
        settings: Validated process settings

    Returns:
        A format-only or chain-verifying AttestationVerifier
    """
    thresholds = {
        "min_token_length": settings.attestation_min_token_length,
        "min_decoded_length": settings.attestation_min_decoded_length,
    }

    if settings.attestation_verifier == VERIFIER_CHAIN:
        verifier = AppAttestChainVerifier.from_pem_file(
            settings.app_attest_root_ca_path,
            settings.app_attest_app_id,
            allow_development=settings.app_attest_allow_development,
            **thresholds,
        )
    else:
        verifier = FormatAttestationVerifier(**thresholds)
        logger.warning("Attestation verifier is format-only - sessions carry no cryptographic device assurance")

    logger.info(f"Attestation verifier initialized - Type: {verifier.get_verifier_type()}, "
                f"Assurance: {verifier.assurance.value}, "
                f"Min token length: {verifier.min_token_length}, "
                f"Min decoded length: {verifier.min_decoded_length}")
    return verifier
