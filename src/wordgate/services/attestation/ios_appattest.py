"""
iOS App Attest verifier with full certificate-chain verification.

Verifies the attestation object produced by DCAppAttestService:

1. CBOR-decode the attestation object
2. Verify the x5c certificate chain to the pinned App Attest root CA
3. Verify the leaf certificate nonce equals SHA256(authData || SHA256(challenge))
4. Verify the relying party id hash, sign counter and AAGUID environment
5. Verify the credential id matches the leaf public key and export it
"""

import base64
import hashlib
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

import cbor2
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .base import (
    AssuranceLevel,
    AttestationVerifier,
    VerificationReason,
    VerificationResult,
)

logger = logging.getLogger(__name__)

APP_ATTEST_FORMAT = "apple-appattest"
NONCE_EXTENSION_OID = x509.ObjectIdentifier("1.2.840.113635.100.8.2")

AAGUID_PRODUCTION = b"appattest" + b"\x00" * 7
AAGUID_DEVELOPMENT = b"appattestdevelop"

# rpIdHash(32) | flags(1) | signCount(4) | aaguid(16) | credentialIdLength(2)
_RP_ID_HASH = slice(0, 32)
_SIGN_COUNT = slice(33, 37)
_AAGUID = slice(37, 53)
_CRED_ID_LENGTH = slice(53, 55)
_AUTH_DATA_HEADER_LENGTH = 55


class AppAttestError(Exception):
    """Raised when one App Attest verification step fails."""

    def __init__(self, reason: VerificationReason, message: str):
        super().__init__(message)
        self.reason = reason


class AppAttestChainVerifier(AttestationVerifier):
    """
    Verifier for iOS App Attest attestation objects.

    Runs the shared format checks, then verifies the attestation
    cryptographically. A successful result carries the device credential id.
    """

    def __init__(self, root_certificate: x509.Certificate, app_id: str,
                 allow_development: bool = False,
                 min_token_length: int = 100, min_decoded_length: int = 50,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        super().__init__(min_token_length, min_decoded_length)
        self.root_certificate = root_certificate
        self.app_id = app_id
        self.allow_development = allow_development
        self._clock = clock
        self._root_der = root_certificate.public_bytes(Encoding.DER)

    @classmethod
    def from_pem_file(cls, path: str, app_id: str, **kwargs) -> "AppAttestChainVerifier":
        """Build a verifier pinned to the root CA stored at `path`."""
        with open(path, "rb") as f:
            root = x509.load_pem_x509_certificate(f.read())
        logger.info(f"App Attest trust root loaded: {root.subject.rfc4514_string()}")
        return cls(root, app_id, **kwargs)

    def get_verifier_type(self) -> str:
        return "appattest"

    @property
    def assurance(self) -> AssuranceLevel:
        return AssuranceLevel.CHAIN

    def verify(self, token: Any, challenge: Optional[str] = None) -> VerificationResult:
        token_hash = self._calculate_token_hash(token)
        self._log_validation_attempt(token_hash)

        decoded, failure = self._check_format(token)
        if failure is not None:
            self._log_validation_result(failure, token_hash)
            return failure

        try:
            credential_id = self._verify_attestation(decoded, challenge)
            result = VerificationResult(
                valid=True,
                assurance=self.assurance,
                decoded_length=len(decoded),
                device_credential_id=credential_id,
            )
        except AppAttestError as e:
            result = self._create_invalid_result(e.reason, str(e), decoded_length=len(decoded))

        self._log_validation_result(result, token_hash)
        return result

    def _verify_attestation(self, decoded: bytes, challenge: Optional[str]) -> str:
        """
        Run every App Attest verification step.

        Returns:
            The base64url credential id of the attested key

        Raises:
            AppAttestError: On the first failing step
        """
        if not challenge:
            raise AppAttestError(VerificationReason.MISSING_CHALLENGE,
                                 "A redeemed challenge is required for App Attest verification")

        auth_data, chain = self._parse_attestation_object(decoded)
        leaf = chain[0]

        self._verify_chain(chain)

        client_data_hash = hashlib.sha256(challenge.encode("utf-8")).digest()
        expected_nonce = hashlib.sha256(auth_data + client_data_hash).digest()
        if self._extract_nonce(leaf) != expected_nonce:
            raise AppAttestError(VerificationReason.NONCE_MISMATCH,
                                 "Attestation nonce does not match the issued challenge")

        if auth_data[_RP_ID_HASH] != hashlib.sha256(self.app_id.encode("utf-8")).digest():
            raise AppAttestError(VerificationReason.APP_ID_MISMATCH,
                                 "Attestation relying party does not match the configured app id")

        if int.from_bytes(auth_data[_SIGN_COUNT], "big") != 0:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Attestation sign counter must be zero")

        aaguid = auth_data[_AAGUID]
        if aaguid != AAGUID_PRODUCTION and not (self.allow_development and aaguid == AAGUID_DEVELOPMENT):
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Attestation AAGUID does not match an accepted environment")

        key_id = hashlib.sha256(
            leaf.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
        ).digest()
        cred_id_length = int.from_bytes(auth_data[_CRED_ID_LENGTH], "big")
        cred_id = auth_data[_AUTH_DATA_HEADER_LENGTH:_AUTH_DATA_HEADER_LENGTH + cred_id_length]
        if cred_id != key_id:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Attestation credential id does not match the attested key")

        return base64.urlsafe_b64encode(key_id).decode("ascii").rstrip("=")

    def _parse_attestation_object(self, decoded: bytes):
        try:
            attestation = cbor2.loads(decoded)
        except (cbor2.CBORDecodeError, ValueError) as e:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 f"Attestation is not valid CBOR: {e}")

        if not isinstance(attestation, dict) or attestation.get("fmt") != APP_ATTEST_FORMAT:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 f"Attestation format must be '{APP_ATTEST_FORMAT}'")

        auth_data = attestation.get("authData")
        statement = attestation.get("attStmt")
        x5c = statement.get("x5c") if isinstance(statement, dict) else None

        if not isinstance(auth_data, bytes) or len(auth_data) < _AUTH_DATA_HEADER_LENGTH:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Attestation authenticator data is missing or truncated")
        if not isinstance(x5c, list) or not x5c or not all(isinstance(c, bytes) for c in x5c):
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Attestation statement has no certificate chain")

        try:
            chain = [x509.load_der_x509_certificate(der) for der in x5c]
        except ValueError as e:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 f"Attestation certificate could not be parsed: {e}")

        return auth_data, chain

    def _verify_chain(self, chain: List[x509.Certificate]) -> None:
        """Verify leaf -> intermediates -> pinned root, including validity windows."""
        if len(chain) > 1 and chain[-1].public_bytes(Encoding.DER) == self._root_der:
            chain = chain[:-1]

        now = self._clock()
        for cert in chain + [self.root_certificate]:
            if not (cert.not_valid_before_utc <= now <= cert.not_valid_after_utc):
                raise AppAttestError(VerificationReason.UNTRUSTED_CHAIN,
                                     f"Certificate outside its validity window: {cert.subject.rfc4514_string()}")

        issuers = chain[1:] + [self.root_certificate]
        for cert, issuer in zip(chain, issuers):
            try:
                cert.verify_directly_issued_by(issuer)
            except (ValueError, TypeError, InvalidSignature) as e:
                raise AppAttestError(VerificationReason.UNTRUSTED_CHAIN,
                                     f"Certificate chain verification failed at "
                                     f"{cert.subject.rfc4514_string()}: {str(e) or type(e).__name__}")

    def _extract_nonce(self, leaf: x509.Certificate) -> bytes:
        try:
            extension = leaf.extensions.get_extension_for_oid(NONCE_EXTENSION_OID)
        except x509.ExtensionNotFound:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 "Leaf certificate has no App Attest nonce extension")

        try:
            # SEQUENCE { [1] EXPLICIT OCTET STRING nonce }
            sequence = _read_der(extension.value.value, 0x30)
            tagged = _read_der(sequence, 0xA1)
            return _read_der(tagged, 0x04)
        except ValueError as e:
            raise AppAttestError(VerificationReason.MALFORMED_ATTESTATION,
                                 f"App Attest nonce extension is malformed: {e}")


def _read_der(data: bytes, tag: int) -> bytes:
    """Return the contents of the DER element at the start of `data`."""
    if len(data) < 2 or data[0] != tag:
        raise ValueError(f"expected tag 0x{tag:02x}")

    length = data[1]
    start = 2
    if length & 0x80:
        size = length & 0x7F
        length = int.from_bytes(data[2:2 + size], "big")
        start = 2 + size

    if start + length > len(data):
        raise ValueError("element overruns its container")
    return data[start:start + length]
