"""
Session credentials: issuance after attestation and per-request authorization.
"""

from .gate import AuthorizationDecision, AuthorizationGate, AuthorizationReason
from .issuer import SESSION_SCOPE, SessionCredential, SessionIssuer

__all__ = [
    "SESSION_SCOPE",
    "SessionCredential",
    "SessionIssuer",
    "AuthorizationDecision",
    "AuthorizationGate",
    "AuthorizationReason",
]
