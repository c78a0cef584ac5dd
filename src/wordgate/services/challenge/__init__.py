"""
One-time challenge issuance and redemption for the attestation handshake.
"""

from .store import Challenge, ChallengeStore

__all__ = ["Challenge", "ChallengeStore"]
