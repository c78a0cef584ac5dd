"""
Unit tests for the session authorization gate.
"""

import jwt
import pytest

from wordgate.services.session import (
    AuthorizationGate,
    AuthorizationReason,
    SessionIssuer,
)

SECRET = "authorization_gate_test_secret_0123456789"
NOW = 1_700_000_000


class MutableClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestAuthorizationGate:
    """Test cases for AuthorizationGate."""

    @pytest.fixture
    def clock(self):
        return MutableClock(NOW)

    @pytest.fixture
    def gate(self, clock):
        return AuthorizationGate(SECRET, enforce=True, clock=clock)

    @pytest.fixture
    def token(self):
        issuer = SessionIssuer(SECRET, expire_seconds=3600, clock=lambda: NOW)
        return issuer.issue("device-abc").token

    def test_valid_token(self, gate, token):
        decision = gate.authorize(token)

        assert decision.ok is True
        assert decision.reason is None
        assert decision.claims["sub"] == "device-abc"

    def test_token_valid_just_before_expiry(self, gate, clock, token):
        clock.now = NOW + 3599
        assert gate.authorize(token).ok is True

    def test_token_rejected_after_expiry(self, gate, clock, token):
        clock.now = NOW + 3601

        decision = gate.authorize(token)

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.INVALID_TOKEN
        assert "expired" in decision.message.lower()

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, gate, token):
        decision = gate.authorize(token)

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.MISSING_TOKEN

    def test_garbage_token(self, gate):
        decision = gate.authorize("not-a-jwt")

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.INVALID_TOKEN

    def test_wrong_secret(self, gate):
        forged = SessionIssuer("forged_secret_key_0123456789abcdefghij",
                               clock=lambda: NOW).issue("device-abc").token

        decision = gate.authorize(forged)

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.INVALID_TOKEN

    def test_tampered_token(self, gate, token):
        position = len(token) - 10
        replacement = "A" if token[position] != "A" else "B"
        tampered = token[:position] + replacement + token[position + 1:]

        assert gate.authorize(tampered).ok is False

    def test_wrong_scope(self, gate):
        token = jwt.encode({"sub": "d", "scope": "admin", "exp": NOW + 60}, SECRET, algorithm="HS256")

        decision = gate.authorize(token)

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.INVALID_TOKEN

    def test_missing_required_claim(self, gate):
        token = jwt.encode({"sub": "d", "scope": "api:access"}, SECRET, algorithm="HS256")

        assert gate.authorize(token).ok is False

    def test_algorithm_none_rejected(self, gate):
        """Unsigned tokens are never accepted."""
        token = jwt.encode({"sub": "d", "scope": "api:access", "exp": NOW + 60}, None, algorithm="none")

        decision = gate.authorize(token)

        assert decision.ok is False
        assert decision.reason == AuthorizationReason.INVALID_TOKEN

    def test_enforcement_disabled(self, clock):
        """With enforcement off every request passes, with or without a token."""
        gate = AuthorizationGate(SECRET, enforce=False, clock=clock)

        assert gate.authorize(None).ok is True
        assert gate.authorize("garbage").ok is True
