"""
Pytest configuration and fixtures for Wordgate tests.

This module provides common test fixtures and configuration for the test suite.
"""

import base64
import os
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "wordgate-test-signing-key-0123456789abcdef"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"

from wordgate.config import Settings  # noqa: E402
from wordgate.main import create_app  # noqa: E402
from wordgate.services.generation import GenerationBackend  # noqa: E402

TEST_SECRET = "wordgate-test-signing-key-0123456789abcdef"

WORDS_JSON = '{"words": ["Iron Man", "Thor", "Hulk", "Black Widow"]}'


class StubBackend(GenerationBackend):
    """Backend returning (or raising) a fixed outcome on every call."""

    def __init__(self, model_id: str, outcome: Any = WORDS_JSON, structured: bool = True):
        super().__init__(model_id)
        self.outcome = outcome
        self.structured = structured
        self.calls: List[Dict[str, Any]] = []

    @property
    def supports_structured_output(self) -> bool:
        return self.structured

    async def complete(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> str:
        self.calls.append({"prompt": prompt, "schema": response_schema})
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def stub_backend():
    """Factory for stub generation backends."""
    return StubBackend


@pytest.fixture
def settings():
    """Settings for a development gateway with the format-only verifier."""
    return Settings(
        environment="test",
        jwt_secret_key=TEST_SECRET,
        gemini_api_key="test-gemini-key",
    )


@pytest.fixture
def attest_token():
    """A well-formed attestation token: 128 base64 chars, 96 decoded bytes."""
    return base64.b64encode(bytes(range(96))).decode("ascii")


@pytest.fixture
def backends():
    """Default generation backends; override per module to script failures."""
    return [StubBackend("gemini-2.5-flash")]


@pytest.fixture
def app(settings, backends):
    return create_app(settings, backends=backends)


@pytest.fixture
def client(app):
    """Test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_token(client, attest_token):
    """Perform a full handshake and return the issued session token."""
    challenge = client.get("/v1/challenge").json()["challenge"]
    response = client.post(
        "/v1/verify-device",
        headers={"X-App-Attest": attest_token, "X-App-Attest-Challenge": challenge},
    )
    assert response.status_code == 200
    return response.json()["token"]
