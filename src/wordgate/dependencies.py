"""
FastAPI dependencies: component lookup and session authorization
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings
from .services.attestation import AttestationVerifier
from .services.challenge import ChallengeStore
from .services.generation import GenerationOrchestrator
from .services.session import AuthorizationDecision, AuthorizationGate, SessionIssuer
from .utils.errors import ApiError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_challenge_store(request: Request) -> ChallengeStore:
    return request.app.state.challenge_store


def get_verifier(request: Request) -> AttestationVerifier:
    return request.app.state.verifier


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_authorization_gate(request: Request) -> AuthorizationGate:
    return request.app.state.authorization_gate


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise ApiError(503, "Generation service unavailable")
    return orchestrator


async def require_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> AuthorizationDecision:
    """Reject the request unless it carries a valid session credential"""
    token = credentials.credentials if credentials else None
    decision = gate.authorize(token)

    if not decision.ok:
        raise ApiError(
            401,
            "Unauthorized",
            details=decision.message,
            reason=decision.reason.value,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decision
