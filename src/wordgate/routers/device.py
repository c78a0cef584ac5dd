"""
Device verification router: attestation handshake and session issuance
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from starlette.concurrency import run_in_threadpool

from ..config import Settings
from ..dependencies import get_challenge_store, get_session_issuer, get_settings, get_verifier
from ..schemas.auth import SessionResponse
from ..services.attestation import AttestationVerifier
from ..services.challenge import ChallengeStore
from ..services.session import SessionIssuer
from ..utils.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Handshake"])


@router.post("/verify-device", response_model=SessionResponse,
             summary="Verify Device",
             description="Redeem a challenge, verify the App Attest token in X-App-Attest "
                         "and issue a one-hour session token.")
async def verify_device(
    attest_token: Optional[str] = Header(None, alias="X-App-Attest"),
    challenge: Optional[str] = Header(None, alias="X-App-Attest-Challenge"),
    settings: Settings = Depends(get_settings),
    store: ChallengeStore = Depends(get_challenge_store),
    verifier: AttestationVerifier = Depends(get_verifier),
    issuer: SessionIssuer = Depends(get_session_issuer),
):
    logger.info("Received verify-device request")

    if not attest_token:
        raise ApiError(400, "Missing X-App-Attest header",
                       details={"reason": "MISSING_TOKEN"}, reason="MISSING_TOKEN")

    if challenge:
        if not store.redeem(challenge):
            logger.info(f"Handshake rejected - challenge not redeemable: {challenge[:8]}...")
            raise ApiError(403, "Handshake failed",
                           details={"reason": "INVALID_CHALLENGE",
                                    "message": "Challenge is unknown, expired or already used"},
                           reason="INVALID_CHALLENGE")
    elif settings.attestation_require_challenge:
        raise ApiError(400, "Missing X-App-Attest-Challenge header",
                       details={"reason": "MISSING_CHALLENGE"}, reason="MISSING_CHALLENGE")

    result = await run_in_threadpool(verifier.verify, attest_token, challenge)

    if not result.valid:
        details = result.details()
        details["message"] = result.error_message
        raise ApiError(403, "Handshake failed", details=details, reason=result.reason.value)

    credential = issuer.issue(result.subject, result.assurance)

    return SessionResponse(
        token=credential.token,
        expires_in=credential.expires_in,
        assurance=credential.assurance.value,
        details=result.details(),
    )
