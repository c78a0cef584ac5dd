"""
Challenge router: issues one-time nonces for the attestation handshake
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..dependencies import get_challenge_store
from ..schemas.auth import ChallengeResponse
from ..services.challenge import ChallengeStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Handshake"])


@router.get("/challenge", response_model=ChallengeResponse,
            summary="Issue Challenge",
            description="Issue a single-use challenge to bind the next App Attest handshake to.")
async def issue_challenge(store: ChallengeStore = Depends(get_challenge_store)):
    challenge = store.issue()
    issued_at = datetime.fromtimestamp(challenge.issued_at, tz=timezone.utc)
    logger.info(f"Challenge generated: {challenge.value[:8]}... at {issued_at.isoformat()}")

    return ChallengeResponse(challenge=challenge.value, expires_in=store.ttl_seconds)
