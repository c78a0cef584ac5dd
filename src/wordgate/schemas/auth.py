"""
Handshake schemas for the Wordgate API
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ChallengeResponse(BaseModel):
    """Freshly issued one-time challenge"""
    model_config = ConfigDict(populate_by_name=True)

    challenge: str = Field(..., description="URL-safe random challenge (256 bits)")
    expires_in: int = Field(..., alias="expiresIn", description="Seconds until the challenge expires")


class SessionResponse(BaseModel):
    """Session credential issued after a successful handshake"""
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Signed session token (bearer)")
    expires_in: int = Field(..., alias="expiresIn", description="Token lifetime in seconds")
    assurance: str = Field(..., description="'format' or 'chain' attestation assurance")
    details: Dict[str, Any] = Field(default_factory=dict, description="Verification details")
