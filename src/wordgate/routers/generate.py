"""
Generation router: authorized word-list generation with model fallback
"""

import logging

from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_orchestrator, get_settings, require_session
from ..schemas.generation import GenerateWordsRequest, WordsResponse
from ..services.generation import (
    AllModelsExhaustedError,
    BackendTimeoutError,
    GenerationError,
    GenerationOrchestrator,
    InvalidTopicError,
    sanitize_topic,
)
from ..services.session import AuthorizationDecision
from ..utils.errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


@router.post("/generate-words", response_model=WordsResponse,
             summary="Generate Words",
             description="Generate specific, named examples for a topic. Requires a session "
                         "token from /verify-device unless enforcement is disabled.")
async def generate_words(
    payload: GenerateWordsRequest,
    session: AuthorizationDecision = Depends(require_session),
    settings: Settings = Depends(get_settings),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    logger.info(f"Received request for topic: {payload.topic!r}")

    try:
        topic = sanitize_topic(payload.topic, settings.topic_max_length)
    except InvalidTopicError as e:
        raise ApiError(400, str(e), reason=e.reason)

    try:
        result = await orchestrator.generate(topic)
    except AllModelsExhaustedError as e:
        logger.error(f"Error in backend generation: {e}")
        raise ApiError(500, "Failed to generate words", details=str(e), reason=e.reason)
    except BackendTimeoutError as e:
        logger.error(f"Error in backend generation: {e}")
        raise ApiError(500, "Failed to generate words", details=str(e), reason="BACKEND_TIMEOUT")
    except GenerationError as e:
        logger.error(f"Error in backend generation: {e}")
        raise ApiError(500, "Failed to generate words", details=str(e), reason="BACKEND_ERROR")

    return WordsResponse(words=result.words)
