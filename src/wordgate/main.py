"""
Wordgate API
Device-attested access to word-list generation
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional, Sequence

import httpx
from fastapi import FastAPI, Request

from . import __version__
from .config import Settings
from .middleware.cors import CORSHeadersMiddleware
from .routers import challenge, device, generate
from .services.attestation import build_verifier
from .services.challenge import ChallengeStore
from .services.generation import GenerationBackend, GenerationOrchestrator, build_backends
from .services.session import AuthorizationGate, SessionIssuer
from .utils.errors import register_error_handlers

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_PREFIX = "/v1"

# Transport read timeout sits above the per-attempt budget so the attempt
# deadline in the orchestrator is what callers observe
CLIENT_TIMEOUT_MARGIN_SECONDS = 5.0


async def sweep_challenges(store: ChallengeStore, interval: float):
    """Periodically drop expired challenges so abandoned handshakes do not accumulate"""
    while True:
        await asyncio.sleep(interval)
        try:
            store.sweep()
        except Exception:
            logger.exception("Challenge sweep failed")


def build_orchestrator(settings: Settings,
                       backends: Sequence[GenerationBackend]) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        backends,
        word_count=settings.generation_word_count,
        attempt_timeout=settings.generation_attempt_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the challenge sweeper and the shared backend HTTP client"""
    settings: Settings = app.state.settings
    http_client = None

    if getattr(app.state, "orchestrator", None) is None:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.generation_attempt_timeout_seconds + CLIENT_TIMEOUT_MARGIN_SECONDS,
                connect=5.0,
            )
        )
        backends = build_backends(
            settings.generation_models,
            http_client,
            settings.gemini_api_key,
            settings.gemini_api_base_url,
        )
        app.state.orchestrator = build_orchestrator(settings, backends)
        logger.info(f"Generation backends configured: {', '.join(settings.generation_models)}")

    sweeper = asyncio.create_task(
        sweep_challenges(app.state.challenge_store, settings.challenge_sweep_interval_seconds)
    )

    try:
        yield
    finally:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass

        if http_client is not None:
            await http_client.aclose()
        logger.info("Wordgate shut down")


def create_app(settings: Optional[Settings] = None,
               backends: Optional[Sequence[GenerationBackend]] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Process settings; loaded from the environment when omitted
        backends: Generation backends to use instead of the configured Gemini models
    """
    if settings is None:
        settings = Settings.load_and_validate()
    settings.log_config_summary()

    app = FastAPI(
        title="Wordgate",
        description="""
        ## Wordgate API

        Device-authentication gateway in front of a word-list generation model.

        ### Flow:
        1. `GET /v1/challenge` - obtain a single-use challenge
        2. `POST /v1/verify-device` - submit the App Attest token (`X-App-Attest`) and the challenge
           (`X-App-Attest-Challenge`) to receive a one-hour session token
        3. `POST /v1/generate-words` - call with `Authorization: Bearer <token>`
        """,
        version=__version__,
        lifespan=lifespan,
        tags_metadata=[
            {
                "name": "Handshake",
                "description": "Challenge issuance and device attestation",
            },
            {
                "name": "Generation",
                "description": "Word-list generation with ordered model fallback",
            },
            {
                "name": "Health",
                "description": "Liveness and component status",
            },
        ],
    )

    app.state.settings = settings
    app.state.challenge_store = ChallengeStore(
        ttl_seconds=settings.challenge_ttl_seconds,
        maxsize=settings.challenge_max_pending,
    )
    app.state.verifier = build_verifier(settings)
    app.state.session_issuer = SessionIssuer(
        settings.jwt_secret_key,
        expire_seconds=settings.session_expire_seconds,
        algorithm=settings.algorithm,
    )
    app.state.authorization_gate = AuthorizationGate(
        settings.jwt_secret_key,
        enforce=settings.enforce_attestation,
    )
    app.state.orchestrator = build_orchestrator(settings, backends) if backends else None

    app.add_middleware(CORSHeadersMiddleware, allow_origin=settings.allowed_origin)
    register_error_handlers(app)

    app.include_router(challenge.router, prefix=API_PREFIX)
    app.include_router(device.router, prefix=API_PREFIX)
    app.include_router(generate.router, prefix=API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint"""
        state = request.app.state
        orchestrator = getattr(state, "orchestrator", None)
        return {
            "status": "ok",
            "service": "wordgate",
            "version": __version__,
            "verifier": state.verifier.get_verifier_type(),
            "assurance": state.verifier.assurance.value,
            "enforce_attestation": state.authorization_gate.enforce,
            "pending_challenges": len(state.challenge_store),
            "models": orchestrator.model_ids if orchestrator else [],
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
