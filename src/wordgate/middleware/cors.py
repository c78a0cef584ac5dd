"""
Cross-origin headers for the public API.

Mobile and web clients call the gateway from any origin, so every response
carries permissive CORS headers and every OPTIONS preflight is answered
directly with an empty 200.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization, X-App-Attest, X-App-Attest-Challenge"


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Add CORS headers to all responses and short-circuit preflight requests."""

    def __init__(self, app, allow_origin: str = "*"):
        super().__init__(app)
        self.allow_origin = allow_origin

    def cors_headers(self) -> dict:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        }

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        if request.method == "OPTIONS":
            logger.debug(f"Preflight answered for {request.url.path}")
            return Response(status_code=200, headers=self.cors_headers())

        response = await call_next(request)
        response.headers.update(self.cors_headers())
        return response
