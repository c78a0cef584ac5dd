"""
Generation backends.

A backend turns a prompt into raw model text and translates provider
failures into the generation error classes used by the fallback loop.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from .errors import BackendError, BackendTimeoutError, MalformedOutputError, QuotaExceededError

logger = logging.getLogger(__name__)

QUOTA_STATUS_CODE = 429
QUOTA_MARKERS = ("resource_exhausted", "quota", "rate limit")
JSON_MODE_MARKERS = ("json mode is not enabled", "response_mime_type", "responsemimetype")


class GenerationBackend(ABC):
    """A single model endpoint in the fallback list."""

    def __init__(self, model_id: str):
        self.model_id = model_id

    @property
    @abstractmethod
    def supports_structured_output(self) -> bool:
        """Whether the backend can be constrained with a response schema."""

    @abstractmethod
    async def complete(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> str:
        """
        Run one generation call.

        Args:
            prompt: Full prompt text
            response_schema: JSON schema for structured output, if supported

        Returns:
            Raw response text

        Raises:
            QuotaExceededError, MalformedOutputError, BackendError
        """


class GeminiBackend(GenerationBackend):
    """
    Google Generative Language API backend (Gemini and Gemma models).

    Gemma models have no JSON mode; they are prompted for raw JSON instead.
    """

    def __init__(self, model_id: str, client: httpx.AsyncClient, api_key: str,
                 base_url: str = "https://generativelanguage.googleapis.com/v1beta"):
        super().__init__(model_id)
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def supports_structured_output(self) -> bool:
        return "gemma" not in self.model_id.lower()

    @property
    def url(self) -> str:
        return f"{self._base_url}/models/{self.model_id}:generateContent"

    def build_request(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if response_schema is not None and self.supports_structured_output:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        return body

    async def complete(self, prompt: str, response_schema: Optional[Dict[str, Any]] = None) -> str:
        try:
            response = await self._client.post(
                self.url,
                json=self.build_request(prompt, response_schema),
                headers={
                    "x-goog-api-key": self._api_key,
                    "Content-Type": "application/json",
                },
            )
        except httpx.TimeoutException as e:
            raise BackendTimeoutError(f"Request to {self.model_id} timed out: {e}", self.model_id) from e
        except httpx.RequestError as e:
            raise BackendError(f"Request to {self.model_id} failed: {e}", self.model_id) from e

        if response.status_code // 100 != 2:
            raise self._classify_error(response)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedOutputError(f"{self.model_id} returned a non-JSON envelope", self.model_id) from e

        return self._extract_text(payload)

    def _classify_error(self, response: httpx.Response) -> Exception:
        """Map a non-2xx provider response onto a generation error class."""
        message = response.text
        status_name = ""
        try:
            error = response.json().get("error", {})
            message = error.get("message", message)
            status_name = error.get("status", "")
        except (ValueError, AttributeError):
            pass

        haystack = f"{status_name} {message}".lower()
        detail = f"{self.model_id} returned {response.status_code}: {message}"

        if response.status_code == QUOTA_STATUS_CODE or any(m in haystack for m in QUOTA_MARKERS):
            return QuotaExceededError(detail, self.model_id)
        if any(m in haystack for m in JSON_MODE_MARKERS):
            return MalformedOutputError(detail, self.model_id)
        return BackendError(detail, self.model_id, status_code=response.status_code)

    def _extract_text(self, payload: Any) -> str:
        candidates = payload.get("candidates") if isinstance(payload, dict) else None
        parts = []
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content")
            content_parts = content.get("parts") if isinstance(content, dict) else None
            for part in content_parts if isinstance(content_parts, list) else []:
                text = part.get("text") if isinstance(part, dict) else None
                if isinstance(text, str):
                    parts.append(text)

        text = "".join(parts).strip()
        if not text:
            raise MalformedOutputError(f"No text in response from {self.model_id}", self.model_id)
        return text


def build_backends(model_ids: List[str], client: httpx.AsyncClient, api_key: str,
                   base_url: str) -> List[GenerationBackend]:
    """Create one backend per configured model, preserving order."""
    return [GeminiBackend(model_id, client, api_key, base_url) for model_id in model_ids]
