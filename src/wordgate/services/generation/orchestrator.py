"""
Model fallback orchestration.

Candidates are tried one at a time in configured order (cheapest first).
Quota exhaustion and malformed output move on to the next candidate; any
other failure aborts the request. The first success wins.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .backends import GenerationBackend
from .errors import (
    AllModelsExhaustedError,
    BackendTimeoutError,
    ErrorClass,
    GenerationError,
    MalformedOutputError,
    QuotaExceededError,
)
from .normalize import parse_word_list
from .prompt import build_prompt, word_list_schema

logger = logging.getLogger(__name__)

FALLBACK_ERRORS = (QuotaExceededError, MalformedOutputError)


@dataclass(frozen=True)
class ModelAttemptOutcome:
    """Outcome of one backend attempt."""
    model_id: str
    success: bool
    error_class: Optional[ErrorClass] = None
    error_message: Optional[str] = None
    word_count: Optional[int] = None


@dataclass
class GenerationResult:
    words: List[str]
    model_used: str
    attempts: List[ModelAttemptOutcome] = field(default_factory=list)


class GenerationOrchestrator:
    """Sequential, bounded fallback across an ordered list of backends."""

    def __init__(self, backends: Sequence[GenerationBackend], word_count: int = 100,
                 attempt_timeout: Optional[float] = 30.0):
        """
        Initialize orchestrator.

        Args:
            backends: Candidate backends in order of preference
            word_count: Number of named examples requested from the model
            attempt_timeout: Seconds allowed per backend attempt (None disables)
        """
        if not backends:
            raise ValueError("At least one generation backend is required")
        self.backends = list(backends)
        self.word_count = word_count
        self.attempt_timeout = attempt_timeout

    @property
    def model_ids(self) -> List[str]:
        return [backend.model_id for backend in self.backends]

    async def generate(self, topic: str) -> GenerationResult:
        """
        Generate a word list for an already sanitized topic.

        Raises:
            AllModelsExhaustedError: Every backend failed with quota or malformed output
            GenerationError: A backend failed in any other way
        """
        attempts: List[ModelAttemptOutcome] = []

        for backend in self.backends:
            logger.info(f"Trying model: {backend.model_id}")
            try:
                words = await self._attempt(backend, topic)
            except FALLBACK_ERRORS as e:
                attempts.append(ModelAttemptOutcome(
                    model_id=backend.model_id,
                    success=False,
                    error_class=e.error_class,
                    error_message=str(e),
                ))
                logger.warning(f"{e.error_class.value} on {backend.model_id}: {e}. Trying fallback...")
                continue
            except GenerationError as e:
                logger.error(f"Model {backend.model_id} failed with a non-recoverable error: {e}")
                raise

            attempts.append(ModelAttemptOutcome(
                model_id=backend.model_id,
                success=True,
                word_count=len(words),
            ))
            logger.info(f"Successfully generated {len(words)} words using {backend.model_id}")
            return GenerationResult(words=words, model_used=backend.model_id, attempts=attempts)

        raise AllModelsExhaustedError(attempts)

    async def _attempt(self, backend: GenerationBackend, topic: str) -> List[str]:
        structured = backend.supports_structured_output
        prompt = build_prompt(topic, self.word_count, structured_output=structured)
        schema = word_list_schema() if structured else None

        try:
            text = await asyncio.wait_for(backend.complete(prompt, schema), timeout=self.attempt_timeout)
        except asyncio.TimeoutError as e:
            raise BackendTimeoutError(
                f"{backend.model_id} did not answer within {self.attempt_timeout}s", backend.model_id
            ) from e

        return parse_word_list(text, backend.model_id)
