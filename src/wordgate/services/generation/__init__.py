"""
Word-list generation with ordered model fallback.
"""

from .backends import GeminiBackend, GenerationBackend, build_backends
from .errors import (
    AllModelsExhaustedError,
    BackendError,
    BackendTimeoutError,
    ErrorClass,
    GenerationError,
    InvalidTopicError,
    MalformedOutputError,
    QuotaExceededError,
)
from .normalize import parse_word_list, strip_code_fences
from .orchestrator import GenerationOrchestrator, GenerationResult, ModelAttemptOutcome
from .prompt import build_prompt, sanitize_topic

__all__ = [
    "GenerationBackend",
    "GeminiBackend",
    "build_backends",
    "GenerationOrchestrator",
    "GenerationResult",
    "ModelAttemptOutcome",
    "ErrorClass",
    "GenerationError",
    "QuotaExceededError",
    "MalformedOutputError",
    "BackendError",
    "BackendTimeoutError",
    "AllModelsExhaustedError",
    "InvalidTopicError",
    "build_prompt",
    "sanitize_topic",
    "strip_code_fences",
    "parse_word_list",
]
