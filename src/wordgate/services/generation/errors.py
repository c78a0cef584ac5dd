"""
Exception hierarchy for word-list generation.
"""

from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .orchestrator import ModelAttemptOutcome


class ErrorClass(str, Enum):
    """How a failed backend attempt is treated by the fallback loop."""
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    MALFORMED_OUTPUT = "MALFORMED_OUTPUT"
    OTHER = "OTHER"


class GenerationError(Exception):
    """Base class for generation failures."""

    error_class = ErrorClass.OTHER

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


class QuotaExceededError(GenerationError):
    """The backend reported a rate or usage limit. The next model is tried."""

    error_class = ErrorClass.QUOTA_EXCEEDED


class MalformedOutputError(GenerationError):
    """The backend answered but the output is not a usable word list. The next model is tried."""

    error_class = ErrorClass.MALFORMED_OUTPUT


class BackendError(GenerationError):
    """Any other backend failure. Aborts the request."""

    def __init__(self, message: str, model_id: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, model_id)
        self.status_code = status_code


class BackendTimeoutError(BackendError):
    """A single backend attempt exceeded its time budget."""


class AllModelsExhaustedError(GenerationError):
    """Every configured model failed with a fallback-eligible error."""

    reason = "ALL_MODELS_EXHAUSTED"

    def __init__(self, attempts: List["ModelAttemptOutcome"]):
        tried = ", ".join(f"{a.model_id} ({a.error_class.value})" for a in attempts)
        super().__init__(f"All models exhausted: {tried}")
        self.attempts = attempts


class InvalidTopicError(ValueError):
    """The requested topic is missing, too long or empty after sanitization."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason
