"""
Unit tests for the model fallback orchestrator.
"""

import asyncio

import pytest

from wordgate.services.generation import (
    AllModelsExhaustedError,
    BackendError,
    BackendTimeoutError,
    ErrorClass,
    GenerationOrchestrator,
    MalformedOutputError,
    QuotaExceededError,
)
from wordgate.services.generation.prompt import RAW_JSON_INSTRUCTION

WORDS = '{"words": ["Iron Man", "Thor"]}'


class TestGenerationOrchestrator:
    """Test cases for GenerationOrchestrator."""

    def test_requires_backends(self):
        with pytest.raises(ValueError):
            GenerationOrchestrator([])

    def test_model_ids_in_order(self, stub_backend):
        orchestrator = GenerationOrchestrator([stub_backend("a"), stub_backend("b")])
        assert orchestrator.model_ids == ["a", "b"]

    @pytest.mark.asyncio
    async def test_first_backend_succeeds(self, stub_backend):
        first, second = stub_backend("a", WORDS), stub_backend("b", WORDS)
        orchestrator = GenerationOrchestrator([first, second])

        result = await orchestrator.generate("Marvel")

        assert result.words == ["Iron Man", "Thor"]
        assert result.model_used == "a"
        assert len(first.calls) == 1
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_quota_falls_back(self, stub_backend):
        """Quota exhaustion on the first model moves on to the second."""
        first = stub_backend("a", QuotaExceededError("429 RESOURCE_EXHAUSTED", "a"))
        second = stub_backend("b", WORDS)
        third = stub_backend("c", WORDS)
        orchestrator = GenerationOrchestrator([first, second, third])

        result = await orchestrator.generate("Marvel")

        assert result.model_used == "b"
        assert [a.model_id for a in result.attempts] == ["a", "b"]
        assert result.attempts[0].error_class == ErrorClass.QUOTA_EXCEEDED
        assert result.attempts[1].success is True
        assert result.attempts[1].word_count == 2
        assert len(first.calls) == 1
        assert third.calls == []

    @pytest.mark.asyncio
    async def test_malformed_output_falls_back(self, stub_backend):
        first = stub_backend("a", "Sure! Here are some words: Thor, Hulk")
        second = stub_backend("b", WORDS)
        orchestrator = GenerationOrchestrator([first, second])

        result = await orchestrator.generate("Marvel")

        assert result.model_used == "b"
        assert result.attempts[0].error_class == ErrorClass.MALFORMED_OUTPUT

    @pytest.mark.asyncio
    async def test_all_models_exhausted(self, stub_backend):
        """Each model is attempted exactly once before giving up."""
        backends = [
            stub_backend("a", QuotaExceededError("quota", "a")),
            stub_backend("b", MalformedOutputError("JSON mode is not enabled", "b")),
            stub_backend("c", QuotaExceededError("quota", "c")),
        ]
        orchestrator = GenerationOrchestrator(backends)

        with pytest.raises(AllModelsExhaustedError) as exc_info:
            await orchestrator.generate("Marvel")

        assert [len(b.calls) for b in backends] == [1, 1, 1]
        assert [a.model_id for a in exc_info.value.attempts] == ["a", "b", "c"]
        assert exc_info.value.reason == "ALL_MODELS_EXHAUSTED"

    @pytest.mark.asyncio
    async def test_other_error_aborts(self, stub_backend):
        """Failures outside quota and malformed output stop the loop."""
        first = stub_backend("a", BackendError("500 internal", "a", status_code=500))
        second = stub_backend("b", WORDS)
        orchestrator = GenerationOrchestrator([first, second])

        with pytest.raises(BackendError):
            await orchestrator.generate("Marvel")

        assert second.calls == []

    @pytest.mark.asyncio
    async def test_attempt_timeout(self, stub_backend):
        class SlowBackend(stub_backend):
            async def complete(self, prompt, response_schema=None):
                await asyncio.sleep(5)
                return WORDS

        fallback = stub_backend("b", WORDS)
        orchestrator = GenerationOrchestrator([SlowBackend("a"), fallback], attempt_timeout=0.05)

        with pytest.raises(BackendTimeoutError):
            await orchestrator.generate("Marvel")

        assert fallback.calls == []

    @pytest.mark.asyncio
    async def test_structured_backend_gets_schema(self, stub_backend):
        backend = stub_backend("gemini-2.5-flash", WORDS, structured=True)
        orchestrator = GenerationOrchestrator([backend], word_count=50)

        await orchestrator.generate("Marvel")

        call = backend.calls[0]
        assert call["schema"]["required"] == ["words"]
        assert "list of 50 specific" in call["prompt"]
        assert RAW_JSON_INSTRUCTION not in call["prompt"]

    @pytest.mark.asyncio
    async def test_unstructured_backend_gets_raw_json_prompt(self, stub_backend):
        backend = stub_backend("gemma-3-27b-it", "```json\n" + WORDS + "\n```", structured=False)
        orchestrator = GenerationOrchestrator([backend])

        result = await orchestrator.generate("Marvel")

        assert result.words == ["Iron Man", "Thor"]
        assert backend.calls[0]["schema"] is None
        assert RAW_JSON_INSTRUCTION in backend.calls[0]["prompt"]
