"""
Unit tests for topic sanitization and prompt construction.
"""

import pytest

from wordgate.services.generation import InvalidTopicError, build_prompt, sanitize_topic
from wordgate.services.generation.prompt import RAW_JSON_INSTRUCTION, word_list_schema


class TestSanitizeTopic:
    """Test cases for sanitize_topic."""

    def test_plain_topic_unchanged(self):
        assert sanitize_topic("Marvel Superheroes") == "Marvel Superheroes"

    def test_disallowed_characters_removed(self):
        assert sanitize_topic("Cats<script>alert(1)</script>") == "Catsscriptalert1script"

    def test_allowed_punctuation_kept(self):
        assert sanitize_topic("Rock-n-roll bands, 1970s_era. Wow!?") == "Rock-n-roll bands, 1970s_era. Wow!?"

    def test_ampersand_removed(self):
        assert sanitize_topic("Cats & Dogs!") == "Cats  Dogs!"

    def test_surrounding_whitespace_trimmed(self):
        assert sanitize_topic("  Birds  ") == "Birds"

    @pytest.mark.parametrize("topic", [None, "", "   ", 42, ["Birds"]])
    def test_topic_required(self, topic):
        with pytest.raises(InvalidTopicError) as exc_info:
            sanitize_topic(topic)
        assert exc_info.value.reason == "TOPIC_REQUIRED"

    def test_length_limit_boundary(self):
        assert sanitize_topic("a" * 100) == "a" * 100

    def test_topic_too_long(self):
        """Length is checked on the raw topic, before sanitization."""
        with pytest.raises(InvalidTopicError) as exc_info:
            sanitize_topic("a" * 101)
        assert exc_info.value.reason == "TOPIC_TOO_LONG"

    def test_topic_empty_after_sanitization(self):
        with pytest.raises(InvalidTopicError) as exc_info:
            sanitize_topic("<<<>>>")
        assert exc_info.value.reason == "TOPIC_INVALID"

    def test_custom_max_length(self):
        with pytest.raises(InvalidTopicError):
            sanitize_topic("abcdef", max_length=5)


class TestBuildPrompt:
    """Test cases for build_prompt."""

    def test_prompt_mentions_topic_and_count(self):
        prompt = build_prompt("Birds", 100)

        assert "'Birds'" in prompt
        assert "list of 100 specific, named examples" in prompt
        assert RAW_JSON_INSTRUCTION not in prompt

    def test_unstructured_prompt_requests_raw_json(self):
        prompt = build_prompt("Birds", 100, structured_output=False)

        assert prompt.endswith(RAW_JSON_INSTRUCTION)

    def test_schema_shape(self):
        schema = word_list_schema()

        assert schema["required"] == ["words"]
        assert schema["properties"]["words"]["type"] == "ARRAY"
        assert schema["properties"]["words"]["items"]["type"] == "STRING"
