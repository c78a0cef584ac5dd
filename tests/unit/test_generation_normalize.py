"""
Unit tests for model output parsing.
"""

import pytest

from wordgate.services.generation import MalformedOutputError, parse_word_list, strip_code_fences


class TestStripCodeFences:

    def test_json_fence(self):
        assert strip_code_fences('```json\n{"words": []}\n```') == '{"words": []}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"words": []}\n```') == '{"words": []}'

    def test_uppercase_fence(self):
        assert strip_code_fences('```JSON {"words": []} ```') == '{"words": []}'

    def test_no_fence(self):
        assert strip_code_fences('  {"words": []}  ') == '{"words": []}'


class TestParseWordList:
    """Test cases for parse_word_list."""

    def test_plain_json(self):
        assert parse_word_list('{"words": ["Thor", "Hulk"]}') == ["Thor", "Hulk"]

    def test_fenced_json(self):
        text = '```json\n{"words": ["Thor", "Hulk"]}\n```'
        assert parse_word_list(text) == ["Thor", "Hulk"]

    def test_trims_and_dedupes(self):
        text = '{"words": [" Thor ", "Hulk", "Thor", "", "  ", "Hulk"]}'
        assert parse_word_list(text) == ["Thor", "Hulk"]

    def test_non_string_entries_dropped(self):
        assert parse_word_list('{"words": ["Thor", 7, null, {"a": 1}]}') == ["Thor"]

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_text(self, text):
        with pytest.raises(MalformedOutputError):
            parse_word_list(text, "gemini-2.5-flash")

    def test_invalid_json(self):
        with pytest.raises(MalformedOutputError) as exc_info:
            parse_word_list("Here are some words: Thor, Hulk", "gemma-3-27b-it")
        assert exc_info.value.model_id == "gemma-3-27b-it"

    @pytest.mark.parametrize("text", ['["Thor"]', '{"items": ["Thor"]}', '{"words": "Thor"}'])
    def test_wrong_shape(self, text):
        with pytest.raises(MalformedOutputError):
            parse_word_list(text)

    def test_no_usable_words(self):
        with pytest.raises(MalformedOutputError):
            parse_word_list('{"words": [1, 2, ""]}')
