"""
Topic validation and prompt construction.
"""

import re
from typing import Any

from .errors import InvalidTopicError

# Letters, digits, whitespace and basic punctuation
_DISALLOWED_TOPIC_CHARS = re.compile(r"[^a-zA-Z0-9\s\-_.,!?]")

RAW_JSON_INSTRUCTION = (
    'RETURN ONLY RAW JSON. NO MARKDOWN. NO BACKTICKS. Format: {"words": ["word1", "word2"...]}'
)

WORD_ITEM_DESCRIPTION = "A single, specific, named example related to the topic."


def sanitize_topic(topic: Any, max_length: int = 100) -> str:
    """
    Validate a requested topic and reduce it to the allowed character set.

    Raises:
        InvalidTopicError: If the topic is missing, too long, or empty once sanitized
    """
    if not isinstance(topic, str) or not topic.strip():
        raise InvalidTopicError("Topic is required and must be a non-empty string", "TOPIC_REQUIRED")

    if len(topic) > max_length:
        raise InvalidTopicError(f"Topic is too long (max {max_length} chars)", "TOPIC_TOO_LONG")

    sanitized = _DISALLOWED_TOPIC_CHARS.sub("", topic).strip()
    if not sanitized:
        raise InvalidTopicError("Topic has no allowed characters", "TOPIC_INVALID")
    return sanitized


def build_prompt(topic: str, count: int = 100, structured_output: bool = True) -> str:
    """
    Build the generation prompt for a sanitized topic.

    Models without structured output are told to answer with raw JSON.
    """
    prompt = (
        "You are an assistant for an imposter-style party game. Your task is to generate "
        f"a list of {count} specific, named examples for a given topic. "
        "Avoid general terms, categories, or related concepts.\n"
        "\n"
        "For example:\n"
        '- If the topic is "Marvel Superheroes", good examples include: ["Iron Man", '
        '"Captain America", "Thor", "Hulk", "Spider-Man", "Black Widow", "Hawkeye", '
        '"Scarlet Witch", ...].\n'
        '- Bad examples for "Marvel Superheroes" would be: ["Superhero", "Villain", '
        '"Avenger", "Sidekick", "Costume"].\n'
        "\n"
        f"Now, generate a list of {count} specific, named examples for the topic: '{topic}'."
    )
    if not structured_output:
        prompt += "\n\n" + RAW_JSON_INSTRUCTION
    return prompt


def word_list_schema() -> dict:
    """Response schema constraining output to {"words": [string, ...]}."""
    return {
        "type": "OBJECT",
        "properties": {
            "words": {
                "type": "ARRAY",
                "items": {
                    "type": "STRING",
                    "description": WORD_ITEM_DESCRIPTION,
                },
            },
        },
        "required": ["words"],
    }
