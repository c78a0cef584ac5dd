"""
Backend output cleanup: strip markdown code fences, parse, validate shape.
"""

import json
import re
from typing import List, Optional

from .errors import MalformedOutputError

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers that instruction-tuned models wrap around JSON."""
    return _FENCE.sub("", text).strip()


def parse_word_list(text: Optional[str], model_id: Optional[str] = None) -> List[str]:
    """
    Parse raw model text into a clean list of words.

    Strings are trimmed, empty entries dropped and duplicates removed while
    keeping the first occurrence.

    Raises:
        MalformedOutputError: If the text is empty, not JSON, or has no list of strings under "words"
    """
    if not text or not text.strip():
        raise MalformedOutputError("No text in response", model_id)

    cleaned = strip_code_fences(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"Response is not valid JSON: {e}", model_id) from e

    words = payload.get("words") if isinstance(payload, dict) else None
    if not isinstance(words, list):
        raise MalformedOutputError('Response JSON has no "words" list', model_id)

    seen = set()
    result = []
    for word in words:
        if not isinstance(word, str):
            continue
        word = word.strip()
        if word and word not in seen:
            seen.add(word)
            result.append(word)

    if not result:
        raise MalformedOutputError('Response "words" list contains no strings', model_id)
    return result
