"""Lenient parsing and sanitization of generated topics.

Gemini may wrap the JSON object in code fences or explanatory text. Parsing
tries, in order:
1. json.loads() on the fence-stripped response
2. Regex extraction of the outermost {...} object
Anything that still does not fit TopicsPayload is reported as None and the
caller treats it as a transient (structural) failure.
"""

import json
import re
from typing import Any, Optional

from src.models.models import TopicsPayload, TopicsResponse
from src.utils.errors import safe_execute_sync
from src.utils.logger import logger

QUOTE_CHARS = "\"'“”‘’`"

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def sanitize_sentence(text: str, max_words: int) -> str:
    """Strip surrounding quote characters and whitespace, then keep at most max_words words.

    Words are re-joined by single spaces; the cut never splits a word.
    """
    stripped = text.strip().strip(QUOTE_CHARS).strip()
    return " ".join(stripped.split()[:max_words])


def _clean(value: Any, max_words: int) -> Any:
    return sanitize_sentence(value, max_words) if isinstance(value, str) else value


def parse_topics_payload(response_text: Optional[str], max_words: int = 28) -> Optional[TopicsPayload]:
    """Parse and validate a topics response from the generation service.

    Accepts "fun_fact" as an alias of "fact". Every sentence is sanitized
    before validation, so a starter made only of quotes counts as empty.

    Returns:
        TopicsPayload with exactly 3 starters and a fact, or None.
    """
    if not response_text:
        return None

    cleaned = _FENCE_PATTERN.sub("", response_text).strip()

    def _parse_json_direct():
        return json.loads(cleaned)

    def _parse_json_regex():
        json_match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if json_match:
            return json.loads(json_match.group())
        return None

    parsed = safe_execute_sync(_parse_json_direct, "Direct JSON parse", log_level="debug")
    if not isinstance(parsed, dict):
        parsed = safe_execute_sync(_parse_json_regex, "Regex JSON extraction", log_level="debug")

    if not isinstance(parsed, dict):
        logger.warning("Failed to parse JSON from Gemini response")
        return None

    starters = parsed.get("starters")
    fact = parsed.get("fact", parsed.get("fun_fact"))

    def _validate_output():
        return TopicsPayload(
            starters=[_clean(item, max_words) for item in starters] if isinstance(starters, list) else starters,
            fact=_clean(fact, max_words),
        )

    return safe_execute_sync(_validate_output, "Validate TopicsPayload schema", log_level="warning")


def format_clipboard_block(topics: TopicsResponse) -> str:
    """Render starters and fact as shareable plain text."""
    lines = ["Tonight's starters:", *(f"• {starter}" for starter in topics.starters)]
    lines.append(f"Fun fact: {topics.fact}")
    return "\n".join(lines)
