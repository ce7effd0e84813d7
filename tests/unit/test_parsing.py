"""Unit tests for lenient topics parsing and sentence sanitization."""

import json

import pytest

from src.models.models import TopicsResponse
from src.topics.parsing import format_clipboard_block, parse_topics_payload, sanitize_sentence

VALID = {"starters": ["First one?", "Second one?", "Third one?"], "fact": "A fact."}


class TestSanitizeSentence:
    """Test quote stripping and word capping."""

    def test_strips_quotes_and_whitespace(self):
        assert sanitize_sentence('  "Hello there"  ', 28) == "Hello there"
        assert sanitize_sentence("“Curly quotes”", 28) == "Curly quotes"

    def test_caps_word_count_at_boundary(self):
        text = " ".join(f"w{i}" for i in range(40))
        result = sanitize_sentence(text, 28)

        assert len(result.split()) == 28
        assert result.endswith("w27")

    def test_collapses_internal_whitespace(self):
        assert sanitize_sentence("a\n b\t c", 28) == "a b c"

    def test_quotes_only_becomes_empty(self):
        assert sanitize_sentence("\"\"''", 28) == ""


class TestParseTopicsPayload:
    """Test the parse pipeline: direct, fenced, embedded, invalid."""

    def test_direct_json(self):
        payload = parse_topics_payload(json.dumps(VALID))

        assert payload.starters == VALID["starters"]
        assert payload.fact == "A fact."

    def test_code_fenced_json(self):
        text = f"```json\n{json.dumps(VALID)}\n```"
        assert parse_topics_payload(text).fact == "A fact."

    def test_json_embedded_in_prose(self):
        text = f"Sure! Here you go: {json.dumps(VALID)} Enjoy your dinner."
        assert len(parse_topics_payload(text).starters) == 3

    def test_fun_fact_alias(self):
        data = {"starters": VALID["starters"], "fun_fact": "Alias fact."}
        assert parse_topics_payload(json.dumps(data)).fact == "Alias fact."

    def test_sentences_sanitized(self):
        data = {"starters": ['"One"', " Two ", "'Three'"], "fact": " " + " ".join(["word"] * 40)}
        payload = parse_topics_payload(json.dumps(data), max_words=10)

        assert payload.starters == ["One", "Two", "Three"]
        assert len(payload.fact.split()) == 10

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "not json at all",
            json.dumps({"starters": ["a", "b"], "fact": "c"}),
            json.dumps({"starters": ["a", "b", "c", "d"], "fact": "e"}),
            json.dumps({"starters": ["a", "b", "c"]}),
            json.dumps({"starters": "a, b, c", "fact": "d"}),
            json.dumps({"starters": ["a", '""', "c"], "fact": "d"}),
            json.dumps(["a", "b", "c"]),
        ],
    )
    def test_invalid_payloads_return_none(self, text):
        assert parse_topics_payload(text) is None


class TestFormatClipboardBlock:
    def test_renders_starters_and_fact(self):
        topics = TopicsResponse(starters=["One?", "Two?", "Three?"], fact="A fact.", source="fallback")

        assert format_clipboard_block(topics) == (
            "Tonight's starters:\n• One?\n• Two?\n• Three?\nFun fact: A fact."
        )
