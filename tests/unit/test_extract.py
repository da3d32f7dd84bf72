"""Tests for JSON extraction from model output."""

import pytest

from backend.app.llm.errors import MalformedOutputError
from backend.app.llm.extract import (
    clean_model_text,
    extract_generation_output,
    extract_json_object,
    find_json_object,
)
from backend.app.models.trip import TextResponse


class TestCleanModelText:
    """Noise stripping."""

    def test_strips_language_fences_case_insensitively(self) -> None:
        assert clean_model_text('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fences(self) -> None:
        assert clean_model_text('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_control_characters(self) -> None:
        assert clean_model_text('\x00{"a":\t1}\r\n') == '{"a":1}'


class TestExtractJsonObject:
    """Object recovery."""

    def test_fenced_json_surrounded_by_prose(self) -> None:
        raw = 'Sure! ```json\n{"destination":"Paris"}\n```\nEnjoy!'
        assert extract_json_object(raw) == {"destination": "Paris"}

    def test_plain_json(self) -> None:
        assert extract_json_object('{"days": [1, 2]}') == {"days": [1, 2]}

    def test_nested_objects(self) -> None:
        raw = 'Here you go {"a": {"b": {"c": 1}}, "d": [{"e": 2}]} hope it helps'
        assert extract_json_object(raw) == {"a": {"b": {"c": 1}}, "d": [{"e": 2}]}

    def test_braces_inside_string_values(self) -> None:
        raw = '{"tip": "Look for the } sign", "note": "{not json}"} trailing }'
        assert extract_json_object(raw) == {"tip": "Look for the } sign", "note": "{not json}"}

    def test_escaped_quotes_inside_strings(self) -> None:
        raw = r'{"quote": "He said \"{hi}\"", "n": 1}'
        assert extract_json_object(raw) == {"quote": 'He said "{hi}"', "n": 1}

    def test_brace_in_leading_prose_is_skipped(self) -> None:
        raw = 'Use the {placeholder} style. {"destination": "Rome"}'
        assert extract_json_object(raw) == {"destination": "Rome"}

    def test_trailing_prose_with_braces_is_ignored(self) -> None:
        raw = '{"destination": "Rome"} Let me know if you want {changes}.'
        assert extract_json_object(raw) == {"destination": "Rome"}

    def test_truncated_output_does_not_yield_inner_object(self) -> None:
        raw = (
            '{"summary": "Trip", "itineraryTable": ['
            '{"day": 1, "meals": {"breakfast": "x"}}, {"day": 2'
        )
        with pytest.raises(MalformedOutputError):
            extract_json_object(raw)

    def test_trailing_comma_does_not_yield_inner_object(self) -> None:
        raw = '{"summary": "Trip", "budgetBreakdown": {"food": "100"}, "localTips": ["a",],}'
        with pytest.raises(MalformedOutputError):
            extract_json_object(raw)

    def test_unclosed_brace_in_prose_ends_scan(self) -> None:
        assert find_json_object('Pick {one or two. {"b": 2}') is None

    def test_empty_object_is_valid(self) -> None:
        assert extract_json_object("{}") == {}

    @pytest.mark.parametrize(
        "raw",
        ["I cannot help with that.", "", '{"unterminated": "value"', "[1, 2, 3]", "{not: json}"],
    )
    def test_unparseable_output_raises(self, raw: str) -> None:
        with pytest.raises(MalformedOutputError) as exc_info:
            extract_json_object(raw)

        assert exc_info.value.raw_text == clean_model_text(raw)

    def test_find_json_object_returns_none_without_object(self) -> None:
        assert find_json_object("no braces here") is None


class TestExtractGenerationOutput:
    """Text responses bypass itinerary handling."""

    def test_text_response(self) -> None:
        raw = '```json\n{"isTextResponse": true, "message": "Day 2 is in Sintra."}\n```'

        output = extract_generation_output(raw)

        assert isinstance(output, TextResponse)
        assert output.message == "Day 2 is in Sintra."
        assert output.model_dump(by_alias=True) == {
            "isTextResponse": True,
            "message": "Day 2 is in Sintra.",
        }

    def test_itinerary_object(self) -> None:
        output = extract_generation_output('{"summary": "Trip", "isTextResponse": false}')
        assert output == {"summary": "Trip", "isTextResponse": False}

    def test_text_response_keeps_model_fields(self) -> None:
        raw = '{"isTextResponse": true, "message": "Sure.", "followUp": ["Day 3?"]}'

        output = extract_generation_output(raw)

        assert isinstance(output, TextResponse)
        assert output.model_dump(by_alias=True) == {
            "isTextResponse": True,
            "message": "Sure.",
            "followUp": ["Day 3?"],
        }

    @pytest.mark.parametrize(
        "raw", ['{"isTextResponse": true}', '{"isTextResponse": true, "message": 42}']
    )
    def test_text_response_without_string_message_raises(self, raw: str) -> None:
        with pytest.raises(MalformedOutputError):
            extract_generation_output(raw)
