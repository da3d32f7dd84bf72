"""Recover a JSON object from free-text model output.

Models wrap JSON in code fences, add prose before or after it, and emit stray
control characters. Extraction runs in two stages: strip the known noise,
then scan for the first balanced ``{...}`` span that parses as an object.
"""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from pydantic import ValidationError

from backend.app.llm.errors import MalformedOutputError
from backend.app.models.trip import TextResponse

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```[ \t]*json\s*|```", re.IGNORECASE)
_CONTROL_CHARS = re.compile(r"[\x00-\x1f]+")

# Cap on raw text kept on MalformedOutputError for diagnostics
_MAX_DIAGNOSTIC_CHARS = 2000


def clean_model_text(raw: str) -> str:
    """Strip code fences and control characters, then trim."""
    text = _FENCE_PATTERN.sub("", raw)
    text = _CONTROL_CHARS.sub("", text)
    return text.strip()


def _balanced_spans(text: str) -> Iterator[str]:
    """Yield top-level balanced brace spans, in order.

    The scan tracks string literals and escapes so braces inside JSON string
    values do not affect nesting depth. Spans nested inside an earlier span
    are never yielded, and an opening brace that never closes ends the scan.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        end = -1
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    end = i
                    break
        if end == -1:
            return
        yield text[start : end + 1]
        start = text.find("{", end + 1)


def find_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced brace span that parses as a JSON object."""
    for span in _balanced_spans(text):
        try:
            value = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None


def extract_json_object(raw: str) -> dict[str, Any]:
    """Extract a JSON object from raw model output.

    Raises:
        MalformedOutputError: If no JSON object can be recovered
    """
    text = clean_model_text(raw or "")
    value = find_json_object(text)
    if value is None:
        logger.error(f"Model returned malformed JSON ({len(text)} chars)")
        raise MalformedOutputError(
            "Model returned malformed JSON: no parseable object found",
            raw_text=text[:_MAX_DIAGNOSTIC_CHARS],
        )
    return value


def extract_generation_output(raw: str) -> dict[str, Any] | TextResponse:
    """Extract an itinerary object, or a TextResponse when the model answered in text.

    Raises:
        MalformedOutputError: If no JSON object can be recovered, or a text
            response carries no string message
    """
    value = extract_json_object(raw)
    if value.get("isTextResponse") is not True:
        return value
    try:
        return TextResponse.model_validate(value)
    except ValidationError as e:
        raise MalformedOutputError(
            "Model returned a text response without a message",
            raw_text=json.dumps(value)[:_MAX_DIAGNOSTIC_CHARS],
        ) from e
