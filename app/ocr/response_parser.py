"""Turns loosely formatted model output into a list of raw row objects."""

import json
import re
from typing import Any

from app.ocr.exceptions import ParseError

_FENCED_ARRAY = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```", re.IGNORECASE)
_OPENING_FENCE = re.compile(r"^```[a-zA-Z]*\n?")
_CLOSING_FENCE = re.compile(r"```$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker."""
    cleaned = _OPENING_FENCE.sub("", text.strip())
    return _CLOSING_FENCE.sub("", cleaned).strip()


def parse_json_array(text: str) -> list[Any]:
    """Parse ``text`` as a JSON array.

    Raises:
        ParseError: if the text is not valid JSON or not an array.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, list):
        raise ParseError(f"Expected a JSON array, got {type(parsed).__name__}")
    return parsed


def parse_fenced(text: str) -> list[Any]:
    """Strip surrounding code fences and parse the remainder."""
    return parse_json_array(strip_code_fences(text))


def parse_lenient(text: str) -> list[Any]:
    """Locate a JSON array in loosely formatted output.

    Tries, in order: an array inside a fenced block, the fence-stripped
    text, the raw text.

    Raises:
        ParseError: if no strategy yields a JSON array.
    """
    match = _FENCED_ARRAY.search(text)
    cleaned = match.group(1) if match else strip_code_fences(text)
    try:
        return parse_json_array(cleaned)
    except ParseError:
        return parse_json_array(text)
