"""
Tolerant JSON decoding for model output.

Models routinely wrap JSON in markdown fences, leak control characters, or
add chatter around the object. ``tolerant_decode`` tries, in order:

1. strip surrounding code fences and parse;
2. drop non-printable control characters and parse again;
3. parse the outermost ``{...}`` span of the cleaned text.

If none of these yields a value, ``DecodeError`` is raised.
"""

from __future__ import annotations

import json
import re
from typing import Any

from .errors import DecodeError

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```$")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    if cleaned.endswith("```"):
        cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def strip_control_characters(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def extract_outer_object(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def tolerant_decode(text: str) -> Any:
    """Decode ``text`` into a JSON value, raising ``DecodeError`` on failure."""
    if not isinstance(text, str):
        raise DecodeError(f"expected text, got {type(text).__name__}")

    unfenced = strip_code_fences(text)
    try:
        return json.loads(unfenced)
    except json.JSONDecodeError:
        pass

    cleaned = strip_control_characters(unfenced)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    candidate = extract_outer_object(cleaned)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"no parseable JSON object in response: {exc}", raw=text) from exc
    raise DecodeError("no JSON object found in response", raw=text)


def decode_object(text: str) -> dict[str, Any]:
    """Like ``tolerant_decode`` but require the top-level value to be an object."""
    value = tolerant_decode(text)
    if not isinstance(value, dict):
        raise DecodeError(f"expected a JSON object, got {type(value).__name__}", raw=text)
    return value
