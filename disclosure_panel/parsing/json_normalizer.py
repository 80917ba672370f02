"""Helpers for decoding attribute payloads that may be JSON-encoded repeatedly."""

import json
from typing import Any

MAX_DECODE_DEPTH = 10


def _decode(value: Any, depth: int) -> tuple[Any, bool]:
    if depth >= MAX_DECODE_DEPTH or not isinstance(value, str):
        return value, False
    try:
        parsed = json.loads(value)
    except (ValueError, RecursionError):
        return value, False
    decoded, _ = _decode(parsed, depth + 1)
    return decoded, True


def normalize(value: Any) -> Any:
    """Parse ``value`` as JSON until it stops being a JSON-encoded string.

    Handles payloads encoded more than once, e.g. ``'"[1,2,3]"'`` becomes the
    list ``[1, 2, 3]``. When parsing fails at any level the last successfully
    held value is returned as-is, so malformed input never raises. Decoding
    stops after ``MAX_DECODE_DEPTH`` levels.
    """
    decoded, _ = _decode(value, 0)
    return decoded


def format_json(value: Any) -> str:
    """Pretty-print a possibly JSON-encoded payload for display.

    Structured values are dumped with two-space indentation, primitives are
    shown as a quoted JSON string, and input that is not JSON at all is
    returned unchanged.
    """
    if isinstance(value, str):
        decoded, succeeded = _decode(value, 0)
    else:
        decoded, succeeded = value, True
    if not succeeded:
        return value
    if isinstance(decoded, (dict, list)):
        return json.dumps(decoded, indent=2, ensure_ascii=False)
    # Primitives, null included, print as quoted text: "null" becomes "\"null\"".
    text = decoded if isinstance(decoded, str) else json.dumps(decoded)
    return json.dumps(text, ensure_ascii=False)
