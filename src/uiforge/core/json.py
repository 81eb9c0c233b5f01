"""Fast, tolerant JSON decoding for model output."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def extract_array_boundaries(text: str) -> str | None:
    """
    Locate the outermost JSON array in text.

    Args:
        text: Text potentially containing a JSON array

    Returns:
        The array substring or None if not found
    """
    working_text = text

    # Remove markdown code blocks
    if "```" in working_text:
        if "```json" in working_text:
            start_marker = working_text.find("```json") + 7
        else:
            start_marker = working_text.find("```") + 3

        end_marker = working_text.find("```", start_marker)
        if end_marker != -1:
            working_text = working_text[start_marker:end_marker].strip()

    start = working_text.find("[")
    end = working_text.rfind("]")

    if start == -1 or end == -1 or end < start:
        return None

    return working_text[start : end + 1]


def extract_json_array(text: str, repair: bool = True) -> list[Any]:
    """
    Extract and parse a JSON array, repairing it with json_repair if msgspec rejects it.

    Args:
        text: Text containing a JSON array
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed list

    Raises:
        JSONParseError: If parsing fails or the result is not a list
    """
    json_str = extract_array_boundaries(text.strip())
    if json_str is None:
        raise JSONParseError("No JSON array found in text")

    try:
        result = msgspec.json.decode(json_str.encode("utf-8"))
    except msgspec.DecodeError as e:
        if not repair:
            raise JSONParseError(f"Invalid JSON: {e}", e)
        try:
            result = json.loads(repair_json(json_str))
        except Exception as repair_error:
            raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error)

    if not isinstance(result, list):
        raise JSONParseError(f"Expected list, got {type(result).__name__}")
    return result


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except (TypeError, ValueError):
            # Integers outside 64-bit range and similar edge cases
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None, default=str)
