"""JSON decoding of HTTP input responses."""

import json
from typing import Any

from src.core.errors import ParseError

__all__ = ["decode_response"]


def decode_response(body: bytes | str) -> dict[str, Any]:
    """Parse a response body into a key-ordered mapping.

    Args:
        body: Raw response body, UTF-8 encoded JSON.

    Returns:
        Decoded JSON object; nested objects and arrays are decoded recursively
        and key order follows the document.

    Raises:
        ParseError: If the body is not UTF-8 or not a JSON object.
    """
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
        data = json.loads(text)
    except UnicodeDecodeError as e:
        raise ParseError(f"Response body is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ParseError(f"Response body contains invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"Response body must be a JSON object, got {type(data).__name__}")
    return data
