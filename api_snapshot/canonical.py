"""Canonical JSON encoding.

Snapshot files and comparisons share one encoding: two-space indentation and
keys sorted at every level, so logically equal values always produce the same
bytes no matter what order a server emitted its keys in.
"""

from __future__ import annotations

import json
from typing import Any

from api_snapshot.errors import DecodeError, EncodeError

INDENT = 2
ENCODING = "utf-8"


def encode(value: Any) -> bytes:
    """Encode a decoded JSON value as canonical bytes.

    No trailing newline is written. Integral floats are written as integers,
    so 1.0 and 1 encode to the same bytes.

    Raises:
        EncodeError: If value holds NaN/Infinity or non-JSON objects.
    """
    try:
        text = json.dumps(
            _integral_floats_as_ints(value),
            indent=INDENT,
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
        )
        # Lone surrogates survive dumps but not the UTF-8 encode
        return text.encode(ENCODING)
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodeError(f"failed to encode JSON: {e}") from e


def decode(data: bytes | str) -> Any:
    """Decode JSON bytes or text.

    Raises:
        DecodeError: If data is empty or not valid JSON.
    """
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"failed to decode JSON: {e}") from e


def canonicalize(value: Any) -> Any:
    """Round-trip a value through the canonical encoding."""
    return decode(encode(value))


def _integral_floats_as_ints(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, dict):
        return {k: _integral_floats_as_ints(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_integral_floats_as_ints(v) for v in value]
    return value
