"""Response assertions built on the snapshot engine.

Each factory returns an assertion: a callable that takes an httpx.Response and
raises ResponseAssertionError (or a SnapshotError) when the response does not
satisfy it. Assertions read response.content, which httpx keeps after the
first read, so several assertions can inspect the same response.

Usage:
    engine = SnapshotEngine(config)
    checks = [
        field_test({"user.id": field_is_number}),
        body_snap("get-user", ["user.updated_at"], engine),
    ]
    for check in checks:
        check(response)
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

import httpx

from api_snapshot.canonical import decode, encode
from api_snapshot.engine import SnapshotEngine
from api_snapshot.errors import FieldAssertionError, ResponseAssertionError, SnapshotMismatchError
from api_snapshot.field_path import extract, iter_objects, parse_path, redact_all
from api_snapshot.models import JsonKind, json_kind

Assertion = Callable[[httpx.Response], None]
FieldValidator = Callable[[Any], None]


def _request_url(response: httpx.Response) -> str:
    try:
        return str(response.request.url)
    except RuntimeError:
        # Response was built without a request
        return "<unknown>"


def _decode_body(response: httpx.Response) -> Any:
    return decode(response.content)


# =============================================================================
# Snapshot and Field Assertions
# =============================================================================


def field_test(fields: dict[str, FieldValidator]) -> Assertion:
    """Run a validator on each field path of the JSON body.

    For an array body every object element is checked; other elements are
    skipped. The first failing validator aborts the check.
    """
    parsed = [(parse_path(path), validator) for path, validator in fields.items()]

    def check(response: httpx.Response) -> None:
        data = _decode_body(response)
        for item in iter_objects(data, "Field in field test"):
            for field_path, validator in parsed:
                validator(extract(item, field_path))

    return check


def body_snap(
    name: str,
    ignored_fields: Iterable[str],
    engine: SnapshotEngine,
) -> Assertion:
    """Match the JSON body against the snapshot named name.

    Args:
        name: Snapshot name; the key is name + config.body_key_suffix.
        ignored_fields: Field paths removed from every object before
            comparison. A dict works too; only its keys are used.
        engine: Engine holding the snapshot configuration.

    Raises (from the assertion):
        SnapshotMismatchError: If the body differs from the baseline.
    """
    key = name + engine.config.body_key_suffix
    paths = [parse_path(path) for path in ignored_fields]

    def check(response: httpx.Response) -> None:
        data = _decode_body(response)
        redact_all(data, paths, "Field in body snap")
        result = engine.shot(key, data)
        if not result.matched:
            raise SnapshotMismatchError(_request_url(response), result.diff)

    return check


# =============================================================================
# Body Assertions
# =============================================================================


def body_match_string(pattern: str) -> Assertion:
    """Assert the body text contains a match for a regular expression."""
    compiled = re.compile(pattern)

    def check(response: httpx.Response) -> None:
        if not compiled.search(response.text):
            raise ResponseAssertionError(f"Body mismatch: pattern not found '{pattern}'")

    return check


def body_equals(value: str) -> Assertion:
    """Assert the body text equals value. One trailing newline is ignored."""

    def check(response: httpx.Response) -> None:
        body = response.text
        if body.endswith("\n"):
            body = body[:-1]
        if body != value:
            raise ResponseAssertionError(
                f"Bodies mismatch:\n\thave: {response.text!r}\n\twant: {value!r}\n"
            )

    return check


def body_length(length: int) -> Assertion:
    """Assert the body length, preferring a non-zero Content-Length header."""

    def check(response: httpx.Response) -> None:
        try:
            actual = int(response.headers.get("content-length", ""))
        except ValueError:
            actual = 0
        if actual == 0:
            actual = len(response.content)
        if actual != length:
            raise ResponseAssertionError(
                f"Body length mismatch: '{actual}' should be equal to '{length}'"
            )

    return check


def json_equals(expected: Any) -> Assertion:
    """Assert the JSON body equals expected, ignoring key order and formatting.

    expected may be a decoded value (dict, list, ...), JSON text, JSON bytes,
    or a file-like object with read(). An empty body compares as null.
    """
    if hasattr(expected, "read"):
        expected = expected.read()
    if isinstance(expected, (str, bytes)):
        expected = decode(expected)
    want = encode(expected)

    def check(response: httpx.Response) -> None:
        have = encode(_decode_body(response) if response.content else None)
        if have != want:
            raise ResponseAssertionError(
                f"JSON mismatch:\n\thave: {have.decode()}\n\twant: {want.decode()}\n"
            )

    return check


# =============================================================================
# Field Validators
# =============================================================================


def ignore_field(value: Any) -> None:
    """Accept any value, including a missing one."""


def field_is_number(value: Any) -> None:
    if _kind_of(value) != JsonKind.NUMBER:
        raise FieldAssertionError(f"{value!r} is not a number")


def field_is_bool(value: Any) -> None:
    if _kind_of(value) != JsonKind.BOOL:
        raise FieldAssertionError(f"{value!r} is not a boolean")


def field_is_string(value: Any) -> None:
    if _kind_of(value) != JsonKind.STRING:
        raise FieldAssertionError(f"{value!r} is not a string")


def _kind_of(value: Any) -> JsonKind | None:
    """Like json_kind, but None for values that are not JSON (e.g. MISSING)."""
    if isinstance(value, (type(None), bool, int, float, str, list, dict)):
        return json_kind(value)
    return None
