"""Tests for api_snapshot.assertions.

Tests cover:
- body_snap: recording, matching, redaction, mismatch errors, shapes
- field_test: validators over objects and arrays of objects
- body_match_string / body_equals / body_length / json_equals
- Field validators
"""

import io
import json

import pytest

from api_snapshot.assertions import (
    body_equals,
    body_length,
    body_match_string,
    body_snap,
    field_is_bool,
    field_is_number,
    field_is_string,
    field_test,
    ignore_field,
    json_equals,
)
from api_snapshot.canonical import encode
from api_snapshot.errors import (
    DecodeError,
    FieldAssertionError,
    PathNotFoundError,
    ResponseAssertionError,
    SnapshotMismatchError,
    UnsupportedShapeError,
)
from api_snapshot.field_path import MISSING

BODY = {"bool": True, "number": 46, "float": 46.1, "string": "golang"}


# =============================================================================
# Body Snapshot Tests
# =============================================================================


class TestBodySnap:
    def test_records_then_matches(self, engine, store, response_factory):
        check = body_snap("find-me-snap-test", {}, engine)
        check(response_factory(BODY))
        check(response_factory(BODY))
        assert store.read("find-me-snap-test-body") == encode(BODY)

    def test_file_contents_are_indented_json(self, engine, snapshot_dir, response_factory):
        body_snap("indent", [], engine)(response_factory(BODY))
        contents = (snapshot_dir / "indent-body.snap").read_text()
        assert contents == json.dumps(BODY, indent=2, sort_keys=True)

    def test_mismatch_raises_with_url_and_diff(self, engine, response_factory):
        check = body_snap("find-me-snap-test", {}, engine)
        check(response_factory(BODY))

        changed = {k: v for k, v in BODY.items() if k != "string"}
        with pytest.raises(SnapshotMismatchError) as exc_info:
            check(response_factory(changed, url="http://nickrandall.com"))

        error = exc_info.value
        assert isinstance(error, AssertionError)
        assert error.url == "http://nickrandall.com"
        assert '-  "string": "golang"' in error.diff
        assert "Body test for url 'http://nickrandall.com' failed." in str(error)

    def test_url_unknown_without_request(self, engine, response_factory):
        check = body_snap("no-request", [], engine)
        check(response_factory({"a": 1}))
        with pytest.raises(SnapshotMismatchError) as exc_info:
            check(response_factory({"a": 2}, url=None))
        assert exc_info.value.url == "<unknown>"

    def test_ignored_fields_redacted(self, engine, store, response_factory):
        """Volatile fields are excluded before recording and comparing."""
        check = body_snap("redacted", {"ts": ignore_field}, engine)
        check(response_factory({"id": "x", "ts": 123}))
        check(response_factory({"id": "x", "ts": 456}))
        assert store.read("redacted-body") == encode({"id": "x"})

    def test_ignored_fields_in_every_array_object(self, engine, store, response_factory):
        check = body_snap("list", ["meta.created"], engine)
        check(response_factory([{"id": 1, "meta": {"created": 1}}, 7, {"id": 2, "meta": {"created": 2}}]))
        check(response_factory([{"id": 1, "meta": {"created": 9}}, 7, {"id": 2, "meta": {"created": 8}}]))
        assert store.read("list-body") == encode([{"id": 1, "meta": {}}, 7, {"id": 2, "meta": {}}])

    def test_unresolvable_ignore_path(self, engine, response_factory):
        check = body_snap("bad-path", ["id.value"], engine)
        with pytest.raises(PathNotFoundError):
            check(response_factory({"id": 5}))

    @pytest.mark.parametrize("body", ["text", 42, None])
    def test_scalar_body_rejected(self, engine, response_factory, body):
        check = body_snap("scalar", [], engine)
        with pytest.raises(UnsupportedShapeError):
            check(response_factory(body))

    def test_invalid_json_body(self, engine, response_factory):
        with pytest.raises(DecodeError):
            body_snap("invalid", [], engine)(response_factory(content=b"<html>"))

    def test_update_mode_accepts_new_body(self, engine, update_engine, store, response_factory):
        body_snap("update", [], engine)(response_factory({"a": 1}))
        body_snap("update", [], update_engine)(response_factory({"a": 2}))
        assert store.read("update-body") == encode({"a": 2})

    def test_custom_body_key_suffix(self, config, response_factory):
        from api_snapshot.engine import SnapshotEngine

        engine = SnapshotEngine(config.model_copy(update={"body_key_suffix": ".response"}))
        body_snap("users", [], engine)(response_factory({"a": 1}))
        assert engine.store.exists("users.response")


# =============================================================================
# Field Test Tests
# =============================================================================


class TestFieldTest:
    def test_validators_pass(self, response_factory):
        check = field_test(
            {"bool": field_is_bool, "number": field_is_number, "string": field_is_string}
        )
        check(response_factory(BODY))

    def test_first_failure_propagates(self, response_factory):
        check = field_test({"string": field_is_number})
        with pytest.raises(FieldAssertionError, match="'golang' is not a number"):
            check(response_factory(BODY))

    def test_nested_path(self, response_factory):
        field_test({"user.id": field_is_number})(response_factory({"user": {"id": 3}}))

    def test_array_checks_every_object(self, response_factory):
        check = field_test({"id": field_is_number})
        check(response_factory([{"id": 1}, "skipped", {"id": 2}]))
        with pytest.raises(FieldAssertionError):
            check(response_factory([{"id": 1}, {"id": "2"}]))

    def test_missing_field_reaches_validator(self, response_factory):
        seen = []
        field_test({"absent": seen.append})(response_factory({"a": 1}))
        assert seen == [MISSING]

    def test_path_not_found(self, response_factory):
        with pytest.raises(PathNotFoundError):
            field_test({"a.b": ignore_field})(response_factory({"a": 5}))

    def test_scalar_body_rejected(self, response_factory):
        with pytest.raises(UnsupportedShapeError):
            field_test({"a": ignore_field})(response_factory("text"))


# =============================================================================
# Body Assertion Tests
# =============================================================================


class TestBodyMatchString:
    @pytest.mark.parametrize("pattern", ["hello", "^hello world$", "world$", "he[a-z]+"])
    def test_matches(self, response_factory, pattern):
        body_match_string(pattern)(response_factory(content=b"hello world"))

    @pytest.mark.parametrize("pattern", ["foo", "bar"])
    def test_no_match(self, response_factory, pattern):
        with pytest.raises(ResponseAssertionError, match="pattern not found"):
            body_match_string(pattern)(response_factory(content=b"hello world"))


class TestBodyEquals:
    def test_exact(self, response_factory):
        body_equals("hello world")(response_factory(content=b"hello world"))

    @pytest.mark.parametrize("value", ["hello", "world", "foo", ""])
    def test_mismatch(self, response_factory, value):
        with pytest.raises(ResponseAssertionError, match="Bodies mismatch"):
            body_equals(value)(response_factory(content=b"hello world"))

    def test_one_trailing_newline_ignored(self, response_factory):
        response = response_factory(content=b"hello world\n")
        body_equals("hello world")(response)
        with pytest.raises(ResponseAssertionError):
            body_equals("hello world\n")(response)


class TestBodyLength:
    def test_from_body(self, response_factory):
        response = response_factory(content=b"hello world")
        body_length(11)(response)
        with pytest.raises(ResponseAssertionError, match="'11' should be equal to '10'"):
            body_length(10)(response)
        with pytest.raises(ResponseAssertionError):
            body_length(0)(response)

    def test_content_length_header_preferred(self, response_factory):
        response = response_factory(content=b"hi", headers={"Content-Length": "2"})
        body_length(2)(response)

    def test_zero_content_length_falls_back_to_body(self):
        import httpx

        response = httpx.Response(200, content=b"hello")
        response.headers["Content-Length"] = "0"
        body_length(5)(response)


class TestJsonEquals:
    def test_dict_any_key_order(self, response_factory):
        json_equals({"b": 2, "a": 1})(response_factory(content=b'{"a":1,"b":2}'))

    def test_string_and_bytes(self, response_factory):
        response = response_factory({"a": [1, 2]})
        json_equals('{"a": [1, 2]}')(response)
        json_equals(b'{"a": [1, 2]}')(response)

    def test_file_like(self, response_factory):
        json_equals(io.StringIO('{"a": 1}'))(response_factory({"a": 1}))

    def test_mismatch(self, response_factory):
        with pytest.raises(ResponseAssertionError, match="JSON mismatch"):
            json_equals({"a": 1})(response_factory({"a": 2}))

    def test_empty_body_is_null(self, response_factory):
        json_equals(None)(response_factory(content=b""))


# =============================================================================
# Field Validator Tests
# =============================================================================


class TestValidators:
    def test_ignore_field_accepts_anything(self):
        for value in (None, MISSING, 1, "x", [], {}):
            ignore_field(value)

    @pytest.mark.parametrize("value", [0, 46, 46.1, -1.5])
    def test_number(self, value):
        field_is_number(value)

    @pytest.mark.parametrize("value", [True, "1", None, MISSING, [1]])
    def test_not_number(self, value):
        with pytest.raises(FieldAssertionError):
            field_is_number(value)

    def test_bool(self):
        field_is_bool(False)
        with pytest.raises(FieldAssertionError, match="is not a boolean"):
            field_is_bool(0)

    def test_string(self):
        field_is_string("")
        with pytest.raises(FieldAssertionError, match="is not a string"):
            field_is_string(MISSING)
