"""Tests for sugarbit custom exceptions and JSON serialization."""

import json

import pytest

from sugarbit.core.exceptions import (
    ExitCode,
    FetchFailed,
    InvalidScale,
    MalformedPayload,
    MalformedTimestamp,
    exception_to_json,
    format_json_error,
)

pytestmark = pytest.mark.unit


class TestExitCodes:
    """Test exit code constants."""

    def test_exit_codes_are_distinct(self):
        codes = [
            ExitCode.SUCCESS,
            ExitCode.GENERAL_ERROR,
            ExitCode.MALFORMED_PAYLOAD,
            ExitCode.FETCH_FAILED,
            ExitCode.INVALID_SCALE,
        ]
        assert len(codes) == len(set(codes))

    def test_success_is_zero(self):
        assert ExitCode.SUCCESS == 0

    def test_exceptions_carry_exit_codes(self):
        assert MalformedTimestamp("x").exit_code == ExitCode.MALFORMED_PAYLOAD
        assert MalformedPayload("bad").exit_code == ExitCode.MALFORMED_PAYLOAD
        assert InvalidScale(0.0).exit_code == ExitCode.INVALID_SCALE
        assert FetchFailed("http://x", "down").exit_code == ExitCode.FETCH_FAILED


class TestMessages:
    """Test string representations."""

    def test_malformed_timestamp(self):
        exc = MalformedTimestamp("2024.13.01 - 10:00:00", "month out of range")
        assert str(exc) == "Malformed timestamp '2024.13.01 - 10:00:00': month out of range"

    def test_malformed_timestamp_default_reason(self):
        assert "invalid layout" in str(MalformedTimestamp("nope"))

    def test_malformed_payload_with_key(self):
        exc = MalformedPayload("value is not a number", key="2024.01.01 - 10:00:00")
        assert "entry '2024.01.01 - 10:00:00'" in str(exc)
        assert "value is not a number" in str(exc)

    def test_malformed_payload_without_key(self):
        assert str(MalformedPayload("expected an object")) == "Malformed payload: expected an object"

    def test_invalid_scale(self):
        assert "-1.0" in str(InvalidScale(-1.0))

    def test_fetch_failed_with_status(self):
        exc = FetchFailed("https://example.net/BG.json", "Not Found", status_code=404)
        assert str(exc) == "Could not fetch https://example.net/BG.json (HTTP 404): Not Found"

    def test_fetch_failed_without_status(self):
        assert "HTTP" not in str(FetchFailed("https://example.net/BG.json", "timed out"))

    def test_is_raisable(self):
        with pytest.raises(MalformedTimestamp):
            raise MalformedTimestamp("x")


class TestExceptionToJson:
    """Test exception_to_json."""

    def test_malformed_timestamp_fields(self):
        error = exception_to_json(MalformedTimestamp("x", "missing separator"))["error"]
        assert error["type"] == "MalformedTimestamp"
        assert error["text"] == "x"
        assert error["reason"] == "missing separator"
        assert error["exit_code"] == ExitCode.MALFORMED_PAYLOAD

    def test_malformed_payload_key_only_when_present(self):
        assert "key" not in exception_to_json(MalformedPayload("bad"))["error"]
        assert exception_to_json(MalformedPayload("bad", key="k"))["error"]["key"] == "k"

    def test_invalid_scale_fields(self):
        assert exception_to_json(InvalidScale(0.0))["error"]["value_ceiling"] == 0.0

    def test_fetch_failed_fields(self):
        error = exception_to_json(FetchFailed("https://example.net", "boom", 503))["error"]
        assert error["url"] == "https://example.net"
        assert error["status_code"] == 503

    def test_generic_exception(self):
        error = exception_to_json(RuntimeError("oops"))["error"]
        assert error["type"] == "RuntimeError"
        assert error["message"] == "oops"
        assert error["exit_code"] == ExitCode.GENERAL_ERROR

    def test_context_included(self):
        data = exception_to_json(MalformedPayload("bad"), context={"source": "BG.json"})
        assert data["error"]["context"] == {"source": "BG.json"}

    def test_format_json_error_is_valid_json(self):
        text = format_json_error(FetchFailed("https://example.net", "down"))
        assert json.loads(text)["error"]["type"] == "FetchFailed"
