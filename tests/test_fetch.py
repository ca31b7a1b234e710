"""Tests for sugarbit/fetch.py - HTTP and file payload sources."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from sugarbit.core.config import NO_CACHE_HEADERS
from sugarbit.core.exceptions import FetchFailed, MalformedPayload
from sugarbit.fetch import fetch_payload, load_payload_file, parse_last_modified

pytestmark = pytest.mark.unit

URL = "https://example.net/reports/BG.json"


def make_session(payload=None, headers=None, status_code=200, json_error=None):
    """Build a mock requests session returning one canned response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {}
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error", response=resp
        )
    session = MagicMock()
    session.get.return_value = resp
    return session


class TestParseLastModified:
    """Test parse_last_modified."""

    def test_http_date(self):
        assert parse_last_modified("Wed, 21 Oct 2015 07:28:00 GMT") == 1445412480

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_missing_or_garbage(self, value):
        assert parse_last_modified(value) is None

    def test_naive_date_ignored(self):
        assert parse_last_modified("2015-10-21 07:28:00") is None


class TestFetchPayload:
    """Test fetch_payload."""

    def test_success(self, two_reading_payload):
        session = make_session(two_reading_payload, {"Last-Modified": "Wed, 21 Oct 2015 07:28:00 GMT"})
        result = fetch_payload(URL, session=session)
        assert result.payload == two_reading_payload
        assert result.last_modified == 1445412480

    def test_sends_no_cache_headers_by_default(self):
        session = make_session({})
        fetch_payload(URL, timeout=2.5, session=session)
        session.get.assert_called_once_with(URL, headers=NO_CACHE_HEADERS, timeout=2.5)

    def test_custom_headers(self):
        session = make_session({})
        fetch_payload(URL, headers={"Cache-Control": "no-store"}, session=session)
        assert session.get.call_args.kwargs["headers"] == {"Cache-Control": "no-store"}

    def test_missing_last_modified(self):
        assert fetch_payload(URL, session=make_session({})).last_modified is None

    def test_http_error(self):
        with pytest.raises(FetchFailed) as exc_info:
            fetch_payload(URL, session=make_session(status_code=404))
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    def test_connection_error(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(FetchFailed, match="connection refused") as exc_info:
            fetch_payload(URL, session=session)
        assert exc_info.value.status_code is None

    def test_timeout(self):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(FetchFailed):
            fetch_payload(URL, session=session)

    def test_body_not_json(self):
        session = make_session(json_error=ValueError("Expecting value"))
        with pytest.raises(MalformedPayload, match="not JSON"):
            fetch_payload(URL, session=session)

    def test_body_not_an_object(self):
        with pytest.raises(MalformedPayload, match="expected an object"):
            fetch_payload(URL, session=make_session([1, 2, 3]))


class TestLoadPayloadFile:
    """Test load_payload_file."""

    def test_reads_object(self, tmp_path, two_reading_payload):
        path = tmp_path / "BG.json"
        path.write_text(json.dumps(two_reading_payload))
        result = load_payload_file(path)
        assert result.payload == two_reading_payload
        assert result.last_modified is None

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "BG.json"
        path.write_text("{}")
        assert load_payload_file(str(path)).payload == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "BG.json"
        path.write_text("{not json")
        with pytest.raises(MalformedPayload, match="not JSON"):
            load_payload_file(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "BG.json"
        path.write_text("[]")
        with pytest.raises(MalformedPayload):
            load_payload_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_payload_file(tmp_path / "missing.json")
