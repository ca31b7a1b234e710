"""Tests for sugarbit output utilities."""

import json
from io import StringIO
from unittest.mock import patch

import pytest

from sugarbit.core.exceptions import ExitCode, FetchFailed, InvalidScale
from sugarbit.utils.output import handle_error, print_json

pytestmark = pytest.mark.unit


class TestHandleError:
    """Tests for handle_error."""

    def test_returns_exception_exit_code(self):
        with patch("sugarbit.utils.output.print_error"):
            assert handle_error(InvalidScale(0.0)) == ExitCode.INVALID_SCALE

    def test_generic_exception_is_general_error(self):
        with patch("sugarbit.utils.output.print_error"):
            assert handle_error(RuntimeError("boom")) == ExitCode.GENERAL_ERROR

    def test_rich_mode_prints_message(self):
        with patch("sugarbit.utils.output.print_error") as mock_print:
            handle_error(FetchFailed("https://example.net", "down"))
        mock_print.assert_called_once_with("Could not fetch https://example.net: down")

    def test_json_mode_prints_json(self, capsys):
        exit_code = handle_error(FetchFailed("https://example.net", "down"), json_errors=True,
                                 context={"source": "https://example.net"})
        data = json.loads(capsys.readouterr().out)
        assert data["error"]["type"] == "FetchFailed"
        assert data["error"]["context"] == {"source": "https://example.net"}
        assert exit_code == ExitCode.FETCH_FAILED


class TestPrintJson:
    """Tests for print_json."""

    def test_to_file(self):
        out = StringIO()
        print_json({"now": 1, "timescale": "3h"}, file=out)
        assert json.loads(out.getvalue()) == {"now": 1, "timescale": "3h"}

    def test_non_serializable_values_stringified(self):
        out = StringIO()
        print_json({"path": object}, file=out)
        assert "class" in json.loads(out.getvalue())["path"]
