"""Tests for output module."""

import json

import pytest

from connections_cloud_oauth.errors import AuthorizationError, ConfigurationError
from connections_cloud_oauth.output import OutputHandler, format_error_json, format_json


class TestFormatJson:
    """Tests for format_json function."""

    def test_format_success(self) -> None:
        """Test formatting successful response."""
        parsed = json.loads(format_json({"key": "value"}))
        assert parsed["success"] is True
        assert parsed["data"] == {"key": "value"}

    def test_format_error_passthrough(self) -> None:
        """Test that error dicts are emitted as-is."""
        parsed = json.loads(format_json({"success": False, "error": {}}, success=False))
        assert parsed == {"success": False, "error": {}}


class TestFormatErrorJson:
    """Tests for format_error_json function."""

    def test_plain_error(self) -> None:
        """Test a configuration error."""
        parsed = json.loads(format_error_json(ConfigurationError("no hostname"), help_text="set it"))

        assert parsed["success"] is False
        assert parsed["error"] == {
            "type": "ConfigurationError",
            "message": "no hostname",
            "help": "set it",
        }

    def test_authorization_error_fields(self) -> None:
        """Test that provider error fields are included."""
        error = AuthorizationError("Boom", "server_error", "https://docs.example.com/err")

        details = json.loads(format_error_json(error))["error"]

        assert details["code"] == "server_error"
        assert details["status"] == 502
        assert details["uri"] == "https://docs.example.com/err"

    def test_custom_error_type(self) -> None:
        """Test overriding the reported error type."""
        details = json.loads(format_error_json(ValueError("x"), error_type="Custom"))["error"]
        assert details["type"] == "Custom"


class TestOutputHandler:
    """Tests for OutputHandler class."""

    def test_success_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test success output in JSON mode."""
        OutputHandler(json_mode=True).success({"url": "https://x"}, human_message="ignored")

        parsed = json.loads(capsys.readouterr().out)
        assert parsed["data"] == {"url": "https://x"}

    def test_success_human(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test success output in human mode."""
        OutputHandler().success({}, human_message="https://x")
        assert capsys.readouterr().out.strip() == "https://x"

    def test_fields_aligned(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test labelled field output."""
        OutputHandler().fields({"code": "server_error", "status": 502, "uri": None})

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["code", "server_error"]
        assert lines[1].split() == ["status", "502"]
        assert lines[2].strip() == "uri"

    def test_error_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that errors exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            OutputHandler().error(ConfigurationError("bad"), help_text="fix it")

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Error: bad" in err
        assert "fix it" in err
