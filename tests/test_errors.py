"""Tests for the CLI error handling decorator and exception hierarchy."""

import pytest
import structlog.testing
from gridmetrics.core import errors
from gridmetrics.core.errors import (
    ConfigurationError,
    ExitCode,
    GridMetricsError,
    IncidentParseError,
    InsufficientDataError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error_class,exit_code",
        [
            (GridMetricsError, ExitCode.UNKNOWN_ERROR),
            (ConfigurationError, ExitCode.CONFIG_ERROR),
            (ValidationError, ExitCode.VALIDATION_ERROR),
            (IncidentParseError, ExitCode.VALIDATION_ERROR),
            (InsufficientDataError, ExitCode.VALIDATION_ERROR),
        ],
    )
    def test_exit_codes(self, error_class, exit_code):
        assert error_class("boom").exit_code == exit_code

    def test_details_default_to_empty(self):
        error = IncidentParseError("bad record")

        assert error.message == "bad record"
        assert error.details == {}
        assert isinstance(error, ValidationError)


class TestMainWithErrorHandling:
    """Test exit code translation."""

    def test_passes_through_return_value(self):
        @main_with_error_handling()
        def command():
            return ExitCode.WARNING

        assert command() == 1

    def test_gridmetrics_error(self):
        @main_with_error_handling()
        def command():
            raise InsufficientDataError("no data", details={"incident_id": "x"})

        assert command() == 12

    def test_keyboard_interrupt(self):
        @main_with_error_handling()
        def command():
            raise KeyboardInterrupt

        assert command() == 130

    def test_unexpected_error(self):
        @main_with_error_handling(log_errors=False)
        def command():
            raise RuntimeError("oops")

        assert command() == 127

    def test_traceback_printed_when_requested(self, capsys):
        @main_with_error_handling(show_traceback=True, log_errors=False)
        def command():
            raise ConfigurationError("bad")

        assert command() == 10
        assert "Traceback" in capsys.readouterr().err

    def test_report_receives_user_message(self):
        messages = []

        @main_with_error_handling(report=messages.append, log_errors=False)
        def analyze_command():
            raise InsufficientDataError("no data", details={"incident_id": "x"})

        assert analyze_command() == 12
        assert messages == ["no data (incident_id=x)"]

    def test_report_on_unexpected_error(self):
        messages = []

        @main_with_error_handling(report=messages.append, log_errors=False)
        def command():
            raise RuntimeError("oops")

        assert command() == 127
        assert messages == ["Unexpected RuntimeError: oops"]

    def test_error_event_names_command(self, monkeypatch):
        captured = structlog.testing.CapturingLogger()
        monkeypatch.setattr(errors, "logger", captured)

        @main_with_error_handling()
        def export_command():
            raise ConfigurationError("bad", details={"fields": "total_customers"})

        assert export_command() == 10

        call = captured.calls[0]
        assert call.method_name == "error"
        assert call.args == ("command_error",)
        assert call.kwargs["command"] == "export"
        assert call.kwargs["fields"] == "total_customers"
        assert call.kwargs["exit_code"] == 10

    def test_preserves_function_metadata(self):
        @main_with_error_handling()
        def my_command():
            """Docstring."""
            return 0

        assert my_command.__name__ == "my_command"
        assert my_command.__doc__ == "Docstring."


class TestFormatErrorMessage:
    def test_without_details(self):
        assert format_error_message(ConfigurationError("bad")) == "bad"

    def test_with_details(self):
        error = InsufficientDataError("no data", details={"incident_id": "x"})

        assert format_error_message(error) == "no data (incident_id=x)"
