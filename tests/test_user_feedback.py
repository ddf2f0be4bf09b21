"""Tests for user feedback system."""

from io import StringIO

from mclaunch.core.error_handling import ErrorCategory, ErrorInfo, ErrorSeverity
from mclaunch.core.user_feedback import UserFeedback


class TerminalStream(StringIO):
    def isatty(self):
        return True


class TestUserFeedback:
    """Test message routing and confirmation."""

    def test_info_goes_to_stdout(self, capsys):
        UserFeedback().info("Starting")

        captured = capsys.readouterr()
        assert "Starting" in captured.out
        assert captured.err == ""

    def test_error_goes_to_stderr(self, capsys):
        UserFeedback().error("Broken")

        captured = capsys.readouterr()
        assert "Broken" in captured.err
        assert captured.out == ""

    def test_quiet_hides_info(self, capsys):
        feedback = UserFeedback(quiet=True)
        feedback.info("hidden")
        feedback.show_summary("Changes", ["demo: false -> true"])
        feedback.warning("shown")
        feedback.error("still shown")

        captured = capsys.readouterr()
        assert "hidden" not in captured.out
        assert "Changes" not in captured.out
        assert "shown" in captured.out
        assert "still shown" in captured.err

    def test_debug_needs_verbose(self, capsys):
        UserFeedback().debug("quiet debug")
        UserFeedback(verbose=True).debug("loud debug")

        out = capsys.readouterr().out
        assert "quiet debug" not in out
        assert "loud debug" in out

    def test_no_color_when_piped(self, capsys):
        UserFeedback().success("Server stopped")

        out = capsys.readouterr().out
        assert "Server stopped" in out
        assert "\033[" not in out

    def test_color_on_terminal(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        terminal = TerminalStream()
        monkeypatch.setattr("sys.stdout", terminal)

        UserFeedback().success("Server stopped")

        assert terminal.getvalue().startswith("\033[92m")
        assert terminal.getvalue().rstrip("\n").endswith("\033[0m")

    def test_no_color_variable(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        terminal = TerminalStream()
        monkeypatch.setattr("sys.stdout", terminal)

        UserFeedback().success("Server stopped")

        assert "\033[" not in terminal.getvalue()

    def test_display_error_info(self, capsys):
        info = ErrorInfo(
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.HIGH,
            message="Server jar not found: /srv/server.jar",
            recovery_suggestions=["Check the jar filename"],
        )

        UserFeedback().display_error_info(info)

        captured = capsys.readouterr()
        assert "Not Found: Server jar not found" in captured.err
        assert "1. Check the jar filename" in captured.out

    def test_display_error_info_details_when_verbose(self, capsys):
        info = ErrorInfo(
            category=ErrorCategory.FILE_OPERATION,
            severity=ErrorSeverity.MEDIUM,
            message="Cannot write settings file",
            details="disk full",
        )

        UserFeedback().display_error_info(info)
        assert "disk full" not in capsys.readouterr().out

        UserFeedback(verbose=True).display_error_info(info)
        assert "Details: disk full" in capsys.readouterr().out


class TestConfirm:
    def test_yes(self):
        prompts = []

        def answer(prompt):
            prompts.append(prompt)
            return "y"

        assert UserFeedback(input_func=answer).confirm("Start?") is True
        assert prompts[0].endswith("Start? [y/N]: ")

    def test_no(self):
        feedback = UserFeedback(input_func=lambda prompt: "no")

        assert feedback.confirm("Start?", default=True) is False

    def test_empty_answer_uses_default(self):
        feedback = UserFeedback(input_func=lambda prompt: "")

        assert feedback.confirm("Start?", default=True) is True
        assert feedback.confirm("Start?", default=False) is False

    def test_end_of_input_declines(self):
        def closed(prompt):
            raise EOFError

        assert UserFeedback(input_func=closed).confirm("Start?", default=True) is False

    def test_quiet_still_asks(self):
        prompts = []

        def answer(prompt):
            prompts.append(prompt)
            return "n"

        feedback = UserFeedback(quiet=True, input_func=answer)
        assert feedback.confirm("Start?", default=True) is False
        assert len(prompts) == 1


class TestShowSummary:
    def test_summary(self, capsys):
        UserFeedback().show_summary("Changes", ["demo: false -> true"])

        out = capsys.readouterr().out
        assert "Changes" in out
        assert "demo: false -> true" in out
