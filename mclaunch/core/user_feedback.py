"""User-facing console messages for mclaunch."""

import os
import sys
from enum import Enum
from typing import Callable, List, TextIO

from mclaunch.core.error_handling import ErrorInfo, ErrorSeverity


class FeedbackLevel(Enum):
    """Feedback level for user messages."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


_COLORS = {
    FeedbackLevel.DEBUG: "\033[90m",  # Dark gray
    FeedbackLevel.INFO: "\033[94m",  # Blue
    FeedbackLevel.WARNING: "\033[93m",  # Yellow
    FeedbackLevel.ERROR: "\033[91m",  # Red
    FeedbackLevel.SUCCESS: "\033[92m",  # Green
}
_RESET = "\033[0m"

_ICONS = {
    FeedbackLevel.DEBUG: "🔍",
    FeedbackLevel.INFO: "ℹ️",
    FeedbackLevel.WARNING: "⚠️",
    FeedbackLevel.ERROR: "❌",
    FeedbackLevel.SUCCESS: "✅",
}

_SEVERITY_ICONS = {
    ErrorSeverity.LOW: "⚠️",
    ErrorSeverity.MEDIUM: "❌",
    ErrorSeverity.HIGH: "🚨",
    ErrorSeverity.CRITICAL: "💥",
}


def _use_color(stream: TextIO) -> bool:
    # The server console shares these streams; keep escapes out of pipes and logs
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class UserFeedback:
    """Messages printed around the editor and the server console.

    Errors go to stderr, everything else to stdout. ``quiet`` hides info and
    debug lines but never prompts, warnings or errors.
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        input_func: Callable[[str], str] = input,
    ):
        """Initialize user feedback.

        Args:
            verbose: Also show debug messages
            quiet: Suppress info and debug messages
            input_func: Function used to read confirmation answers
        """
        self.verbose = verbose
        self.quiet = quiet
        self.input_func = input_func

    def info(self, message: str) -> None:
        self._display(FeedbackLevel.INFO, message)

    def success(self, message: str) -> None:
        self._display(FeedbackLevel.SUCCESS, message)

    def warning(self, message: str) -> None:
        self._display(FeedbackLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._display(FeedbackLevel.ERROR, message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbose mode enabled)."""
        if self.verbose:
            self._display(FeedbackLevel.DEBUG, message)

    def display_error_info(self, error_info: ErrorInfo) -> None:
        """Show an error recorded by ErrorHandler with its suggested actions.

        Args:
            error_info: Error information to display
        """
        icon = _SEVERITY_ICONS.get(error_info.severity, "❌")
        category = error_info.category.value.replace("_", " ").title()

        self.error(f"{icon} {category}: {error_info.message}")

        if self.verbose:
            if error_info.details:
                self.info(f"Details: {error_info.details}")
            if error_info.context:
                self.debug(f"Context: {error_info.context}")

        if error_info.recovery_suggestions:
            self.info("Suggested actions:")
            for i, suggestion in enumerate(error_info.recovery_suggestions, 1):
                self.info(f"  {i}. {suggestion}")

    def _display(self, level: FeedbackLevel, message: str) -> None:
        if self.quiet and level in (FeedbackLevel.DEBUG, FeedbackLevel.INFO):
            return

        stream = sys.stderr if level == FeedbackLevel.ERROR else sys.stdout
        text = f"{_ICONS[level]} {message}"
        if _use_color(stream):
            text = f"{_COLORS[level]}{text}{_RESET}"
        print(text, file=stream, flush=True)

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question.

        An empty answer takes ``default``. End of input counts as "no", the
        same way the settings editor treats it as cancel.
        """
        default_text = " [Y/n]" if default else " [y/N]"
        try:
            response = self.input_func(f"❓ {message}{default_text}: ").strip().lower()
        except EOFError:
            return False

        if not response:
            return default

        return response in ["y", "yes", "true", "1"]

    def show_summary(self, title: str, items: List[str]) -> None:
        """Show a summary with title and bullet points.

        Args:
            title: Summary title
            items: List of summary items
        """
        self.info(f"📋 {title}")
        for item in items:
            self.info(f"  • {item}")
