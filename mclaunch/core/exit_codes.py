"""Exit codes for mclaunch."""

import signal
from enum import IntEnum
from typing import Any, Dict, Optional

from mclaunch.core.error_handling import ErrorCategory, ErrorSeverity


class ExitCode(IntEnum):
    """Exit codes for failures raised by the tool itself.

    Once the server is running the tool exits with the server's own code
    instead, see ExitCodeManager.from_process_status.
    """

    # Success
    SUCCESS = 0

    # General errors (1-10)
    GENERAL_ERROR = 1
    INVALID_ARGUMENTS = 2

    # Configuration errors (11-20)
    CONFIGURATION_ERROR = 11
    INVALID_CONFIG_FILE = 12
    SETTINGS_PARSE_ERROR = 13

    # File operation errors (21-30)
    FILE_NOT_FOUND = 21
    PERMISSION_DENIED = 22
    DISK_SPACE_ERROR = 23
    FILE_OPERATION_ERROR = 24

    # Process errors (31-40)
    SPAWN_FAILED = 31
    RUNTIME_NOT_FOUND = 32

    # Validation errors (61-70)
    VALIDATION_FAILED = 61

    # Terminated by SIGINT
    INTERRUPTED = 130


class ExitCodeManager:
    """Maps errors and child process statuses to exit codes."""

    def __init__(self):
        """Initialize exit code manager."""
        self._error_to_exit_code: Dict[ErrorCategory, ExitCode] = {
            ErrorCategory.CONFIGURATION: ExitCode.CONFIGURATION_ERROR,
            ErrorCategory.FILE_OPERATION: ExitCode.FILE_OPERATION_ERROR,
            ErrorCategory.SETTINGS_PARSE: ExitCode.SETTINGS_PARSE_ERROR,
            ErrorCategory.VALIDATION: ExitCode.VALIDATION_FAILED,
            ErrorCategory.NOT_FOUND: ExitCode.FILE_NOT_FOUND,
            ErrorCategory.PROCESS_SPAWN: ExitCode.SPAWN_FAILED,
        }

    def get_exit_code_for_error(
        self,
        category: ErrorCategory,
        severity: ErrorSeverity,
        error_message: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> ExitCode:
        """Get appropriate exit code for an error.

        Args:
            category: Error category
            severity: Error severity
            error_message: Error message for specific error detection
            context: Error context information

        Returns:
            Appropriate exit code
        """
        context = context or {}
        message = error_message.lower()

        if category == ErrorCategory.CONFIGURATION:
            if "config file" in message or context.get("config_path"):
                return ExitCode.INVALID_CONFIG_FILE

        elif category == ErrorCategory.FILE_OPERATION:
            if "permission denied" in message:
                return ExitCode.PERMISSION_DENIED
            elif "no space" in message or "disk space" in message:
                return ExitCode.DISK_SPACE_ERROR

        elif category == ErrorCategory.PROCESS_SPAWN:
            if "not found" in message:
                return ExitCode.RUNTIME_NOT_FOUND

        return self._error_to_exit_code.get(category, ExitCode.GENERAL_ERROR)

    def from_process_status(self, returncode: int) -> int:
        """Translate a child process return code into this process' exit code.

        Negative codes (killed by a signal on POSIX) become 128 + signum,
        matching what a shell reports.
        """
        if returncode < 0:
            return 128 + (-returncode)
        return returncode

    def describe_process_exit(self, exit_code: int) -> str:
        """Human-readable description of a server exit code."""
        if exit_code > 128:
            try:
                name = signal.Signals(exit_code - 128).name
            except ValueError:
                name = f"signal {exit_code - 128}"
            return f"Server terminated by {name}"
        return f"Server exited with code {exit_code}"
