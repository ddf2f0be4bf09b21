"""Custom exceptions for mclaunch."""

from typing import Any, Dict, List, Optional

from mclaunch.core.error_handling import ErrorCategory, ErrorSeverity


class LauncherError(Exception):
    """Base exception for all mclaunch errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize launcher error.

        Args:
            message: Error message
            category: Error category
            severity: Error severity level
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.details = details
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []


class FileOperationError(LauncherError):
    """Reading or writing the settings file failed."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize file operation error.

        Args:
            message: Error message
            file_path: Path to file that caused error
            operation: File operation that failed (read, write)
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if file_path:
            context["file_path"] = file_path
        if operation:
            context["operation"] = operation

        super().__init__(
            message=message,
            category=ErrorCategory.FILE_OPERATION,
            severity=ErrorSeverity.MEDIUM,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions
            or [
                "Check file permissions",
                "Make sure no other program has the settings file locked",
                "Verify disk space availability",
            ],
        )


class SettingsParseError(LauncherError):
    """The settings file content cannot be modelled."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize settings parse error.

        Args:
            message: Error message
            file_path: Path to the settings file
            line_number: 1-based line number of the offending line
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if file_path:
            context["file_path"] = file_path
        if line_number is not None:
            context["line_number"] = line_number

        super().__init__(
            message=message,
            category=ErrorCategory.SETTINGS_PARSE,
            severity=ErrorSeverity.HIGH,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions
            or [
                "Fix the settings file by hand",
                "Delete the settings file to regenerate the defaults",
            ],
        )


class ValidationError(LauncherError):
    """A setting value does not match the setting's type."""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize validation error.

        Args:
            message: Error message
            setting: Name of the setting being changed
            value: The rejected value
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if setting:
            context["setting"] = setting
        if value is not None:
            context["value"] = value

        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions or [],
        )


class NotFoundError(LauncherError):
    """The server jar or server directory does not exist."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize not found error.

        Args:
            message: Error message
            path: The path that was looked up
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if path:
            context["path"] = path

        super().__init__(
            message=message,
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.HIGH,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions
            or [
                "Check the jar filename and server directory",
                "Pass the server directory explicitly as the second argument",
            ],
        )


class SpawnError(LauncherError):
    """The server runtime process could not be created."""

    def __init__(
        self,
        message: str,
        executable: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize spawn error.

        Args:
            message: Error message
            executable: The interpreter that failed to start
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if executable:
            context["executable"] = executable

        super().__init__(
            message=message,
            category=ErrorCategory.PROCESS_SPAWN,
            severity=ErrorSeverity.CRITICAL,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions
            or [
                "Install a Java runtime and make sure it is on PATH",
                "Point MCLAUNCH_JAVA or [java].executable at the java binary",
                "Check that the executable has execute permission",
            ],
        )


class ConfigurationError(LauncherError):
    """The tool's own configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        recovery_suggestions: Optional[List[str]] = None,
    ):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused error
            details: Additional error details
            context: Error context information
            recovery_suggestions: Suggestions for error recovery
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            details=details,
            context=context,
            recovery_suggestions=recovery_suggestions
            or [
                "Review configuration file syntax",
                "Create a template with --create-config",
                "Unset MCLAUNCH_* environment variables with bad values",
            ],
        )
