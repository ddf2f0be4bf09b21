"""Error classification and reporting for the launcher."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors that can occur."""

    FILE_OPERATION = "file_operation"
    SETTINGS_PARSE = "settings_parse"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PROCESS_SPAWN = "process_spawn"
    CONFIGURATION = "configuration"


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    details: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    recovery_suggestions: Optional[List[str]] = None

    def __post_init__(self):
        if self.recovery_suggestions is None:
            self.recovery_suggestions = []


class ErrorHandler:
    """Turns exceptions into logged ErrorInfo records with suggestions."""

    def __init__(self):
        """Initialize error handler."""
        self.logger = logging.getLogger("mclaunch.error_handler")
        self.suggestion_handlers: Dict[ErrorCategory, Callable] = {}

        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        """Register default suggestion handlers."""
        self.suggestion_handlers[ErrorCategory.FILE_OPERATION] = (
            self._suggest_for_file_operation
        )
        self.suggestion_handlers[ErrorCategory.SETTINGS_PARSE] = (
            self._suggest_for_settings_parse
        )
        self.suggestion_handlers[ErrorCategory.NOT_FOUND] = self._suggest_for_not_found
        self.suggestion_handlers[ErrorCategory.PROCESS_SPAWN] = (
            self._suggest_for_process_spawn
        )
        self.suggestion_handlers[ErrorCategory.CONFIGURATION] = (
            self._suggest_for_configuration
        )

    def handle_error(
        self,
        exception: Exception,
        category: ErrorCategory,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """Record and log an error.

        Args:
            exception: The exception that occurred
            category: Category of error
            context: Additional context about the error

        Returns:
            ErrorInfo with recovery suggestions
        """
        error_info = ErrorInfo(
            category=category,
            severity=self._assess_severity(exception, category),
            message=str(exception),
            details=getattr(exception, "details", None),
            context=dict(getattr(exception, "context", None) or {}, **(context or {})),
        )

        existing = getattr(exception, "recovery_suggestions", None)
        if existing:
            error_info.recovery_suggestions = list(existing)
        elif category in self.suggestion_handlers:
            error_info.recovery_suggestions = self.suggestion_handlers[category](
                error_info
            )

        self._log_error(error_info)

        return error_info

    def _assess_severity(
        self, exception: Exception, category: ErrorCategory
    ) -> ErrorSeverity:
        """Assess the severity of an error.

        Args:
            exception: The exception
            category: Error category

        Returns:
            Error severity level
        """
        severity = getattr(exception, "severity", None)
        if isinstance(severity, ErrorSeverity):
            return severity

        if category == ErrorCategory.PROCESS_SPAWN:
            return ErrorSeverity.CRITICAL

        if category in [ErrorCategory.SETTINGS_PARSE, ErrorCategory.CONFIGURATION]:
            return ErrorSeverity.HIGH

        if category in [ErrorCategory.FILE_OPERATION, ErrorCategory.NOT_FOUND]:
            return ErrorSeverity.MEDIUM

        return ErrorSeverity.LOW

    def _log_error(self, error_info: ErrorInfo) -> None:
        """Log error information.

        Args:
            error_info: Error information to log
        """
        level_map = {
            ErrorSeverity.LOW: logging.WARNING,
            ErrorSeverity.MEDIUM: logging.ERROR,
            ErrorSeverity.HIGH: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL,
        }

        level = level_map[error_info.severity]

        self.logger.log(
            level, f"[{error_info.category.value.upper()}] {error_info.message}"
        )

        if error_info.details:
            self.logger.log(level, f"Details: {error_info.details}")

        if error_info.context:
            self.logger.debug(f"Context: {error_info.context}")

        if error_info.recovery_suggestions:
            self.logger.info(
                f"Recovery suggestions: {', '.join(error_info.recovery_suggestions)}"
            )

    def _suggest_for_file_operation(self, error_info: ErrorInfo) -> List[str]:
        suggestions = []

        if "permission denied" in error_info.message.lower():
            suggestions.extend(
                [
                    "Check permissions on the server directory",
                    "Run as the user that owns the server files",
                ]
            )

        suggestions.append("Verify disk space availability")
        return suggestions

    def _suggest_for_settings_parse(self, error_info: ErrorInfo) -> List[str]:
        suggestions = []

        if "duplicate" in error_info.message.lower():
            suggestions.append("Remove the repeated setting from the settings file")

        suggestions.append("Make sure the settings file is saved as UTF-8 text")
        return suggestions

    def _suggest_for_not_found(self, error_info: ErrorInfo) -> List[str]:
        return [
            "Check the spelling of the jar filename",
            "Pass the server directory explicitly as the second argument",
        ]

    def _suggest_for_process_spawn(self, error_info: ErrorInfo) -> List[str]:
        suggestions = []

        if "not found" in error_info.message.lower():
            suggestions.append("Install a Java runtime or set MCLAUNCH_JAVA")

        suggestions.append("Check that the Java executable is runnable")
        return suggestions

    def _suggest_for_configuration(self, error_info: ErrorInfo) -> List[str]:
        return [
            "Review configuration file syntax",
            "Create a template with --create-config",
        ]
