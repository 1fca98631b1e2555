"""Centralized handling of recoverable errors.

Teardown steps hand their failures to this module; it logs them with a
category and context and produces the one-line message shown to the user.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any

from errors import OperationCancelled
from logging_config import get_logger

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for user feedback."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for better organization."""
    GIT_OPERATION = "git_operation"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    SESSION_MANAGEMENT = "session_management"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    context: Optional[Dict[str, Any]] = None
    exception: Optional[Exception] = None
    traceback_str: Optional[str] = None


class ErrorHandler:
    """Logs recoverable errors and turns them into user-facing messages."""

    def handle_error(
        self,
        exception: Exception,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
        user_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> ErrorInfo:
        """Handle an error with logging and a user-facing message."""
        traceback_str = None
        if exception.__traceback__ is not None:
            traceback_str = "".join(traceback.format_exception(exception))

        error_info = ErrorInfo(
            category=category,
            severity=severity,
            message=str(exception),
            user_message=user_message or self._generate_user_message(exception, category),
            context=context or {},
            exception=exception,
            traceback_str=traceback_str
        )

        self._log_error(error_info)
        return error_info

    def handle_git_error(
        self,
        exception: Exception,
        operation: str,
        repo_path: Optional[Path] = None,
        severity: ErrorSeverity = ErrorSeverity.WARNING
    ) -> ErrorInfo:
        """Handle Git-specific errors with contextual information."""
        context = {
            "operation": operation,
            "repo_path": str(repo_path) if repo_path else None
        }

        return self.handle_error(
            exception=exception,
            category=ErrorCategory.GIT_OPERATION,
            severity=severity,
            user_message=self._generate_git_user_message(exception, operation),
            context=context
        )

    def handle_file_system_error(
        self,
        exception: Exception,
        operation: str,
        file_path: Optional[Path] = None,
        severity: ErrorSeverity = ErrorSeverity.WARNING
    ) -> ErrorInfo:
        """Handle file system errors with contextual information."""
        context = {
            "operation": operation,
            "file_path": str(file_path) if file_path else None
        }

        return self.handle_error(
            exception=exception,
            category=ErrorCategory.FILE_SYSTEM,
            severity=severity,
            user_message=self._generate_file_system_user_message(exception, operation, file_path),
            context=context
        )

    def handle_session_error(
        self,
        exception: Exception,
        window_name: str,
        severity: ErrorSeverity = ErrorSeverity.WARNING
    ) -> ErrorInfo:
        """Handle tmux errors; the tmux message is already user-readable."""
        return self.handle_error(
            exception=exception,
            category=ErrorCategory.SESSION_MANAGEMENT,
            severity=severity,
            user_message=str(exception),
            context={"window_name": window_name}
        )

    def handle_configuration_error(
        self,
        exception: Exception,
        config_key: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.WARNING
    ) -> ErrorInfo:
        """Handle configuration-related errors."""
        return self.handle_error(
            exception=exception,
            category=ErrorCategory.CONFIGURATION,
            severity=severity,
            user_message=self._generate_config_user_message(exception, config_key),
            context={"config_key": config_key}
        )

    def _log_error(self, error_info: ErrorInfo):
        """Log error information appropriately based on severity."""
        log_message = f"[{error_info.category.value}] {error_info.message}"

        if error_info.context:
            log_message += f" | Context: {error_info.context}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message, exc_info=error_info.exception)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
            if error_info.traceback_str:
                logger.debug(error_info.traceback_str)
        else:
            logger.info(log_message)

    def _generate_user_message(self, exception: Exception, category: ErrorCategory) -> str:
        """Generate user-friendly error message."""
        if category == ErrorCategory.GIT_OPERATION:
            return f"Git operation failed: {exception}"
        elif category == ErrorCategory.FILE_SYSTEM:
            return f"File system error: {exception}"
        elif category == ErrorCategory.CONFIGURATION:
            return f"Configuration error: {exception}"
        elif category == ErrorCategory.SESSION_MANAGEMENT:
            return f"Tmux error: {exception}"
        else:
            return f"An unexpected error occurred: {exception}"

    def _generate_git_user_message(self, exception: Exception, operation: str) -> str:
        """Generate user-friendly Git error message."""
        if isinstance(exception, OperationCancelled):
            return f"Cancelled while trying to {operation}"

        error_msg = str(exception).lower()

        if "not a git repository" in error_msg:
            return f"Failed to {operation}: not inside a git repository"
        elif "contains modified or untracked files" in error_msg:
            return f"Failed to {operation}: it contains modified or untracked files (use --force to remove anyway)"
        elif "is locked" in error_msg:
            return f"Failed to {operation}: the worktree is locked (use --force to remove anyway)"
        elif "permission denied" in error_msg:
            return f"Failed to {operation}: permission denied"
        else:
            return f"Failed to {operation}: {exception}"

    def _generate_file_system_user_message(
        self,
        exception: Exception,
        operation: str,
        file_path: Optional[Path]
    ) -> str:
        """Generate user-friendly file system error message."""
        path_str = str(file_path) if file_path else "the specified location"

        if isinstance(exception, PermissionError):
            return f"Failed to {operation}: permission denied accessing {path_str}"
        elif isinstance(exception, FileNotFoundError):
            return f"Failed to {operation}: {path_str} not found"
        else:
            return f"Failed to {operation}: {exception}"

    def _generate_config_user_message(
        self,
        exception: Exception,
        config_key: Optional[str]
    ) -> str:
        """Generate user-friendly configuration error message."""
        key_info = f" in '{config_key}'" if config_key else ""

        if "json" in type(exception).__name__.lower() or "expecting" in str(exception).lower():
            return f"Configuration file contains invalid JSON{key_info}, using defaults"
        else:
            return f"Configuration error{key_info}: {exception}"


# Global error handler instance
_error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return _error_handler


def handle_error(
    exception: Exception,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: ErrorSeverity = ErrorSeverity.WARNING,
    user_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> ErrorInfo:
    """Convenience function to handle errors using the global handler."""
    return _error_handler.handle_error(exception, category, severity, user_message, context)


def handle_git_error(
    exception: Exception,
    operation: str,
    repo_path: Optional[Path] = None,
    severity: ErrorSeverity = ErrorSeverity.WARNING
) -> ErrorInfo:
    """Convenience function to handle Git errors."""
    return _error_handler.handle_git_error(exception, operation, repo_path, severity)


def handle_file_system_error(
    exception: Exception,
    operation: str,
    file_path: Optional[Path] = None,
    severity: ErrorSeverity = ErrorSeverity.WARNING
) -> ErrorInfo:
    """Convenience function to handle file system errors."""
    return _error_handler.handle_file_system_error(exception, operation, file_path, severity)


def handle_session_error(
    exception: Exception,
    window_name: str,
    severity: ErrorSeverity = ErrorSeverity.WARNING
) -> ErrorInfo:
    """Convenience function to handle tmux errors."""
    return _error_handler.handle_session_error(exception, window_name, severity)


def handle_configuration_error(
    exception: Exception,
    config_key: Optional[str] = None,
    severity: ErrorSeverity = ErrorSeverity.WARNING
) -> ErrorInfo:
    """Convenience function to handle configuration errors."""
    return _error_handler.handle_configuration_error(exception, config_key, severity)
