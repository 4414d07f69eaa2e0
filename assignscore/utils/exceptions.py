"""
Custom exceptions for AssignScore.

This module defines the exception classes used throughout
AssignScore for error handling and reporting.
"""

from __future__ import annotations

from typing import Any, Optional


class AssignScoreError(Exception):
    """
    Base exception class for AssignScore.

    All custom exceptions in AssignScore should
    inherit from this base class.
    """

    def __init__(self, message: str = "", details: str = "") -> None:
        """
        Initialize exception.

        Args:
            message: Main error message
            details: Additional error details
        """
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class ValidationError(AssignScoreError):
    """
    Exception raised for input validation errors.

    This exception is used when caller input or configuration
    values fail validation checks.
    """

    def __init__(self, message: str = "Validation failed", field: str = "", value: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Validation error message
            field: Field name that failed validation
            value: Value that failed validation
        """
        details = ""
        if field:
            details += f"field: {field}"
        if value:
            if details:
                details += ", "
            details += f"value: {value}"

        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidRequestError(ValidationError):
    """Raised when an evaluation request misses a required field."""


class UnauthorizedError(AssignScoreError):
    """
    Raised when no authorization credential was forwarded by the caller.

    Authentication itself happens upstream; this only guards that a
    credential was present.
    """

    def __init__(self, message: str = "No authorization header") -> None:
        super().__init__(message)


class NotFoundError(AssignScoreError):
    """
    Exception raised when a submission or assignment does not exist.
    """

    def __init__(self, message: str = "Not found", resource: str = "", identifier: str = "") -> None:
        """
        Initialize not-found error.

        Args:
            message: Error message
            resource: Kind of record that was looked up
            identifier: Identifier that was looked up
        """
        details = ""
        if resource:
            details += f"resource: {resource}"
        if identifier:
            if details:
                details += ", "
            details += f"id: {identifier}"

        super().__init__(message, details)
        self.resource = resource
        self.identifier = identifier


class AlreadyEvaluatedError(AssignScoreError):
    """Raised under the ``reject`` policy when a submission already has an evaluation."""

    def __init__(self, submission_id: str) -> None:
        super().__init__("Submission already evaluated", f"submission: {submission_id}")
        self.submission_id = submission_id


class ProcessingError(AssignScoreError):
    """
    Exception raised for processing errors.

    This exception is used when similarity or grading
    computation fails.
    """

    def __init__(self, message: str = "Processing failed", operation: str = "",
                 original_error: str = "") -> None:
        """
        Initialize processing error.

        Args:
            message: Processing error message
            operation: Operation that failed
            original_error: Original error message
        """
        details = ""
        if operation:
            details += f"operation: {operation}"
        if original_error:
            if details:
                details += ", "
            details += f"error: {original_error}"

        super().__init__(message, details)
        self.operation = operation
        self.original_error = original_error


class StoreError(AssignScoreError):
    """
    Exception raised when a read or write against the content store fails.

    Store errors are terminal for the current request and are
    never retried.
    """

    def __init__(self, message: str = "Store operation failed", operation: str = "",
                 original_error: str = "") -> None:
        """
        Initialize store error.

        Args:
            message: Store error message
            operation: Store operation that failed
            original_error: Original error message
        """
        details = ""
        if operation:
            details += f"operation: {operation}"
        if original_error:
            if details:
                details += ", "
            details += f"error: {original_error}"

        super().__init__(message, details)
        self.operation = operation
        self.original_error = original_error


class EvaluationWriteError(StoreError):
    """
    Raised when persisting a computed evaluation fails.

    The computed result is attached so callers can still report it;
    the submission status may already have been changed.
    """

    def __init__(self, result: Any, operation: str = "", original_error: str = "") -> None:
        super().__init__("Failed to persist evaluation", operation, original_error)
        self.result = result


class ConfigurationError(AssignScoreError):
    """
    Exception raised for configuration errors.

    This exception is used when configuration files are invalid,
    missing, or contain invalid settings.
    """

    def __init__(self, message: str = "Configuration error", config_key: str = "",
                 config_value: str = "") -> None:
        """
        Initialize configuration error.

        Args:
            message: Configuration error message
            config_key: Configuration key that caused the error
            config_value: Invalid configuration value
        """
        details = ""
        if config_key:
            details += f"key: {config_key}"
        if config_value:
            if details:
                details += ", "
            details += f"value: {config_value}"

        super().__init__(message, details)
        self.config_key = config_key
        self.config_value = config_value


def get_error_context(exception: Exception) -> str:
    """
    Get a formatted error context string for logging.

    Args:
        exception: Exception to format

    Returns:
        Formatted error context string
    """
    if isinstance(exception, AssignScoreError):
        return str(exception)
    else:
        return f"{type(exception).__name__}: {str(exception)}"


def log_exception(logger, exception: Exception, context: Optional[str] = "") -> None:
    """
    Log an exception with appropriate level and context.

    Args:
        logger: Logger instance
        exception: Exception to log
        context: Additional context information
    """
    error_message = get_error_context(exception)

    if context:
        full_message = f"{context} - {error_message}"
    else:
        full_message = error_message

    if isinstance(exception, (ValidationError, ConfigurationError, UnauthorizedError,
                              NotFoundError, AlreadyEvaluatedError)):
        logger.warning(full_message)
    elif isinstance(exception, (ProcessingError, StoreError)):
        logger.error(full_message)
    else:
        logger.critical(full_message)
