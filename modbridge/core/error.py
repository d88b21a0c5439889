"""
Error management module.
"""
import logging
import traceback
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(Enum):
    """Error classification types."""
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    UNMATCHED = "unmatched"
    PARTIAL_DEPENDENCY_FAILURE = "partial_dependency_failure"
    INVALID_PARAMS = "invalid_params"
    UNKNOWN = "unknown"


class ModBridgeError(Exception):
    """Base exception for modbridge errors."""

    error_type = ErrorType.UNKNOWN

    def __init__(self, message: str, error_type: Optional[ErrorType] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        if error_type is not None:
            self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "error_type": self.error_type.value,
            "message": str(self),
            "details": self.details,
        }


class NotFoundError(ModBridgeError):
    """A record or build is unknown to the provider."""
    error_type = ErrorType.NOT_FOUND


class UnavailableError(ModBridgeError):
    """Transport or provider failure."""
    error_type = ErrorType.UNAVAILABLE


class UnmatchedError(ModBridgeError):
    """No build survived every selection tier."""
    error_type = ErrorType.UNMATCHED


class PartialDependencyFailureError(ModBridgeError):
    """
    One or more required dependencies failed to install.

    Only raised on request (``DependencyResult.raise_for_failures``); the
    resolver itself reports failures as values.
    """
    error_type = ErrorType.PARTIAL_DEPENDENCY_FAILURE

    def __init__(self, message: str, result: Any = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.result = result


def classify_error(error: Exception) -> ErrorType:
    """
    Classify error type from exception.

    Args:
        error: Exception instance

    Returns:
        ErrorType enum value
    """
    if isinstance(error, ModBridgeError):
        return error.error_type

    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorType.UNAVAILABLE

    error_str = str(error).lower()

    if any(keyword in error_str for keyword in ["not found", "404", "unknown project", "no such"]):
        return ErrorType.NOT_FOUND

    if any(keyword in error_str for keyword in ["network", "connection", "timeout", "timed out", "http", "unavailable", "offline"]):
        return ErrorType.UNAVAILABLE

    if any(keyword in error_str for keyword in ["invalid", "validation", "parameter"]):
        return ErrorType.INVALID_PARAMS

    return ErrorType.UNKNOWN


def log_error(
    error: Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    level: str = "ERROR",
) -> Dict[str, Any]:
    """
    Log error with context and return error info.

    Args:
        error: Exception instance
        logger: Logger instance (if None, uses default)
        context: Additional context information
        level: Logging level

    Returns:
        Dictionary with error information
    """
    if logger is None:
        logger = logging.getLogger("modbridge")

    error_type = classify_error(error)
    error_info = {
        "error_type": error_type.value,
        "error_class": type(error).__name__,
        "message": str(error),
        "context": context or {},
    }

    log_method = getattr(logger, level.lower(), logger.error)
    log_method(
        "[%s] %s: %s",
        error_type.value,
        type(error).__name__,
        error,
        extra={"error_info": error_info},
    )

    if logger.isEnabledFor(logging.DEBUG) and error.__traceback__ is not None:
        logger.debug(
            "Traceback:\n%s",
            "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        )

    return error_info


def handle_error(
    error: Exception,
    logger: Optional[logging.Logger] = None,
    context: Optional[Dict[str, Any]] = None,
    raise_again: bool = False,
) -> Dict[str, Any]:
    """
    Handle error: classify, log, and optionally re-raise.

    Raises:
        The original exception if raise_again is True
    """
    error_info = log_error(error, logger, context)

    if raise_again:
        raise error

    return error_info
