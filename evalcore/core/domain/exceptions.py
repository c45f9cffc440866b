"""
Evaluation Exceptions

These exceptions represent violated evaluation invariants: invalid configuration,
unknown evaluators, statistical preconditions and export/import failures.
Per-criterion and per-subject errors are recovered where they happen; the
exceptions below are the ones that reach the caller.
"""

from typing import Any


class EvaluationException(Exception):
    """
    Base exception for all evaluation-related errors.

    Provides a standardized way to communicate invariant violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize evaluation exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "CONFIGURATION_ERROR")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reports and logs."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationException(EvaluationException):
    """
    Raised when an evaluator config, suite or request is invalid.

    Always raised before any subject is evaluated.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        criterion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if field:
            details["field"] = field
        if criterion:
            details["criterion"] = criterion
        super().__init__(message, "CONFIGURATION_ERROR", details)
        self.field = field
        self.criterion = criterion


class EvaluatorNotFoundException(ConfigurationException):
    """Raised when a request names an evaluator that is not registered."""

    def __init__(self, evaluator_name: str, message: str | None = None):
        self.evaluator_name = evaluator_name
        msg = message or f"Evaluator '{evaluator_name}' not found or not configured"
        super().__init__(msg, field="evaluators", details={"evaluator": evaluator_name})
        self.code = "EVALUATOR_NOT_FOUND"


class InsufficientDataException(EvaluationException):
    """
    Raised when a statistical computation does not have enough data points.

    Fatal to that computation only.
    """

    def __init__(self, operation: str, required: int, available: int, message: str | None = None):
        self.operation = operation
        self.required = required
        self.available = available
        msg = message or (
            f"Insufficient data for {operation}: need at least {required} "
            f"data point{'s' if required != 1 else ''}, got {available}"
        )
        super().__init__(
            msg,
            "INSUFFICIENT_DATA",
            {"operation": operation, "required": required, "available": available},
        )


class CriterionTimeoutException(EvaluationException):
    """Raised internally when a criterion scorer exceeds its time budget."""

    def __init__(self, criterion: str, timeout: float):
        self.criterion = criterion
        self.timeout = timeout
        super().__init__(
            f"Criterion '{criterion}' timed out after {timeout:g}s",
            "CRITERION_TIMEOUT",
            {"criterion": criterion, "timeout": timeout},
        )


class UnsupportedFormatException(EvaluationException):
    """Raised when export or import is asked for an unknown format."""

    def __init__(self, format_name: str, operation: str = "export"):
        self.format_name = format_name
        self.operation = operation
        super().__init__(
            f"Unsupported {operation} format: {format_name}",
            "UNSUPPORTED_FORMAT",
            {"format": format_name, "operation": operation},
        )


class ResultImportException(EvaluationException):
    """Raised when imported data fails mapping or validation."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message, "RESULT_IMPORT_ERROR", {"field": field} if field else {})
