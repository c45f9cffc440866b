"""
Domain Layer - error taxonomy of the evaluation engine.
"""

from evalcore.core.domain.exceptions import (
    ConfigurationException,
    CriterionTimeoutException,
    EvaluationException,
    EvaluatorNotFoundException,
    InsufficientDataException,
    ResultImportException,
    UnsupportedFormatException,
)

__all__ = [
    "EvaluationException",
    "ConfigurationException",
    "EvaluatorNotFoundException",
    "InsufficientDataException",
    "CriterionTimeoutException",
    "UnsupportedFormatException",
    "ResultImportException",
]
